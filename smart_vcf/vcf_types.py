"""Type definitions shared across the retrieval pipeline.

Regions, catalog entries and per-contig results are immutable value objects;
the only mutable state in a run lives inside a single worker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Literal, Optional, Union


class ErrorKind(str, Enum):
    """Reason a contig (or a single line) did not make it through."""
    MALFORMED_REGION = "MalformedRegion"
    MISSING_SOURCE = "MissingSource"
    NETWORK_ERROR = "NetworkError"
    DECODE_ERROR = "DecodeError"
    CHECKSUM_MISMATCH = "ChecksumMismatch"
    UNPARSEABLE = "Unparseable"
    CANCELLED = "Cancelled"
    OUTPUT_ERROR = "OutputError"
    INTERNAL_ERROR = "InternalError"


class RetrievalState(str, Enum):
    """Per-contig worker states, in the order a worker walks through them."""
    PENDING = "pending"
    RESOLVING = "resolving"
    FETCHING = "fetching"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({RetrievalState.DONE, RetrievalState.FAILED, RetrievalState.CANCELLED})


class Classification(str, Enum):
    """Keep/drop verdict for one decoded line."""
    KEEP = "keep"
    DROP = "drop"
    UNPARSEABLE = "unparseable"


@dataclass(frozen=True)
class Region:
    """Half-open, 0-based interval on a contig."""
    contig: str
    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class SourceEntry:
    """Where to download one contig from, and what it should hash to."""
    contig: str
    url: str
    expected_checksum: str
    algorithm: str = "md5"


@dataclass(frozen=True)
class ParsedRecord:
    """A data line with its contig and 1-based VCF position."""
    contig: str
    position: int
    raw_line: bytes

    @property
    def position0(self) -> int:
        return self.position - 1


@dataclass(frozen=True)
class HeaderLine:
    raw_line: bytes


@dataclass(frozen=True)
class Unparseable:
    raw_line: bytes
    reason: str


LineParse = Union[ParsedRecord, HeaderLine, Unparseable]

DigestAlgorithm = Literal["md5", "sha1", "sha224", "sha256", "sha384", "sha512", "blake2b", "blake2s"]


@dataclass
class RetrievalResult:
    """Outcome of one contig's worker.

    Built up by exactly one worker, then handed to the runner once the worker
    reaches a terminal state.
    """
    contig: str
    bytes_downloaded: int = 0
    records_kept: int = 0
    records_total: int = 0
    checksum_ok: bool = False
    error: Optional[ErrorKind] = None
    records_unparseable: int = 0
    header_lines: int = 0
    computed_checksum: Optional[str] = None
    expected_checksum: Optional[str] = None
    state: RetrievalState = RetrievalState.PENDING
    output_path: Optional[Path] = None
    url: Optional[str] = None
    elapsed_seconds: float = 0.0
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.state == RetrievalState.DONE

    @property
    def failed(self) -> bool:
        return not self.succeeded

    def to_dict(self) -> dict:
        return {
            "contig": self.contig,
            "state": self.state.value,
            "error": self.error.value if self.error else None,
            "checksum_ok": self.checksum_ok,
            "bytes_downloaded": self.bytes_downloaded,
            "records_total": self.records_total,
            "records_kept": self.records_kept,
            "records_unparseable": self.records_unparseable,
            "header_lines": self.header_lines,
            "computed_checksum": self.computed_checksum,
            "expected_checksum": self.expected_checksum,
            "output_path": str(self.output_path) if self.output_path else None,
            "url": self.url,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "message": self.message,
        }


@dataclass(frozen=True)
class RunSummary:
    """All per-contig results of one run, in contig order."""
    results: List[RetrievalResult] = field(default_factory=list)
    interrupted: bool = False

    @property
    def failed(self) -> List[RetrievalResult]:
        return [r for r in self.results if r.failed]

    @property
    def succeeded(self) -> List[RetrievalResult]:
        return [r for r in self.results if r.succeeded]

    @property
    def ok(self) -> bool:
        return not self.failed and not self.interrupted

    @property
    def exit_code(self) -> int:
        if self.interrupted:
            return 130
        return 0 if self.ok else 1
