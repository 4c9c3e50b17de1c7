"""Exceptions raised by the retrieval pipeline.

Every exception carries the ErrorKind it maps to, so a worker can turn any
of them into a terminal ``Failed(kind)`` result without a lookup table.
"""

from typing import Optional

from .vcf_types import ErrorKind


class RetrievalError(Exception):
    """Base class for per-contig retrieval failures."""
    kind: ErrorKind = ErrorKind.NETWORK_ERROR

    def __init__(self, message: str, contig: Optional[str] = None):
        super().__init__(message)
        self.contig = contig


class MalformedRegion(RetrievalError, ValueError):
    """A region with ``start >= end``; fatal to the whole run."""
    kind = ErrorKind.MALFORMED_REGION


class MissingSource(RetrievalError):
    kind = ErrorKind.MISSING_SOURCE


class NetworkError(RetrievalError):
    kind = ErrorKind.NETWORK_ERROR


class DecodeError(RetrievalError):
    """The compressed container itself is malformed or truncated."""
    kind = ErrorKind.DECODE_ERROR


class ChecksumMismatch(RetrievalError):
    kind = ErrorKind.CHECKSUM_MISMATCH

    def __init__(self, expected: str, actual: Optional[str], contig: Optional[str] = None):
        super().__init__(
            f"Checksum mismatch: expected {expected}, got {actual or 'indeterminate'}",
            contig=contig,
        )
        self.expected = expected
        self.actual = actual


class RetrievalCancelled(RetrievalError):
    kind = ErrorKind.CANCELLED


class OutputError(RetrievalError):
    """The local output file could not be written or moved into place."""
    kind = ErrorKind.OUTPUT_ERROR
