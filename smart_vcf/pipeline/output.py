"""
Per-contig output artifact.

Lines are written to ``<name>.part`` and only renamed to the final name once
the checksum is verified, so an interrupted or failed contig never leaves a
file that looks complete.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import pysam

from ..config import RetrievalConfig
from ..errors import OutputError
from .constants import (
    COMPRESSED_SUFFIX, PARTIAL_SUFFIX, PLAIN_SUFFIX, UNVERIFIED_SUFFIX
)

logger = logging.getLogger(__name__)


def output_path_for(contig: str, config: RetrievalConfig) -> Path:
    """Final output path for a contig, e.g. ``<output_dir>/chr1.vcf.gz``."""
    safe_contig = contig.replace(os.sep, "_")
    suffix = COMPRESSED_SUFFIX if config.compress_output else PLAIN_SUFFIX
    return config.output_dir / f"{config.output_prefix}{safe_contig}{suffix}"


def unverified_path_for(final_path: Path) -> Path:
    return final_path.with_name(final_path.name + UNVERIFIED_SUFFIX)


class OutputWriter:
    """Exclusive writer for one contig's kept lines."""

    def __init__(self, final_path: Path, compress: bool = True):
        self.final_path = Path(final_path)
        self.partial_path = self.final_path.with_name(self.final_path.name + PARTIAL_SUFFIX)
        self.compress = compress
        self.lines_written = 0
        try:
            self.final_path.parent.mkdir(parents=True, exist_ok=True)
            if compress:
                # bgzip output, the same container the sources use
                self._handle = pysam.BGZFile(str(self.partial_path), "wb")
            else:
                self._handle = open(self.partial_path, "wb")
        except OSError as e:
            raise OutputError(f"Cannot create output file {self.partial_path}: {e}") from e
        self._closed = False

    def write_line(self, line: bytes) -> None:
        try:
            self._handle.write(line + b"\n")
        except OSError as e:
            raise OutputError(f"Cannot write to {self.partial_path}: {e}") from e
        self.lines_written += 1

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._handle.close()

    def commit(self, path: Optional[Path] = None) -> Path:
        """Close and move the partial file to ``path`` (the final path by default)."""
        target = Path(path) if path is not None else self.final_path
        try:
            self.close()
            os.replace(self.partial_path, target)
        except OSError as e:
            raise OutputError(f"Cannot move {self.partial_path} to {target}: {e}") from e
        logger.debug(f"Wrote {self.lines_written} lines to {target}")
        return target

    def discard(self) -> None:
        """Close and remove the partial file; safe to call more than once."""
        try:
            self.close()
        except OSError as e:
            logger.warning(f"Error closing {self.partial_path}: {e}")
        try:
            self.partial_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove partial output {self.partial_path}: {e}")
