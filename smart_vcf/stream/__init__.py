"""Raw byte streaming: fetching, checksum validation and decompression."""

from . import checksum
from .checksum import ChecksumValidator, ValidatorState
from .decoder import DecodedLineStream, iter_decompressed, iter_lines, open_lines
from .fetch import SourceStream, build_session, open_source

__all__ = [
    "ChecksumValidator",
    "DecodedLineStream",
    "SourceStream",
    "ValidatorState",
    "build_session",
    "checksum",
    "iter_decompressed",
    "iter_lines",
    "open_lines",
    "open_source",
]
