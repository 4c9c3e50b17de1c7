"""Record classification against the region index."""

from .record_filter import RecordFilter, classify, classify_parsed, parse_line

__all__ = ["RecordFilter", "classify", "classify_parsed", "parse_line"]
