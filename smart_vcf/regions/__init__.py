"""Regions of interest: loading and per-contig overlap queries."""

from .interval_index import IntervalIndex, merge_intervals
from .loader import load_regions

__all__ = ["IntervalIndex", "load_regions", "merge_intervals"]
