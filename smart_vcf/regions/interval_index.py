"""
Per-contig interval index for region-of-interest overlap queries.

Regions are coalesced at build time into sorted, non-overlapping ranges so a
position lookup is a single binary search over the region starts.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Set, Tuple

import numpy as np

from ..errors import MalformedRegion
from ..vcf_types import Region

logger = logging.getLogger(__name__)


def merge_intervals(intervals: Iterable[Tuple[int, int]]) -> List[Tuple[int, int]]:
    """Sort half-open intervals and coalesce overlapping or adjacent ones."""
    merged: List[Tuple[int, int]] = []
    for start, end in sorted(intervals):
        if merged and start <= merged[-1][1]:
            if end > merged[-1][1]:
                merged[-1] = (merged[-1][0], end)
        else:
            merged.append((start, end))
    return merged


class IntervalIndex:
    """Immutable contig -> sorted ranges mapping, safe to share across threads."""

    def __init__(self, starts: Dict[str, np.ndarray], ends: Dict[str, np.ndarray]):
        self._starts = starts
        self._ends = ends

    @classmethod
    def build(cls, regions: Iterable[Region]) -> "IntervalIndex":
        """Build the index, rejecting any region with ``start >= end``."""
        per_contig: Dict[str, List[Tuple[int, int]]] = defaultdict(list)
        n_input = 0
        for region in regions:
            if region.start >= region.end:
                raise MalformedRegion(
                    f"Region {region.contig}:{region.start}-{region.end} has start >= end",
                    contig=region.contig,
                )
            if region.start < 0:
                raise MalformedRegion(
                    f"Region {region.contig}:{region.start}-{region.end} has a negative start",
                    contig=region.contig,
                )
            per_contig[region.contig].append((region.start, region.end))
            n_input += 1

        starts: Dict[str, np.ndarray] = {}
        ends: Dict[str, np.ndarray] = {}
        for contig, intervals in per_contig.items():
            merged = merge_intervals(intervals)
            starts[contig] = np.fromiter((s for s, _ in merged), dtype=np.int64, count=len(merged))
            ends[contig] = np.fromiter((e for _, e in merged), dtype=np.int64, count=len(merged))

        index = cls(starts, ends)
        logger.info(
            f"Built interval index: {n_input} regions -> {len(index)} merged ranges "
            f"on {len(starts)} contigs"
        )
        return index

    def query(self, contig: str, position: int) -> bool:
        """True iff ``start <= position < end`` for some region on ``contig``."""
        starts = self._starts.get(contig)
        if starts is None:
            return False
        # Rightmost range whose start is <= position
        i = int(np.searchsorted(starts, position, side="right")) - 1
        return i >= 0 and bool(position < self._ends[contig][i])

    def contigs(self) -> Set[str]:
        return set(self._starts)

    def regions(self, contig: str) -> List[Region]:
        """Coalesced regions for one contig, in coordinate order."""
        if contig not in self._starts:
            return []
        return [
            Region(contig, int(s), int(e))
            for s, e in zip(self._starts[contig], self._ends[contig])
        ]

    def __len__(self) -> int:
        return sum(len(s) for s in self._starts.values())

    def __contains__(self, contig: object) -> bool:
        return contig in self._starts
