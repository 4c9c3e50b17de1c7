"""
Contig -> download source mapping.

The URL lists published alongside gnomAD-style releases occasionally repeat
a contig; the first entry seen is the one used and the rest are reported.
"""

import logging
from typing import Dict, Iterable, List, Set

from ..errors import MissingSource
from ..stream.checksum import normalize_algorithm
from ..vcf_types import SourceEntry

logger = logging.getLogger(__name__)


class SourceCatalog:
    """Read-only contig -> SourceEntry lookup, shared by all workers."""

    def __init__(self, entries: Dict[str, SourceEntry], warnings: List[str]):
        self._entries = entries
        self.warnings = warnings

    @classmethod
    def build(cls, entries: Iterable[SourceEntry]) -> "SourceCatalog":
        """First occurrence of a contig wins; later duplicates become warnings."""
        by_contig: Dict[str, SourceEntry] = {}
        warnings: List[str] = []
        for entry in entries:
            # Fail here rather than inside a worker on an unknown digest name
            algorithm = normalize_algorithm(entry.algorithm)
            if algorithm != entry.algorithm:
                entry = SourceEntry(entry.contig, entry.url, entry.expected_checksum, algorithm)

            kept = by_contig.get(entry.contig)
            if kept is not None:
                message = (
                    f"Duplicate source for {entry.contig}: ignoring {entry.url} "
                    f"(keeping {kept.url})"
                )
                logger.warning(message)
                warnings.append(message)
                continue
            by_contig[entry.contig] = entry

        logger.info(f"Source catalog: {len(by_contig)} contigs, {len(warnings)} duplicates ignored")
        return cls(by_contig, warnings)

    def lookup(self, contig: str) -> SourceEntry:
        try:
            return self._entries[contig]
        except KeyError:
            raise MissingSource(f"No download source for contig {contig}", contig=contig) from None

    def contigs(self) -> Set[str]:
        return set(self._entries)

    def __contains__(self, contig: object) -> bool:
        return contig in self._entries

    def __len__(self) -> int:
        return len(self._entries)
