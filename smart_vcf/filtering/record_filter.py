"""
Keep/drop decisions for decoded VCF lines.

Only the first two columns (CHROM, POS) are interpreted. POS is 1-based in
VCF and is shifted to the index's 0-based convention before the lookup.
"""

import logging

from ..regions.interval_index import IntervalIndex
from ..vcf_types import Classification, HeaderLine, LineParse, ParsedRecord, Unparseable

logger = logging.getLogger(__name__)

HEADER_PREFIX = b"#"
FIELD_SEPARATOR = b"\t"

# How many unparseable lines per contig are logged verbatim
MAX_LOGGED_UNPARSEABLE = 5


def parse_line(line: bytes) -> LineParse:
    """Parse one decoded line into a record, a header line, or an Unparseable."""
    if line.startswith(HEADER_PREFIX) or not line.strip():
        return HeaderLine(line)

    fields = line.split(FIELD_SEPARATOR, 2)
    if len(fields) < 2:
        return Unparseable(line, "fewer than two tab-separated fields")

    contig, pos = fields[0], fields[1]
    if not contig:
        return Unparseable(line, "empty CHROM field")
    if not pos.isdigit():
        return Unparseable(line, f"POS {pos[:32]!r} is not a positive integer")
    position = int(pos)
    if position < 1:
        return Unparseable(line, "POS must be >= 1")

    try:
        contig_name = contig.decode("ascii")
    except UnicodeDecodeError:
        return Unparseable(line, "CHROM is not ASCII")
    return ParsedRecord(contig_name, position, line)


def classify_parsed(parsed: LineParse, index: IntervalIndex, contig: str) -> Classification:
    if isinstance(parsed, HeaderLine):
        return Classification.DROP
    if isinstance(parsed, Unparseable):
        return Classification.UNPARSEABLE
    if parsed.contig != contig:
        return Classification.DROP
    if index.query(contig, parsed.position0):
        return Classification.KEEP
    return Classification.DROP


def classify(line: bytes, index: IntervalIndex, contig: str) -> Classification:
    """Keep iff the line is a record on ``contig`` inside one of its regions."""
    return classify_parsed(parse_line(line), index, contig)


class RecordFilter:
    """
    Per-worker filter that also keeps the counters for the contig's result.

    Not thread-safe; each worker owns one.
    """

    def __init__(self, index: IntervalIndex, contig: str, preserve_headers: bool = True):
        self.index = index
        self.contig = contig
        self.preserve_headers = preserve_headers
        self.records_total = 0
        self.records_kept = 0
        self.records_unparseable = 0
        self.header_lines = 0

    def accept(self, line: bytes) -> bool:
        """Classify ``line``, update counters, and say whether to write it."""
        parsed = parse_line(line)
        if isinstance(parsed, HeaderLine):
            self.header_lines += 1
            return self.preserve_headers and bool(line)

        self.records_total += 1
        verdict = classify_parsed(parsed, self.index, self.contig)
        if verdict is Classification.KEEP:
            self.records_kept += 1
            return True
        if verdict is Classification.UNPARSEABLE:
            self.records_unparseable += 1
            if self.records_unparseable <= MAX_LOGGED_UNPARSEABLE:
                logger.debug(f"{self.contig}: skipping unparseable line ({parsed.reason}): {line[:80]!r}")
        return False
