"""
Load a BED-style region list into Region values.

Malformed lines are rejected here; ``start < end`` is checked again by the
interval index, which is the only check the pipeline itself relies on.
"""

import logging
from pathlib import Path
from typing import List

import pandas as pd

from ..config import validate_file_exists
from ..vcf_types import Region

logger = logging.getLogger(__name__)

# Header lines a UCSC-style BED may carry before the records
BED_HEADER_PREFIXES = ("track", "browser")

# BED allows up to 12 columns; only the first three are read
BED_COLUMNS = [
    "contig", "start", "end", "name", "score", "strand", "thick_start",
    "thick_end", "item_rgb", "block_count", "block_sizes", "block_starts",
]


def load_regions(bed_path: Path, one_based: bool = False) -> List[Region]:
    """
    Load regions from a tab-delimited ``contig start end [...]`` file.

    Args:
        bed_path: Path to the region list
        one_based: Input uses 1-based closed coordinates instead of BED's
            0-based half-open ones; starts are shifted down by one

    Returns:
        Regions in file order, in the 0-based half-open convention

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a line lacks three columns or has non-integer bounds
    """
    bed_path = Path(bed_path)
    validate_file_exists(bed_path, "region list")

    try:
        df = pd.read_csv(
            bed_path,
            sep="\t",
            header=None,
            names=BED_COLUMNS,
            comment="#",
            dtype=str,
            skip_blank_lines=True,
            keep_default_na=False,
        )
    except pd.errors.EmptyDataError:
        logger.warning(f"Region list {bed_path} is empty")
        return []
    except pd.errors.ParserError as e:
        raise ValueError(f"Region list {bed_path} could not be parsed: {e}") from e

    if df.empty:
        logger.warning(f"Region list {bed_path} is empty")
        return []

    # Short rows are padded with NaN up to the twelve BED columns
    df = df[["contig", "start", "end"]]
    is_header = df["contig"].map(lambda c: c.startswith(BED_HEADER_PREFIXES)).astype(bool)
    df = df[~is_header]

    starts = pd.to_numeric(df["start"], errors="coerce")
    ends = pd.to_numeric(df["end"], errors="coerce")
    bad = (
        starts.isna() | ends.isna()
        | (starts % 1 != 0) | (ends % 1 != 0)
        | (df["contig"].str.strip() == "")
    )
    if bad.any():
        first = df[bad].iloc[0]
        raise ValueError(
            f"Malformed line in region list {bed_path}: "
            f"{first['contig']!r} {first['start']!r} {first['end']!r} "
            f"({int(bad.sum())} bad lines)"
        )

    offset = 1 if one_based else 0
    regions = [
        Region(contig.strip(), int(start) - offset, int(end))
        for contig, start, end in zip(df["contig"], starts, ends)
    ]
    logger.info(f"Loaded {len(regions)} regions from {bed_path}")
    return regions
