"""Load the per-contig URL list (``contig,checksum,url[,algorithm]``)."""

import logging
from pathlib import Path
from typing import List

import pandas as pd

from ..config import DEFAULT_ALGORITHM, validate_file_exists
from ..vcf_types import SourceEntry

logger = logging.getLogger(__name__)

URL_LIST_COLUMNS = ["contig", "checksum", "url", "algorithm"]


def load_source_entries(url_list_path: Path, default_algorithm: str = DEFAULT_ALGORITHM) -> List[SourceEntry]:
    """
    Load source entries in file order. Duplicates are kept; the catalog
    decides which one wins.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a line is missing its checksum or URL
    """
    url_list_path = Path(url_list_path)
    validate_file_exists(url_list_path, "URL list")

    try:
        df = pd.read_csv(
            url_list_path,
            header=None,
            names=URL_LIST_COLUMNS,
            comment="#",
            dtype=str,
            skipinitialspace=True,
            keep_default_na=False,
        )
    except pd.errors.EmptyDataError:
        logger.warning(f"URL list {url_list_path} is empty")
        return []
    except pd.errors.ParserError as e:
        raise ValueError(f"URL list {url_list_path} could not be parsed: {e}") from e

    df = df.fillna("")
    for column in URL_LIST_COLUMNS:
        df[column] = df[column].str.strip()

    bad = (df["contig"] == "") | (df["checksum"] == "") | (df["url"] == "")
    if bad.any():
        first = df[bad].iloc[0]
        raise ValueError(
            f"Malformed line in URL list {url_list_path}: "
            f"{first['contig']!r},{first['checksum']!r},{first['url']!r}"
        )

    entries = [
        SourceEntry(
            contig=row.contig,
            url=row.url,
            expected_checksum=row.checksum.lower(),
            algorithm=row.algorithm or default_algorithm,
        )
        for row in df.itertuples(index=False)
    ]
    logger.info(f"Loaded {len(entries)} source entries from {url_list_path}")
    return entries
