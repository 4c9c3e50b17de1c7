"""
Run summary reporting.

Turns the per-contig results into a table, writes it next to the outputs,
and logs one line per contig so no failure goes unreported.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, Tuple

import pandas as pd

from ..vcf_types import RetrievalResult, RunSummary
from .constants import SUMMARY_COLUMNS, SUMMARY_JSON, SUMMARY_TSV

logger = logging.getLogger(__name__)


def results_to_frame(results: Iterable[RetrievalResult]) -> pd.DataFrame:
    """One row per contig, columns in SUMMARY_COLUMNS order."""
    rows = [r.to_dict() for r in results]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def write_summary(summary: RunSummary, output_dir: Path) -> Tuple[Path, Path]:
    """Write the summary as TSV and JSON; returns both paths."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    df = results_to_frame(summary.results)
    tsv_path = output_dir / SUMMARY_TSV
    df.to_csv(tsv_path, sep="\t", index=False)

    json_path = output_dir / SUMMARY_JSON
    payload = {
        "ok": summary.ok,
        "interrupted": summary.interrupted,
        "exit_code": summary.exit_code,
        "contigs_total": len(summary.results),
        "contigs_failed": len(summary.failed),
        "bytes_downloaded": int(df["bytes_downloaded"].sum()) if not df.empty else 0,
        "records_kept": int(df["records_kept"].sum()) if not df.empty else 0,
        "results": [r.to_dict() for r in summary.results],
    }
    with json_path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)

    logger.info(f"Saved run summary to {tsv_path} and {json_path}")
    return tsv_path, json_path


def log_summary(summary: RunSummary) -> None:
    """Report every contig: which succeeded, which failed and why."""
    for r in summary.results:
        if r.succeeded:
            logger.info(
                f"  OK      {r.contig}: {r.records_kept}/{r.records_total} records kept, "
                f"{r.bytes_downloaded} bytes, checksum verified"
            )
        else:
            reason = r.error.value if r.error else "UnexpectedError"
            logger.error(f"  FAILED  {r.contig}: {reason} - {r.message}")
        if r.records_unparseable:
            logger.warning(f"          {r.contig}: {r.records_unparseable} unparseable lines skipped")

    n_failed = len(summary.failed)
    if summary.interrupted:
        logger.error(f"Run interrupted: {len(summary.succeeded)} contigs completed, {n_failed} not")
    elif n_failed:
        logger.error(f"{n_failed} of {len(summary.results)} contigs failed")
    else:
        logger.info(f"All {len(summary.results)} contigs retrieved and verified")
