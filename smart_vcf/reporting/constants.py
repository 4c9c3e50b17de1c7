"""Constants for reporting slice."""

# Output Files
SUMMARY_TSV = "retrieval_summary.tsv"
SUMMARY_JSON = "retrieval_summary.json"

# Column order of the per-contig summary table
SUMMARY_COLUMNS = [
    "contig", "state", "error", "checksum_ok", "bytes_downloaded",
    "records_total", "records_kept", "records_unparseable", "header_lines",
    "computed_checksum", "expected_checksum", "output_path", "url",
    "elapsed_seconds", "message",
]
