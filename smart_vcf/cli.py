#!/usr/bin/env python3
"""
Download region-restricted VCFs.

Streams one compressed VCF per contig, keeps only the records that fall in
the BED regions, and verifies every download against its published checksum.

Usage:
    smart-vcf-downloader --bed regions.bed --url-list urls.csv
    smart-vcf-downloader -b regions.bed -u urls.csv -o filtered/ -j 8
    smart-vcf-downloader -b regions.bed -u urls.csv --algorithm sha256 --no-headers
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import RetrievalConfig, load_run_config, setup_logging
from .errors import MalformedRegion
from .pipeline.runner import RetrievalPipeline
from .regions.interval_index import IntervalIndex
from .regions.loader import load_regions
from .reporting.summary import log_summary, write_summary
from .sources.catalog import SourceCatalog
from .sources.loader import load_source_entries

logger = logging.getLogger(__name__)

EXIT_INVALID_INPUT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smart-vcf-downloader",
        description="Download BED-restricted VCFs with checksum verification",
    )
    parser.add_argument("-b", "--bed", type=Path, required=True,
                        help="BED file of regions to restrict the VCFs to")
    parser.add_argument("-u", "--url-list", type=Path, required=True,
                        help="CSV of contig,checksum,url[,algorithm]")
    parser.add_argument("-o", "--output-dir", type=Path,
                        help="Directory for the filtered VCFs (default: current directory)")
    parser.add_argument("-j", "--jobs", type=int,
                        help="Maximum number of parallel downloads (default: 4)")
    parser.add_argument("-c", "--config", type=Path,
                        help="YAML run configuration; command-line flags take precedence")
    parser.add_argument("--algorithm",
                        help="Checksum algorithm for URL list entries without one (default: md5)")
    parser.add_argument("--timeout", type=float,
                        help="Network timeout in seconds (default: 10)")
    parser.add_argument("--prefix", dest="output_prefix",
                        help="Prefix for output file names")
    parser.add_argument("--one-based", action="store_true",
                        help="Region list uses 1-based closed coordinates")
    parser.add_argument("--no-headers", dest="preserve_headers", action="store_false", default=None,
                        help="Do not copy VCF header lines to the output")
    parser.add_argument("--no-compress", dest="compress_output", action="store_false", default=None,
                        help="Write plain-text VCFs instead of bgzip")
    parser.add_argument("--discard-unverified", dest="keep_unverified", action="store_false", default=None,
                        help="Delete output whose checksum does not match instead of keeping it as .unverified")
    parser.add_argument("--no-progress", dest="show_progress", action="store_false", default=None,
                        help="Disable progress bars")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only warnings and errors")
    return parser


def resolve_config(args: argparse.Namespace) -> RetrievalConfig:
    """Defaults, then the YAML file, then command-line flags."""
    config = RetrievalConfig()
    if args.config is not None:
        config = load_run_config(args.config, base=config)
    return config.with_overrides(
        output_dir=args.output_dir,
        jobs=args.jobs,
        default_algorithm=args.algorithm,
        timeout=args.timeout,
        output_prefix=args.output_prefix,
        preserve_headers=args.preserve_headers,
        compress_output=args.compress_output,
        keep_unverified=args.keep_unverified,
        show_progress=args.show_progress,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        config = resolve_config(args)
        index = IntervalIndex.build(load_regions(args.bed, one_based=args.one_based))
        catalog = SourceCatalog.build(load_source_entries(args.url_list, config.default_algorithm))
    except MalformedRegion as e:
        logger.error(f"Invalid region list: {e}")
        return EXIT_INVALID_INPUT
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return EXIT_INVALID_INPUT

    if not index.contigs():
        logger.warning(f"No regions found in {args.bed}; nothing to download")

    summary = RetrievalPipeline(index, catalog, config).run()
    log_summary(summary)
    write_summary(summary, config.output_dir)
    return summary.exit_code


if __name__ == "__main__":
    sys.exit(main())
