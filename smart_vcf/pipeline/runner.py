"""
Run every contig of the interval index concurrently.

Workers share only the read-only index, catalog and config. Their results
are collected here, one at a time as each worker finishes, into the run
summary; there is no other shared state.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional

from ..config import RetrievalConfig
from ..regions.interval_index import IntervalIndex
from ..sources.catalog import SourceCatalog
from ..vcf_types import ErrorKind, RetrievalResult, RetrievalState, RunSummary
from .retrieval import retrieve_contig

logger = logging.getLogger(__name__)


def _cancelled_result(contig: str) -> RetrievalResult:
    return RetrievalResult(
        contig=contig,
        error=ErrorKind.CANCELLED,
        state=RetrievalState.CANCELLED,
        message="Run interrupted before this contig started",
    )


class RetrievalPipeline:
    """
    Streaming retrieval-and-filter over all contigs of an interval index.

    Example:
        pipeline = RetrievalPipeline(index, catalog, RetrievalConfig(jobs=4))
        summary = pipeline.run()
        sys.exit(summary.exit_code)
    """

    def __init__(self, index: IntervalIndex, catalog: SourceCatalog,
                 config: Optional[RetrievalConfig] = None):
        self.index = index
        self.catalog = catalog
        self.config = config or RetrievalConfig()
        self.cancel_event = threading.Event()

    def cancel(self) -> None:
        """Ask in-flight workers to stop at their next chunk."""
        self.cancel_event.set()

    def contigs(self) -> List[str]:
        return sorted(self.index.contigs())

    def run(self) -> RunSummary:
        contigs = self.contigs()
        missing = [c for c in contigs if c not in self.catalog]
        if missing:
            logger.warning(f"No download source for {len(missing)} contig(s): {', '.join(missing)}")
        logger.info(f"Retrieving {len(contigs)} contigs with up to {self.config.jobs} parallel downloads")

        results: Dict[str, RetrievalResult] = {}
        interrupted = False
        futures: Dict[Future, str] = {}
        executor = ThreadPoolExecutor(max_workers=self.config.jobs, thread_name_prefix="smart-vcf")
        try:
            for slot, contig in enumerate(contigs):
                future = executor.submit(
                    retrieve_contig, contig, self.index, self.catalog, self.config,
                    self.cancel_event, None, slot % self.config.jobs,
                )
                futures[future] = contig
            for future in as_completed(futures):
                contig = futures[future]
                results[contig] = self._collect(contig, future)
        except KeyboardInterrupt:
            interrupted = True
            logger.warning("Interrupted: cancelling downloads and removing partial files...")
            self.cancel()
            executor.shutdown(wait=True, cancel_futures=True)
            for future, contig in futures.items():
                if contig not in results:
                    results[contig] = self._collect(contig, future)
        finally:
            executor.shutdown(wait=True)

        ordered = [results.get(c) or _cancelled_result(c) for c in contigs]
        return RunSummary(results=ordered, interrupted=interrupted)

    def _collect(self, contig: str, future: Future) -> RetrievalResult:
        if future.cancelled():
            return _cancelled_result(contig)
        try:
            return future.result()
        except Exception as e:
            logger.exception(f"{contig}: worker crashed")
            return RetrievalResult(
                contig=contig,
                error=ErrorKind.INTERNAL_ERROR,
                state=RetrievalState.FAILED,
                message=f"Unexpected error: {e}",
            )


def run_retrieval(index: IntervalIndex, catalog: SourceCatalog,
                  config: Optional[RetrievalConfig] = None) -> RunSummary:
    return RetrievalPipeline(index, catalog, config).run()
