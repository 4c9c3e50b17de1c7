"""
Per-contig retrieval worker.

Resolves the contig's source, streams the raw bytes through the checksum
validator and the decoder in one pass, writes kept records, and compares the
digest at the end:

    PENDING -> RESOLVING -> FETCHING -> STREAMING -> FINALIZING -> DONE | FAILED

Every failure ends in a RetrievalResult; nothing is raised to the caller.
"""

import logging
import threading
import time
from typing import Iterator, Optional

import requests
from tqdm import tqdm

from ..config import RetrievalConfig
from ..errors import (
    ChecksumMismatch, DecodeError, RetrievalCancelled, RetrievalError
)
from ..filtering.record_filter import RecordFilter
from ..regions.interval_index import IntervalIndex
from ..sources.catalog import SourceCatalog
from ..stream.checksum import ChecksumValidator
from ..stream.decoder import DecodedLineStream
from ..stream.fetch import SourceStream, open_source
from ..vcf_types import ErrorKind, RetrievalResult, RetrievalState, SourceEntry
from .constants import PROGRESS_BAR_FORMAT
from .output import OutputWriter, output_path_for, unverified_path_for

logger = logging.getLogger(__name__)


class ContigRetrieval:
    """One contig's worker. Owns its session, buffers, decoder and output file."""

    def __init__(self, contig: str, index: IntervalIndex, catalog: SourceCatalog,
                 config: RetrievalConfig,
                 cancel_event: Optional[threading.Event] = None,
                 session: Optional[requests.Session] = None,
                 progress_position: int = 0):
        self.contig = contig
        self.index = index
        self.catalog = catalog
        self.config = config
        self.cancel_event = cancel_event
        self.session = session
        self.progress_position = progress_position
        self.result = RetrievalResult(contig=contig)
        self._writer: Optional[OutputWriter] = None
        self._validator: Optional[ChecksumValidator] = None

    def _transition(self, state: RetrievalState) -> None:
        logger.debug(f"{self.contig}: {self.result.state.value} -> {state.value}")
        self.result.state = state

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise RetrievalCancelled(f"Retrieval of {self.contig} cancelled", contig=self.contig)

    def run(self) -> RetrievalResult:
        started = time.monotonic()
        try:
            self._check_cancelled()
            self._transition(RetrievalState.RESOLVING)
            source = self.catalog.lookup(self.contig)
            self.result.url = source.url
            self.result.expected_checksum = source.expected_checksum

            self._transition(RetrievalState.FETCHING)
            self._validator = ChecksumValidator(source.algorithm)
            logger.info(f"Downloading {self.contig} from {source.url}")
            with open_source(source.url, self.config, self.cancel_event, self.session) as stream:
                self._transition(RetrievalState.STREAMING)
                self._stream(stream)

            self._transition(RetrievalState.FINALIZING)
            self._finalize(source)
        except RetrievalCancelled as e:
            self._discard_output()
            self.result.error = e.kind
            self.result.message = str(e)
            self._transition(RetrievalState.CANCELLED)
            logger.warning(f"{self.contig}: cancelled, partial output removed")
        except RetrievalError as e:
            self._fail(e)
        except Exception as e:
            # Unexpected errors still end in a result with the partial file removed
            logger.exception(f"{self.contig}: unexpected error")
            self._discard_output()
            self.result.error = ErrorKind.INTERNAL_ERROR
            self.result.message = f"Unexpected error: {e}"
            self._transition(RetrievalState.FAILED)
        finally:
            self.result.elapsed_seconds = time.monotonic() - started
        return self.result

    def _tee(self, stream: SourceStream, progress: tqdm) -> Iterator[bytes]:
        """Hash and count raw bytes on their way to the decoder."""
        for chunk in stream.iter_chunks():
            self._validator.update(chunk)
            self.result.bytes_downloaded += len(chunk)
            progress.update(len(chunk))
            yield chunk

    def _stream(self, stream: SourceStream) -> None:
        self._writer = OutputWriter(output_path_for(self.contig, self.config), self.config.compress_output)
        self.result.output_path = self._writer.partial_path
        record_filter = RecordFilter(self.index, self.contig, self.config.preserve_headers)

        with tqdm(
            total=stream.content_length,
            desc=self.contig,
            unit="B",
            unit_scale=True,
            position=self.progress_position,
            leave=False,
            disable=not self.config.show_progress,
            bar_format=PROGRESS_BAR_FORMAT if stream.content_length else None,
        ) as progress:
            raw = self._tee(stream, progress)
            lines = DecodedLineStream(raw, max_decompressed_chunk=self.config.max_decompressed_chunk)
            try:
                for line in lines:
                    if record_filter.accept(line):
                        self._writer.write_line(line)
            except DecodeError:
                self._drain(raw)
                raise
            finally:
                self.result.records_total = record_filter.records_total
                self.result.records_kept = record_filter.records_kept
                self.result.records_unparseable = record_filter.records_unparseable
                self.result.header_lines = record_filter.header_lines

        if record_filter.records_unparseable:
            logger.warning(f"{self.contig}: skipped {record_filter.records_unparseable} unparseable lines")

    def _drain(self, raw: Iterator[bytes]) -> None:
        """Consume the rest of the raw stream so the checksum still covers the whole file."""
        try:
            for _ in raw:
                pass
        except RetrievalCancelled:
            raise
        except RetrievalError as e:
            logger.warning(f"{self.contig}: could not drain stream after decode error, checksum indeterminate: {e}")
            self._validator = None
            return
        self._record_checksum()

    def _record_checksum(self) -> bool:
        self.result.computed_checksum = self._validator.hexdigest()
        self.result.checksum_ok = self._validator.matches(self.result.expected_checksum)
        return self.result.checksum_ok

    def _finalize(self, source: SourceEntry) -> None:
        if not self._record_checksum():
            raise ChecksumMismatch(source.expected_checksum, self.result.computed_checksum,
                                   contig=self.contig)
        self.result.output_path = self._writer.commit()
        self._transition(RetrievalState.DONE)
        logger.info(
            f"Successfully downloaded {self.contig}: kept {self.result.records_kept}"
            f"/{self.result.records_total} records ({self.result.bytes_downloaded} bytes)"
        )

    def _fail(self, error: RetrievalError) -> None:
        self.result.error = error.kind
        self.result.message = str(error)
        if isinstance(error, ChecksumMismatch) and self.config.keep_unverified and self._writer:
            try:
                self.result.output_path = self._writer.commit(unverified_path_for(self._writer.final_path))
            except RetrievalError as e:
                logger.warning(f"{self.contig}: {e}")
                self._discard_output()
        else:
            self._discard_output()
        self._transition(RetrievalState.FAILED)
        logger.error(f"{self.contig}: failed ({error.kind.value}): {error}")

    def _discard_output(self) -> None:
        if self._writer is not None:
            self._writer.discard()
            self.result.output_path = None


def retrieve_contig(contig: str, index: IntervalIndex, catalog: SourceCatalog,
                    config: RetrievalConfig,
                    cancel_event: Optional[threading.Event] = None,
                    session: Optional[requests.Session] = None,
                    progress_position: int = 0) -> RetrievalResult:
    """Run one contig through the pipeline and return its terminal result."""
    return ContigRetrieval(contig, index, catalog, config, cancel_event,
                           session, progress_position).run()
