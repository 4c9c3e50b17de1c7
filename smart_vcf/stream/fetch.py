"""
Open a contig's download source as a stream of raw byte chunks.

HTTP(S) sources go through a worker-owned ``requests.Session`` with retries on
connection setup; ``file://`` URLs and plain paths are read from disk, which
is how local mirrors are used.
"""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, Optional
from urllib.parse import unquote, urlparse

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import RetrievalConfig
from ..errors import NetworkError, RetrievalCancelled

logger = logging.getLogger(__name__)

USER_AGENT = "smart-vcf-downloader/1.0"
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)


def build_session(max_retries: int) -> requests.Session:
    """Session with retry/backoff on connection setup and transient statuses."""
    retry = Retry(
        total=max_retries,
        backoff_factor=0.5,
        status_forcelist=RETRY_STATUS_CODES,
        allowed_methods=frozenset({"GET", "HEAD"}),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session = requests.Session()
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"User-Agent": USER_AGENT})
    return session


class SourceStream:
    """Raw bytes of one source, read sequentially in fixed-size chunks."""

    def __init__(self, url: str, chunks: Iterator[bytes], content_length: Optional[int],
                 closer: Callable[[], None], cancel_event: Optional[threading.Event] = None):
        self.url = url
        self.content_length = content_length
        self.bytes_read = 0
        self._chunks = chunks
        self._closer = closer
        self._cancel_event = cancel_event

    def iter_chunks(self) -> Iterator[bytes]:
        """
        Yield raw chunks until the source is exhausted.

        Raises:
            NetworkError: If the transfer fails midway
            RetrievalCancelled: If the run was cancelled
        """
        try:
            for chunk in self._chunks:
                if self._cancel_event is not None and self._cancel_event.is_set():
                    raise RetrievalCancelled(f"Download of {self.url} cancelled")
                if not chunk:
                    continue
                self.bytes_read += len(chunk)
                yield chunk
        except (requests.RequestException, urllib3.exceptions.HTTPError) as e:
            raise NetworkError(f"Transfer from {self.url} failed after {self.bytes_read} bytes: {e}") from e
        except OSError as e:
            raise NetworkError(f"Reading {self.url} failed after {self.bytes_read} bytes: {e}") from e

        if self.content_length is not None and self.bytes_read != self.content_length:
            logger.warning(
                f"{self.url}: received {self.bytes_read} bytes, "
                f"server announced {self.content_length}"
            )

    def close(self) -> None:
        self._closer()


def _local_path(url: str) -> Optional[Path]:
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    if not parsed.scheme:
        return Path(url)
    return None


def _read_file(handle: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    while True:
        chunk = handle.read(chunk_size)
        if not chunk:
            return
        yield chunk


@contextmanager
def open_source(url: str, config: RetrievalConfig,
                cancel_event: Optional[threading.Event] = None,
                session: Optional[requests.Session] = None) -> Iterator[SourceStream]:
    """
    Open ``url`` for sequential reading; the connection is closed on exit.

    Args:
        url: http(s)/file URL or a local path
        config: Supplies chunk size, timeout and retry count
        cancel_event: Checked before every chunk is handed out
        session: Session to use instead of a fresh one (must not be shared
            between workers)

    Raises:
        NetworkError: If the source cannot be opened or answers with an error
    """
    local = _local_path(url)
    if local is not None:
        try:
            handle = open(local, "rb")
        except OSError as e:
            raise NetworkError(f"Cannot open {url}: {e}") from e
        size = local.stat().st_size
        stream = SourceStream(url, _read_file(handle, config.chunk_size), size,
                              handle.close, cancel_event)
        try:
            yield stream
        finally:
            stream.close()
        return

    own_session = session is None
    if own_session:
        session = build_session(config.max_retries)
    try:
        try:
            response = session.get(url, stream=True, timeout=config.timeout)
        except requests.RequestException as e:
            raise NetworkError(f"Cannot download file at {url}: {e}") from e
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            response.close()
            raise NetworkError(f"Cannot download file at {url}: {e}") from e

        length = response.headers.get("Content-Length")
        content_length = int(length) if length and length.isdigit() else None
        # Raw bytes as sent: the checksum covers the compressed file, not a
        # transfer-decoded view of it
        stream = SourceStream(
            url,
            response.raw.stream(config.chunk_size, decode_content=False),
            content_length,
            response.close,
            cancel_event,
        )
        try:
            yield stream
        finally:
            stream.close()
    finally:
        if own_session:
            session.close()
