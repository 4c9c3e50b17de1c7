"""
Streaming gzip/BGZF decoder.

BGZF (``.vcf.bgz``, ``.vcf.gz`` from bgzip) is a series of independent gzip
members, so the decoder restarts a zlib stream at every member boundary.
Output per zlib call is capped, and only the current partial line is carried
between chunks, so memory stays bounded however large the file is.
"""

import logging
import zlib
from typing import BinaryIO, Iterable, Iterator, Union

from ..config import DEFAULT_CHUNK_SIZE, DEFAULT_MAX_DECOMPRESSED_CHUNK
from ..errors import DecodeError

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
# 16 + MAX_WBITS: expect a gzip header and trailer (CRC32 + ISIZE are checked)
GZIP_WBITS = 16 + zlib.MAX_WBITS

ByteSource = Union[Iterable[bytes], BinaryIO]


def _iter_raw(source: ByteSource, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """
    Accept either an iterable of chunks or a binary file object.

    Plain iterators are returned as-is, never wrapped in a generator, so a
    decode failure leaves the caller's iterator open for draining.
    """
    read = getattr(source, "read", None)
    if read is None:
        return iter(source)
    return iter(lambda: read(chunk_size), b"")


def iter_decompressed(raw_chunks: Iterable[bytes],
                      max_output: int = DEFAULT_MAX_DECOMPRESSED_CHUNK) -> Iterator[bytes]:
    """
    Decompress a (multi-member) gzip byte stream lazily.

    Raises:
        DecodeError: On bad magic bytes, corrupt deflate data, a member
            CRC/length mismatch, or input that ends inside a member.
    """
    decomp = None
    members = 0
    head = b""

    for chunk in raw_chunks:
        data = head + chunk if head else chunk
        head = b""
        while data:
            if decomp is None:
                if members:
                    # Zero padding between/after members is tolerated, as gzip(1) does
                    data = data.lstrip(b"\x00")
                    if not data:
                        break
                if len(data) < len(GZIP_MAGIC):
                    head = data
                    break
                if data[:2] != GZIP_MAGIC:
                    raise DecodeError(
                        f"Not a gzip/BGZF stream: bad magic bytes {data[:2].hex()} "
                        f"at member {members + 1}"
                    )
                decomp = zlib.decompressobj(GZIP_WBITS)
                members += 1

            while True:
                try:
                    out = decomp.decompress(data, max_output)
                except zlib.error as e:
                    raise DecodeError(f"Corrupt compressed data in member {members}: {e}") from e
                if out:
                    yield out
                if decomp.eof:
                    data = decomp.unused_data
                    decomp = None
                    break
                data = decomp.unconsumed_tail
                # A full output buffer may leave output pending inside zlib
                if not data and len(out) < max_output:
                    break

    if decomp is not None:
        raise DecodeError(f"Compressed stream truncated inside member {members}")
    if head.strip(b"\x00"):
        raise DecodeError("Compressed stream truncated inside a member header")
    if members == 0:
        raise DecodeError("Empty stream: no gzip members found")
    logger.debug(f"Decoded {members} compressed members")


def iter_lines(blocks: Iterable[bytes]) -> Iterator[bytes]:
    """Split decompressed blocks into lines without their terminators."""
    pending = b""
    for block in blocks:
        pending += block
        lines = pending.split(b"\n")
        pending = lines.pop()
        for line in lines:
            yield line[:-1] if line.endswith(b"\r") else line
    if pending:
        yield pending[:-1] if pending.endswith(b"\r") else pending


class DecodedLineStream:
    """
    Forward-only iterator of decompressed lines over a raw byte stream.

    Not restartable: it consumes the underlying stream as it goes. To decode
    the same bytes again, open a new stream on the source.
    """

    def __init__(self, source: ByteSource,
                 max_decompressed_chunk: int = DEFAULT_MAX_DECOMPRESSED_CHUNK,
                 chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.bytes_decompressed = 0
        self.lines_read = 0
        raw = _iter_raw(source, chunk_size)
        self._lines = iter_lines(self._count(iter_decompressed(raw, max_decompressed_chunk)))

    def _count(self, blocks: Iterator[bytes]) -> Iterator[bytes]:
        for block in blocks:
            self.bytes_decompressed += len(block)
            yield block

    def __iter__(self) -> "DecodedLineStream":
        return self

    def __next__(self) -> bytes:
        line = next(self._lines)
        self.lines_read += 1
        return line


def open_lines(source: ByteSource, **kwargs) -> DecodedLineStream:
    return DecodedLineStream(source, **kwargs)
