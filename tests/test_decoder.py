import gzip
import io

import pytest

from conftest import BGZF_EOF, bgzip, vcf_text
from smart_vcf.errors import DecodeError
from smart_vcf.stream.decoder import DecodedLineStream, iter_decompressed, iter_lines, open_lines


def chunks_of(data, size):
    return iter([data[i:i + size] for i in range(0, len(data), size)])


def test_multi_member_stream_decodes_in_order():
    text = vcf_text("chr1", range(1, 200))
    raw = bgzip(text, member_size=50)

    lines = list(open_lines(chunks_of(raw, 7)))

    assert lines == [line.encode() for line in text.splitlines()]


def test_decoding_twice_gives_identical_lines():
    raw = bgzip(vcf_text("chr1", range(1, 500)), member_size=300)

    first = list(open_lines(chunks_of(raw, 1000)))
    second = list(open_lines(chunks_of(raw, 13)))

    assert first == second


def test_reads_from_a_file_object():
    text = vcf_text("chr2", [10, 20, 30])
    stream = DecodedLineStream(io.BytesIO(bgzip(text)), chunk_size=5)

    assert [line.decode() for line in stream] == text.splitlines()
    assert stream.lines_read == len(text.splitlines())
    assert stream.bytes_decompressed == len(text)


def test_single_member_gzip_is_accepted():
    raw = gzip.compress(b"a\nb\r\nc")

    assert list(open_lines(iter([raw]))) == [b"a", b"b", b"c"]


def test_output_per_call_is_bounded():
    data = b"A" * 100_000 + b"\n"
    raw = gzip.compress(data)

    blocks = list(iter_decompressed(iter([raw]), max_output=4096))

    assert max(len(b) for b in blocks) <= 4096
    assert b"".join(blocks) == data


def test_bad_magic_bytes():
    with pytest.raises(DecodeError, match="bad magic"):
        list(open_lines(iter([b"##fileformat=VCFv4.2\n"])))


def test_truncated_member():
    raw = bgzip(vcf_text("chr1", range(1, 100)), member_size=4000)
    truncated = raw[: len(raw) // 2]

    with pytest.raises(DecodeError, match="truncated"):
        list(open_lines(chunks_of(truncated, 64)))


def test_crc_mismatch_inside_member():
    raw = bytearray(gzip.compress(b"chr1\t150\t.\tA\tG\n" * 20))
    raw[-8] ^= 0xFF  # first CRC32 byte of the trailer

    with pytest.raises(DecodeError):
        list(open_lines(iter([bytes(raw)])))


def test_empty_stream():
    with pytest.raises(DecodeError, match="Empty stream"):
        list(open_lines(iter([])))


def test_trailing_zero_padding_is_tolerated():
    raw = gzip.compress(b"x\ny\n") + BGZF_EOF + b"\x00" * 10

    assert list(open_lines(iter([raw]))) == [b"x", b"y"]


def test_iter_lines_joins_lines_split_across_blocks():
    assert list(iter_lines([b"ab", b"c\nd", b"", b"e\n", b"f"])) == [b"abc", b"de", b"f"]
