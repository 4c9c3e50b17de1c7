import gzip
import hashlib
from pathlib import Path

import pytest
import requests

from smart_vcf.config import RetrievalConfig
from smart_vcf.regions.interval_index import IntervalIndex
from smart_vcf.sources.catalog import SourceCatalog
from smart_vcf.vcf_types import Region, SourceEntry

# Empty gzip member that terminates every bgzip file
BGZF_EOF = bytes.fromhex("1f8b08040000000000ff0600424302001b0003000000000000000000")

VCF_HEADER = (
    "##fileformat=VCFv4.2\n"
    "##contig=<ID=chr1>\n"
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n"
)


def vcf_text(contig, positions, header=True):
    """A tiny VCF with one record per position."""
    body = "".join(f"{contig}\t{p}\t.\tA\tG\t50\tPASS\tAC=1\n" for p in positions)
    return (VCF_HEADER if header else "") + body


def bgzip(data, member_size=64):
    """Compress as a series of small gzip members, like bgzip does."""
    if isinstance(data, str):
        data = data.encode()
    members = [
        gzip.compress(data[i:i + member_size])
        for i in range(0, len(data), member_size)
    ]
    return b"".join(members) + BGZF_EOF


def md5(data):
    return hashlib.md5(data).hexdigest()


def read_output(path):
    path = Path(path)
    if path.name.endswith(".gz") or ".gz." in path.name:
        with gzip.open(path, "rt") as handle:
            return handle.read().splitlines()
    return path.read_text().splitlines()


@pytest.fixture
def make_source(tmp_path):
    """Write a bgzipped source file; returns (path, raw bytes, md5)."""
    source_dir = tmp_path / "sources"
    source_dir.mkdir()

    def _make(name, text, member_size=64):
        raw = bgzip(text, member_size)
        path = source_dir / name
        path.write_bytes(raw)
        return path, raw, md5(raw)

    return _make


@pytest.fixture
def config(tmp_path):
    return RetrievalConfig(output_dir=tmp_path / "out", jobs=2, show_progress=False, chunk_size=32)


@pytest.fixture
def chr1_index():
    return IntervalIndex.build([Region("chr1", 100, 200)])


def catalog_of(*entries):
    return SourceCatalog.build([SourceEntry(*e) for e in entries])


class FakeRaw:
    def __init__(self, data, fail_after=None):
        self.data = data
        self.fail_after = fail_after

    def stream(self, amt, decode_content=False):
        sent = 0
        for i in range(0, len(self.data), amt):
            if self.fail_after is not None and sent >= self.fail_after:
                raise requests.ConnectionError("connection reset by peer")
            chunk = self.data[i:i + amt]
            sent += len(chunk)
            yield chunk


class FakeResponse:
    def __init__(self, data, status_code=200, fail_after=None):
        self.status_code = status_code
        self.headers = {"Content-Length": str(len(data))}
        self.raw = FakeRaw(data, fail_after)
        self.closed = False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")

    def close(self):
        self.closed = True


class FakeSession:
    """Stands in for requests.Session; serves payloads keyed by URL."""

    def __init__(self, responses):
        self.responses = responses
        self.requested = []
        self.closed = False

    def get(self, url, stream=False, timeout=None):
        self.requested.append(url)
        response = self.responses.get(url)
        if response is None:
            raise requests.ConnectionError(f"Failed to resolve {url}")
        return response

    def close(self):
        self.closed = True
