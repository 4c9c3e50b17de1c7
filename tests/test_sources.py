import logging

import pytest

from smart_vcf.errors import MissingSource
from smart_vcf.sources.catalog import SourceCatalog
from smart_vcf.sources.loader import load_source_entries
from smart_vcf.vcf_types import ErrorKind, SourceEntry


def test_first_duplicate_wins(caplog):
    with caplog.at_level(logging.WARNING):
        catalog = SourceCatalog.build([
            SourceEntry("c", "https://example.org/url1", "h1"),
            SourceEntry("c", "https://example.org/url2", "h2"),
        ])

    entry = catalog.lookup("c")
    assert (entry.url, entry.expected_checksum) == ("https://example.org/url1", "h1")
    assert len(catalog) == 1
    assert len(catalog.warnings) == 1
    assert "url2" in catalog.warnings[0]
    assert "Duplicate source for c" in caplog.text


def test_lookup_of_missing_contig_raises_missing_source():
    catalog = SourceCatalog.build([SourceEntry("chr1", "u", "h")])

    with pytest.raises(MissingSource) as excinfo:
        catalog.lookup("chr2")

    assert excinfo.value.kind is ErrorKind.MISSING_SOURCE
    assert excinfo.value.contig == "chr2"


def test_algorithm_names_are_normalized():
    catalog = SourceCatalog.build([SourceEntry("chr1", "u", "h", "SHA-256")])

    assert catalog.lookup("chr1").algorithm == "sha256"


def test_unknown_algorithm_is_rejected_at_build():
    with pytest.raises(ValueError, match="Unsupported checksum algorithm"):
        SourceCatalog.build([SourceEntry("chr1", "u", "h", "crc32")])


def test_load_source_entries_reads_original_column_order(tmp_path):
    url_list = tmp_path / "urls.csv"
    url_list.write_text(
        "chr1,D41D8CD98F00B204E9800998ECF8427E,https://example.org/chr1.vcf.bgz\n"
        "chr2,abc123,https://example.org/chr2.vcf.bgz,sha256\n"
        "# mirrors\n"
        "chr1,ffff,https://mirror.example.org/chr1.vcf.bgz\n"
    )

    entries = load_source_entries(url_list)

    assert entries == [
        SourceEntry("chr1", "https://example.org/chr1.vcf.bgz", "d41d8cd98f00b204e9800998ecf8427e", "md5"),
        SourceEntry("chr2", "https://example.org/chr2.vcf.bgz", "abc123", "sha256"),
        SourceEntry("chr1", "https://mirror.example.org/chr1.vcf.bgz", "ffff", "md5"),
    ]
    assert SourceCatalog.build(entries).lookup("chr1").expected_checksum == "d41d8cd98f00b204e9800998ecf8427e"


def test_load_source_entries_default_algorithm(tmp_path):
    url_list = tmp_path / "urls.csv"
    url_list.write_text("chr1,abc,https://example.org/chr1.vcf.bgz\n")

    assert load_source_entries(url_list, default_algorithm="sha1")[0].algorithm == "sha1"


def test_load_source_entries_rejects_missing_url(tmp_path):
    url_list = tmp_path / "urls.csv"
    url_list.write_text("chr1,abc\n")

    with pytest.raises(ValueError, match="Malformed line"):
        load_source_entries(url_list)


def test_load_source_entries_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_source_entries(tmp_path / "nope.csv")
