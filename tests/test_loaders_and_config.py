from pathlib import Path

import pytest

from smart_vcf.config import RetrievalConfig, load_run_config
from smart_vcf.regions.loader import load_regions
from smart_vcf.vcf_types import Region


def test_load_regions_skips_headers_and_extra_columns(tmp_path):
    bed = tmp_path / "regions.bed"
    bed.write_text(
        "track name=roi\n"
        "browser position chr1:1-1000\n"
        "# comment\n"
        "chr1\t100\t200\n"
        "chr1\t400\t1000\tgeneA\t0\t+\n"
        "\n"
        "chr2\t5\t10\n"
    )

    assert load_regions(bed) == [
        Region("chr1", 100, 200),
        Region("chr1", 400, 1000),
        Region("chr2", 5, 10),
    ]


def test_load_regions_one_based(tmp_path):
    bed = tmp_path / "regions.txt"
    bed.write_text("chr1\t101\t200\n")

    assert load_regions(bed, one_based=True) == [Region("chr1", 100, 200)]


@pytest.mark.parametrize("line", ["chr1\tabc\t200\n", "chr1\t100\n", "chr1 100 200\n", "chr1\t1.5\t20\n"])
def test_load_regions_rejects_malformed_lines(tmp_path, line):
    bed = tmp_path / "bad.bed"
    bed.write_text("chr1\t1\t2\n" + line)

    with pytest.raises(ValueError, match="Malformed line"):
        load_regions(bed)


def test_load_regions_keeps_inverted_regions_for_the_index_to_reject(tmp_path):
    bed = tmp_path / "inverted.bed"
    bed.write_text("chr1\t200\t100\n")

    assert load_regions(bed) == [Region("chr1", 200, 100)]


def test_load_regions_empty_file(tmp_path):
    bed = tmp_path / "empty.bed"
    bed.write_text("")

    assert load_regions(bed) == []


def test_load_regions_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="region list"):
        load_regions(tmp_path / "missing.bed")


def test_run_config_from_yaml(tmp_path):
    config_path = tmp_path / "run.yaml"
    config_path.write_text(
        "output_dir: filtered\n"
        "jobs: 8\n"
        "preserve_headers: false\n"
        "default_algorithm: sha256\n"
        "timeout: 30\n"
    )

    config = load_run_config(config_path)

    assert config.output_dir == Path("filtered")
    assert config.jobs == 8
    assert config.preserve_headers is False
    assert config.default_algorithm == "sha256"
    assert config.timeout == 30.0
    assert config.compress_output is True


def test_run_config_rejects_unknown_keys(tmp_path):
    config_path = tmp_path / "run.yaml"
    config_path.write_text("jobs: 2\nparallelism: 4\n")

    with pytest.raises(ValueError, match="unknown keys"):
        load_run_config(config_path)


def test_run_config_rejects_bad_values(tmp_path):
    config_path = tmp_path / "run.yaml"
    config_path.write_text("jobs: 0\n")

    with pytest.raises(ValueError, match="jobs"):
        load_run_config(config_path)


def test_run_config_rejects_non_mapping(tmp_path):
    config_path = tmp_path / "run.yaml"
    config_path.write_text("- jobs\n- 2\n")

    with pytest.raises(ValueError, match="expected mapping"):
        load_run_config(config_path)


def test_overrides_skip_none():
    config = RetrievalConfig(jobs=3)

    assert config.with_overrides(jobs=None, timeout=None) is config
    assert config.with_overrides(jobs=5).jobs == 5


def test_load_regions_plain_three_column_bed(tmp_path):
    bed = tmp_path / "roi.bed"
    bed.write_text("chr1\t100\t200\nchr2\t5\t10\n")

    assert load_regions(bed) == [Region("chr1", 100, 200), Region("chr2", 5, 10)]
