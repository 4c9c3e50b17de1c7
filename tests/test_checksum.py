import hashlib

import pytest

from smart_vcf.stream import checksum
from smart_vcf.stream.checksum import ChecksumValidator


@pytest.mark.parametrize("algorithm", ["md5", "sha1", "sha256", "sha512"])
def test_chunking_does_not_change_the_digest(algorithm):
    state = checksum.update(checksum.update(checksum.start(algorithm), b"ab"), b"cd")

    assert checksum.finalize(state) == checksum.digest_bytes(b"abcd", algorithm)
    assert checksum.finalize(state) == hashlib.new(algorithm, b"abcd").hexdigest()


def test_update_leaves_the_input_state_untouched():
    initial = checksum.start("md5")
    after = checksum.update(initial, b"payload")

    assert checksum.finalize(initial) == hashlib.md5(b"").hexdigest()
    assert after.bytes_seen == 7
    assert initial.bytes_seen == 0


def test_verify_is_case_insensitive():
    state = checksum.update(checksum.start("md5"), b"abcd")
    expected = hashlib.md5(b"abcd").hexdigest().upper()

    assert checksum.verify(state, expected)
    assert not checksum.verify(state, "0" * 32)


def test_validator_matches_functional_api():
    validator = ChecksumValidator("sha256")
    for chunk in (b"x" * 1000, b"", b"yz"):
        validator.update(chunk)

    assert validator.hexdigest() == hashlib.sha256(b"x" * 1000 + b"yz").hexdigest()
    assert validator.bytes_seen == 1002
    assert checksum.finalize(validator.state()) == validator.hexdigest()


def test_unknown_algorithm():
    with pytest.raises(ValueError):
        checksum.start("rot13")
