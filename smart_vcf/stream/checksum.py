"""
Incremental checksum over raw downloaded bytes.

The digest is computed on the compressed bytes exactly as received, before
any decompression, so a truncated or corrupted download is caught even when
the decoder happens to accept a prefix of it.
"""

import hashlib
from dataclasses import dataclass
from typing import Any, get_args

from ..vcf_types import DigestAlgorithm

SUPPORTED_ALGORITHMS = frozenset(get_args(DigestAlgorithm))


def normalize_algorithm(name: str) -> str:
    """Canonical lower-case algorithm name, e.g. 'SHA-256' -> 'sha256'."""
    algorithm = name.strip().lower().replace("-", "").replace("_", "")
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(
            f"Unsupported checksum algorithm {name!r}; "
            f"expected one of {sorted(SUPPORTED_ALGORITHMS)}"
        )
    return algorithm


@dataclass(frozen=True)
class ValidatorState:
    """Digest state plus byte count; never mutated after construction."""
    algorithm: str
    hasher: Any
    bytes_seen: int = 0


def start(algorithm: str = "md5") -> ValidatorState:
    algorithm = normalize_algorithm(algorithm)
    return ValidatorState(algorithm, hashlib.new(algorithm))


def update(state: ValidatorState, chunk: bytes) -> ValidatorState:
    """Return a new state covering ``chunk``; ``state`` itself is left untouched."""
    hasher = state.hasher.copy()
    hasher.update(chunk)
    return ValidatorState(state.algorithm, hasher, state.bytes_seen + len(chunk))


def finalize(state: ValidatorState) -> str:
    return state.hasher.hexdigest()


def verify(state: ValidatorState, expected: str) -> bool:
    return finalize(state) == expected.strip().lower()


def digest_bytes(data: bytes, algorithm: str = "md5") -> str:
    """One-shot digest, for comparison against the streaming result."""
    return hashlib.new(normalize_algorithm(algorithm), data).hexdigest()


class ChecksumValidator:
    """
    Worker-owned accumulator over the functional API.

    ``update`` copies the hasher on every call; the worker's hot loop uses
    this class instead, which feeds one hasher in place.
    """

    def __init__(self, algorithm: str = "md5"):
        self.algorithm = normalize_algorithm(algorithm)
        self._hasher = hashlib.new(self.algorithm)
        self.bytes_seen = 0

    def update(self, chunk: bytes) -> None:
        self._hasher.update(chunk)
        self.bytes_seen += len(chunk)

    def hexdigest(self) -> str:
        return self._hasher.hexdigest()

    def matches(self, expected: str) -> bool:
        return self.hexdigest() == expected.strip().lower()

    def state(self) -> ValidatorState:
        return ValidatorState(self.algorithm, self._hasher.copy(), self.bytes_seen)
