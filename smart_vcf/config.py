"""
Shared configuration for the smart VCF downloader.
Centralizes defaults, environment overrides, and run-config validation.
"""

from pathlib import Path
import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Optional, Dict, Any

import yaml

# Initialize logging once when module is imported
LOGGER_NAME = "smart_vcf"
_root_logger = logging.getLogger()
if not _root_logger.handlers:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )
logger = logging.getLogger(LOGGER_NAME)


# Defaults - all overridable via environment or YAML run config
DEFAULT_OUTPUT_DIR = Path(os.getenv("SMART_VCF_OUTPUT_DIR", "."))
DEFAULT_JOBS = int(os.getenv("SMART_VCF_JOBS", "4"))
DEFAULT_TIMEOUT = float(os.getenv("SMART_VCF_TIMEOUT", "10"))
DEFAULT_CHUNK_SIZE = int(os.getenv("SMART_VCF_CHUNK_SIZE", str(64 * 1024)))
DEFAULT_ALGORITHM = os.getenv("SMART_VCF_ALGORITHM", "md5")
DEFAULT_MAX_DECOMPRESSED_CHUNK = 1024 * 1024
DEFAULT_MAX_RETRIES = 3

MAX_JOBS = 64


@dataclass(frozen=True)
class RetrievalConfig:
    """Options for one retrieval run. Shared read-only by every worker."""
    output_dir: Path = DEFAULT_OUTPUT_DIR
    jobs: int = DEFAULT_JOBS
    preserve_headers: bool = True
    compress_output: bool = True
    default_algorithm: str = DEFAULT_ALGORITHM
    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_decompressed_chunk: int = DEFAULT_MAX_DECOMPRESSED_CHUNK
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    output_prefix: str = ""
    show_progress: bool = True
    keep_unverified: bool = True

    def __post_init__(self):
        object.__setattr__(self, "output_dir", Path(self.output_dir))
        validate_config(self)

    def with_overrides(self, **overrides: Any) -> "RetrievalConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def validate_config(config: RetrievalConfig) -> None:
    """Validate run configuration and fail fast on nonsense values."""
    if not (1 <= config.jobs <= MAX_JOBS):
        raise ValueError(f"jobs must be between 1 and {MAX_JOBS}, got {config.jobs}")

    if config.chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {config.chunk_size}")

    if config.max_decompressed_chunk <= 0:
        raise ValueError(
            f"max_decompressed_chunk must be positive, got {config.max_decompressed_chunk}"
        )

    if config.timeout <= 0:
        raise ValueError(f"timeout must be positive, got {config.timeout}")

    if config.max_retries < 0:
        raise ValueError(f"max_retries must be >= 0, got {config.max_retries}")

    if "/" in config.output_prefix:
        raise ValueError(f"output_prefix must not contain '/', got {config.output_prefix!r}")


def validate_file_exists(path: Path, context: str = "") -> None:
    """Validate that a file exists, raise informative error if not."""
    if not path.exists():
        context_msg = f" ({context})" if context else ""
        raise FileNotFoundError(
            f"Required file missing: {path}{context_msg}\n"
            f"Please check the path and try again."
        )


def load_run_config(config_path: Path, base: Optional[RetrievalConfig] = None) -> RetrievalConfig:
    """
    Load a run configuration from YAML file.

    Args:
        config_path: Path to a YAML mapping of RetrievalConfig fields
        base: Configuration the file values are layered on (defaults if None)

    Returns:
        Validated RetrievalConfig

    Raises:
        FileNotFoundError: If the config file does not exist
        ValueError: If the file is invalid, has unknown keys or bad values
    """
    validate_file_exists(config_path, "run config")

    try:
        with open(config_path, 'r') as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(
            f"Failed to parse YAML run config: {e}\n"
            f"Config file: {config_path}"
        ) from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(
            f"Invalid run config format: expected mapping, got {type(raw).__name__}\n"
            f"Config file: {config_path}"
        )

    known = {f.name for f in fields(RetrievalConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(
            f"Run config has unknown keys: {unknown}\n"
            f"Config file: {config_path}"
        )

    config = (base or RetrievalConfig()).with_overrides(**_coerce(raw))
    logger.info(f"Loaded run configuration from {config_path}")
    return config


def _coerce(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Convert YAML scalars to the field types RetrievalConfig expects."""
    out: Dict[str, Any] = {}
    for name, value in raw.items():
        if value is None:
            continue
        if name == "output_dir":
            out[name] = Path(value)
        elif name in ("jobs", "chunk_size", "max_decompressed_chunk", "max_retries"):
            out[name] = int(value)
        elif name == "timeout":
            out[name] = float(value)
        elif name in ("preserve_headers", "compress_output", "show_progress", "keep_unverified"):
            if not isinstance(value, bool):
                raise ValueError(f"{name} must be true or false, got {value!r}")
            out[name] = value
        else:
            out[name] = str(value)
    return out


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Adjust the package log level for CLI runs and return the package logger."""
    level = logging.DEBUG if verbose else (logging.WARNING if quiet else logging.INFO)
    logging.getLogger().setLevel(level)
    logger.setLevel(level)
    return logger
