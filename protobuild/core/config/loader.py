"""
Configuration loader — reads Protobuild.toml into domain models.

This is the primary entry point for loading build configuration.
It reads TOML (or YAML, by file suffix), validates against Pydantic
schemas, and returns a typed ``ProtobuildConfig``.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

import yaml
from pydantic import ValidationError

from protobuild.core.errors import ConfigError
from protobuild.core.models.config import SUPPORTED_VERSION, ProtobuildConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "Protobuild.toml"

# Well-known schema every descriptor set is described by
DESCRIPTOR_PROTO = "google/protobuf/descriptor.proto"

__all__ = [
    "CONFIG_FILE",
    "ConfigError",
    "DESCRIPTOR_PROTO",
    "find_config_file",
    "load_config",
    "locate_descriptor_proto",
]


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for Protobuild.toml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to Protobuild.toml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None  # filesystem root
        current = parent


def _parse(path: Path, raw: str) -> object:
    if path.suffix in (".yml", ".yaml"):
        try:
            return yaml.safe_load(raw) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def load_config(path: Path | None = None) -> ProtobuildConfig:
    """Load and validate build configuration.

    Args:
        path: Explicit path to the config file. If None, searches upward.

    Returns:
        Validated ProtobuildConfig model.

    Raises:
        ConfigError: If the file is missing, unparsable, or invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        raise ConfigError(f"No {CONFIG_FILE} found. Specify one with -f.")

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    data = _parse(path, raw)
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping in {path}, got {type(data).__name__}")

    try:
        config = ProtobuildConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    if config.version != SUPPORTED_VERSION:
        raise ConfigError(
            f"Unknown config version {config.version!r} in {path}; "
            f"please upgrade to {SUPPORTED_VERSION!r}"
        )

    logger.info(
        "Loaded config: generator=%s, %d overrides, %d descriptor targets",
        config.generator,
        len(config.overrides),
        len(config.descriptors),
    )
    return config


def locate_descriptor_proto(search_dirs: list[str]) -> Path:
    """Find google/protobuf/descriptor.proto in the first directory that has it.

    Raises:
        ConfigError: If none of the directories contain the file.
    """
    for directory in search_dirs:
        candidate = Path(directory) / DESCRIPTOR_PROTO
        if candidate.exists():
            logger.debug("Using descriptor proto %s", candidate)
            return candidate

    raise ConfigError(f"File {DESCRIPTOR_PROTO!r} not found (looked in: {search_dirs})")
