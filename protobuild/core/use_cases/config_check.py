"""
Config check use case — validate Protobuild.toml and report issues.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

from protobuild.core.config.loader import (
    ConfigError,
    find_config_file,
    load_config,
    locate_descriptor_proto,
)
from protobuild.core.models.config import ProtobuildConfig


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: ProtobuildConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "generator": self.config.generator if self.config else None,
            "override_count": len(self.config.overrides) if self.config else 0,
            "descriptor_count": len(self.config.descriptors) if self.config else 0,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate build configuration and report issues.

    Args:
        config_path: Optional explicit path to Protobuild.toml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()
    if config_path is None:
        result.errors.append("No Protobuild.toml found.")
        return result
    result.config_path = config_path

    try:
        config = load_config(config_path)
        result.config = config
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    # Override prefixes listed by more than one rule: the later rule wins
    prefix_counts = Counter(p for rule in config.overrides for p in rule.prefixes)
    dupes = sorted(p for p, n in prefix_counts.items() if n > 1)
    if dupes:
        result.warnings.append(
            f"Override prefixes defined more than once (last rule wins): {', '.join(dupes)}"
        )

    for rule in config.overrides:
        if not rule.prefixes:
            result.warnings.append("Override rule without prefixes has no effect.")

    descriptor_counts = Counter(d.prefix for d in config.descriptors)
    desc_dupes = sorted(p for p, n in descriptor_counts.items() if n > 1)
    if desc_dupes:
        result.warnings.append(
            f"Descriptor prefixes targeted more than once: {', '.join(desc_dupes)}"
        )

    if config.descriptors:
        try:
            locate_descriptor_proto(config.includes.after)
        except ConfigError as e:
            result.errors.append(str(e))

    result.valid = len(result.errors) == 0
    return result
