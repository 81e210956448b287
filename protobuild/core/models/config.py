"""
Configuration model — the validated contents of Protobuild.toml.

Loaded once at startup by the config loader and treated as read-only
for the whole run. Field names mirror the file's keys.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

SUPPORTED_VERSION = "unstable"


class IncludeConfig(BaseModel):
    """Include-path groups, applied in a fixed precedence order.

    ``before`` and ``after`` are used verbatim. ``vendored`` entries are
    joined under the package's vendor root. ``packages`` entries are
    joined under the vendor root and under every import root.
    """

    model_config = ConfigDict(frozen=True)

    before: list[str] = Field(default_factory=list)
    vendored: list[str] = Field(default_factory=list)
    packages: list[str] = Field(default_factory=list)
    after: list[str] = Field(default_factory=list)


class OverrideRule(BaseModel):
    """Generator/plugin replacement for packages under given prefixes.

    ``plugins=None`` leaves the default plugins alone; ``plugins=[]``
    means "no plugins" for matching packages.
    """

    model_config = ConfigDict(frozen=True)

    prefixes: list[str] = Field(default_factory=list)
    generator: str | None = None
    plugins: list[str] | None = None


class DescriptorTarget(BaseModel):
    """Where to write the aggregated descriptors for one prefix."""

    model_config = ConfigDict(frozen=True)

    prefix: str
    target: str
    ignore_files: list[str] = Field(default_factory=list)


class ProtobuildConfig(BaseModel):
    """Root configuration — loaded from Protobuild.toml."""

    model_config = ConfigDict(frozen=True)

    version: str = SUPPORTED_VERSION
    generator: str = "go"
    plugins: list[str] = Field(default_factory=list)
    packages: dict[str, str] = Field(default_factory=dict)  # proto file -> go package (M option)
    includes: IncludeConfig = Field(default_factory=IncludeConfig)
    overrides: list[OverrideRule] = Field(default_factory=list)
    descriptors: list[DescriptorTarget] = Field(default_factory=list)

    @property
    def descriptor_prefixes(self) -> list[str]:
        """Configured descriptor prefixes, in file order."""
        return [d.prefix for d in self.descriptors]
