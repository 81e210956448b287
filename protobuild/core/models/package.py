"""
Package model — one buildable unit found by discovery.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PackageUnit(BaseModel):
    """A directory holding .proto files, with its Go import path."""

    model_config = ConfigDict(frozen=True)

    dir: str
    import_path: str
    proto_files: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def has_inputs(self) -> bool:
        return len(self.proto_files) > 0

    def to_dict(self) -> dict:
        return {
            "import_path": self.import_path,
            "dir": self.dir,
            "proto_files": list(self.proto_files),
        }


def with_inputs(packages: list[PackageUnit]) -> list[PackageUnit]:
    """Drop packages that have nothing to compile, keeping order."""
    return [p for p in packages if p.has_inputs]
