"""
Include path construction.

protoc resolves imports by searching ``-I`` directories in order, so
whichever root comes first wins when two roots hold the same file.
``IncludePath`` makes that order explicit: stages can only be added in
precedence order, so a caller cannot put roots ahead of the vendor
tree by accident.

Precedence:
    before → vendor (vendored, packages, vendor root) → packages → roots → after
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from protobuild.core.models.config import IncludeConfig

logger = logging.getLogger(__name__)


class IncludeOrderError(RuntimeError):
    """Raised when include stages are added out of precedence order."""


class IncludePath:
    """An ordered list of include directories, assembled in named stages."""

    STAGES = ("before", "vendor", "packages", "roots", "after")

    def __init__(self) -> None:
        self._dirs: list[str] = []
        self._stage = -1

    def _enter(self, stage: str) -> None:
        index = self.STAGES.index(stage)
        if index <= self._stage:
            raise IncludeOrderError(
                f"Stage {stage!r} cannot follow {self.STAGES[self._stage]!r}"
            )
        self._stage = index

    def before(self, dirs: list[str]) -> IncludePath:
        self._enter("before")
        self._dirs.extend(dirs)
        return self

    def vendor(
        self,
        vendor_dir: str | Path | None,
        vendored: list[str],
        packages: list[str],
    ) -> IncludePath:
        self._enter("vendor")
        if vendor_dir is None:
            if vendored:
                logger.warning("ignoring vendored includes: vendor directory not found")
            return self

        vendor_dir = str(vendor_dir)
        self._dirs.extend(os.path.join(vendor_dir, v) for v in vendored)
        self._dirs.extend(os.path.join(vendor_dir, p) for p in packages)
        self._dirs.append(vendor_dir)
        return self

    def packages(self, packages: list[str], roots: list[str]) -> IncludePath:
        self._enter("packages")
        for package in packages:
            self._dirs.extend(os.path.join(root, package) for root in roots)
        return self

    def roots(self, roots: list[str]) -> IncludePath:
        self._enter("roots")
        self._dirs.extend(roots)
        return self

    def after(self, dirs: list[str]) -> IncludePath:
        self._enter("after")
        self._dirs.extend(dirs)
        return self

    def to_list(self) -> list[str]:
        return list(self._dirs)

    def __iter__(self):
        return iter(self._dirs)

    def __len__(self) -> int:
        return len(self._dirs)


def build_includes(
    config: IncludeConfig,
    roots: list[str],
    vendor_dir: str | Path | None,
) -> list[str]:
    """Assemble the include directories for one package."""
    return (
        IncludePath()
        .before(config.before)
        .vendor(vendor_dir, config.vendored, config.packages)
        .packages(config.packages, roots)
        .roots(roots)
        .after(config.after)
        .to_list()
    )
