"""
Go package discovery — find packages that hold .proto files.

Uses the go CLI (``go list``) to enumerate packages, then globs each
package directory for ``*.proto``. Directories without any are not
build units and are skipped.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from protobuild.core.errors import DiscoveryError
from protobuild.core.models.package import PackageUnit

logger = logging.getLogger(__name__)

LIST_FORMAT = "{{.ImportPath}} {{.Dir}}"
DEFAULT_PATTERNS = ("./...",)


def parse_list_output(output: str) -> list[tuple[str, str]]:
    """Parse ``go list -f '{{.ImportPath}} {{.Dir}}'`` output into pairs.

    Raises:
        DiscoveryError: If any non-empty line doesn't have exactly two fields.
    """
    pairs = []
    for line in output.split("\n"):
        if not line:
            continue
        parts = line.split()
        if len(parts) != 2:
            raise DiscoveryError(f"bad output from go list: {output!r}")
        import_path, directory = parts
        pairs.append((import_path, directory))
    return pairs


def proto_files(directory: str) -> tuple[str, ...]:
    return tuple(sorted(str(p) for p in Path(directory).glob("*.proto")))


def discover_packages(
    patterns: list[str] | tuple[str, ...] = DEFAULT_PATTERNS,
    binary: str = "go",
    cwd: str | None = None,
) -> list[PackageUnit]:
    """List Go packages matching ``patterns`` that contain .proto files.

    Raises:
        DiscoveryError: If go can't be run, exits non-zero, or prints
            something unparsable.
    """
    cmd = [binary, "list", "-e", "-f", LIST_FORMAT, *patterns]
    logger.debug("Discovering packages: %s", cmd)

    try:
        result = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
    except OSError as e:
        raise DiscoveryError(f"Cannot run {binary}: {e}") from e

    if result.returncode != 0:
        raise DiscoveryError(
            f"{' '.join(cmd)} exited with status {result.returncode}: {result.stderr.strip()}"
        )

    packages = []
    for import_path, directory in parse_list_output(result.stdout):
        files = proto_files(directory)
        if not files:
            continue  # not a proto directory
        packages.append(PackageUnit(dir=directory, import_path=import_path, proto_files=files))

    logger.info("Discovered %d packages with .proto files", len(packages))
    return packages
