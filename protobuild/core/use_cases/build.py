"""
Build use case — compile every discovered package.

The full vertical slice from ``protobuild build`` to written descriptor
sets: load config, resolve import roots, discover packages, execute.
Fatal errors are captured on the result together with the exit status
the CLI should terminate with.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

from protobuild.adapters.base import CompilerAdapter
from protobuild.adapters.languages.go import DEFAULT_PATTERNS, discover_packages
from protobuild.adapters.shell.protoc import ProtocAdapter
from protobuild.core.config.loader import find_config_file, load_config
from protobuild.core.engine.executor import BuildReport, execute_build
from protobuild.core.errors import CompilerFailure, ProtobuildError
from protobuild.core.models.package import PackageUnit
from protobuild.core.services.gopath import gopath_roots, output_root

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of the build use case."""

    report: BuildReport | None = None
    config_path: Path | None = None
    error: str | None = None
    command: str | None = None      # failing compiler command, if any
    exit_code: int = 0

    def to_dict(self) -> dict:
        result: dict = {"exit_code": self.exit_code}
        if self.error:
            result["error"] = self.error
            if self.command:
                result["command"] = self.command
            return result

        result["config_path"] = str(self.config_path) if self.config_path else None
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def run_build(
    config_path: Path | None = None,
    patterns: list[str] | None = None,
    dry_run: bool = False,
    quiet: bool = False,
    jobs: int = 1,
    adapter: CompilerAdapter | None = None,
    packages: list[PackageUnit] | None = None,
    env: Mapping[str, str] | None = None,
    echo: Callable[[str], None] | None = None,
) -> BuildResult:
    """Run protoc across the source tree.

    Args:
        config_path: Explicit path to Protobuild.toml (default: search upward).
        patterns: go list package patterns (default: ./...).
        dry_run: Print commands without running them.
        quiet: Suppress command output unless a command fails.
        jobs: Concurrent compiler invocations.
        adapter: Compiler backend (default: protoc on PATH).
        packages: Pre-discovered packages; skips ``go list`` when given.
        env: Environment to read GOPATH from (default: os.environ).
        echo: Sink for planned command lines.

    Returns:
        BuildResult with the report, or the error and exit status.
    """
    result = BuildResult()
    adapter = adapter or ProtocAdapter()

    try:
        if config_path is None:
            config_path = find_config_file()
        config = load_config(config_path)
        result.config_path = config_path

        roots = gopath_roots(env)
        output_dir = output_root(env)

        if packages is None:
            packages = discover_packages(patterns or list(DEFAULT_PATTERNS))

        result.report = execute_build(
            config,
            packages,
            roots=roots,
            output_dir=output_dir,
            adapter=adapter,
            dry_run=dry_run,
            quiet=quiet,
            jobs=jobs,
            echo=echo,
            base_dir=config_path.parent.resolve() if config_path else None,
            protoc=getattr(adapter, "binary", "protoc"),
        )

    except CompilerFailure as e:
        result.error = str(e)
        result.command = e.command
        result.exit_code = e.exit_code
    except ProtobuildError as e:
        result.error = str(e)
        result.exit_code = e.exit_code

    if result.error:
        logger.debug("Build failed (exit %d): %s", result.exit_code, result.error)
    return result


def list_packages(
    patterns: list[str] | None = None,
) -> list[PackageUnit]:
    """Discovered packages that would be compiled."""
    return discover_packages(patterns or list(DEFAULT_PATTERNS))
