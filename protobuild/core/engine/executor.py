"""
Build executor — the central orchestration loop.

Takes a validated config and the discovered packages, plans one protoc
invocation per package, runs them through a compiler adapter, folds any
emitted descriptors into their prefix sets, and writes the sets once
everything has compiled.

Flow:
    packages → vendor → includes → plan → run → collect descriptors → write sets

A non-zero compiler exit stops the build and surfaces as ``CompilerExit``
carrying protoc's exact status.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path

from protobuild.adapters.base import CompilerAdapter
from protobuild.core.config.loader import locate_descriptor_proto
from protobuild.core.engine.planner import (
    plan_invocation,
    relative_import_path,
    wants_descriptors,
)
from protobuild.core.errors import CompilerExit, CompilerFailure, ProtobuildError
from protobuild.core.models.config import ProtobuildConfig
from protobuild.core.models.invocation import InvocationSpec, ProcessResult
from protobuild.core.models.package import PackageUnit, with_inputs
from protobuild.core.observability.logging_config import COMMAND
from protobuild.core.services.descriptors import (
    DescriptorSet,
    descriptor_output,
    read_descriptor_set,
)
from protobuild.core.services.includes import build_includes
from protobuild.core.services.overrides import OverrideIndex
from protobuild.core.services.vendor import resolve_vendor_dir

logger = logging.getLogger(__name__)


@dataclass
class BuildReport:
    """Result of a build run."""

    dry_run: bool = False
    packages: int = 0
    invocations: int = 0
    commands: list[str] = field(default_factory=list)
    descriptors_written: list[str] = field(default_factory=list)
    descriptors_skipped: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "dry_run": self.dry_run,
            "packages": self.packages,
            "invocations": self.invocations,
            "commands": self.commands,
            "descriptors_written": self.descriptors_written,
            "descriptors_skipped": self.descriptors_skipped,
        }


def prepare_descriptor_sets(config: ProtobuildConfig) -> dict[str, DescriptorSet]:
    """One empty set per configured prefix.

    Locates descriptor.proto in ``includes.after`` first, so a missing
    schema aborts before anything is compiled.
    """
    if not config.descriptors:
        return {}

    descriptor_proto = locate_descriptor_proto(config.includes.after)
    return {
        target.prefix: DescriptorSet.from_target(target, descriptor_proto)
        for target in config.descriptors
    }


def plan_package(
    package: PackageUnit,
    config: ProtobuildConfig,
    roots: list[str],
    output_dir: str,
    overrides: OverrideIndex,
) -> InvocationSpec:
    """Vendor resolution, include assembly and planning for one package."""
    vendor = resolve_vendor_dir(package.dir)
    includes = build_includes(config.includes, roots, vendor)
    rel = relative_import_path(package.dir, output_dir)

    return plan_invocation(
        package,
        includes,
        generator=config.generator,
        plugins=config.plugins,
        package_map=config.packages,
        output_dir=output_dir,
        overrides=overrides,
        want_descriptor=wants_descriptors(rel, config.descriptor_prefixes),
    )


def check_result(result: ProcessResult, command: str, quiet: bool) -> None:
    """Raise for anything but a clean exit."""
    if result.ok:
        return

    if quiet:
        logger.error("%s", command, extra=COMMAND)

    if result.kind == "exited":
        raise CompilerExit(result.code, command)
    raise CompilerFailure(f"protoc was killed by signal {result.code}", command)


def _run(adapter: CompilerAdapter, spec: InvocationSpec, command: str, quiet: bool) -> None:
    try:
        result = adapter.execute(spec)
    except ProtobuildError:
        if quiet:
            logger.error("%s", command, extra=COMMAND)
        raise
    check_result(result, command, quiet)


def _run_unless_failed(
    adapter: CompilerAdapter,
    spec: InvocationSpec,
    command: str,
    quiet: bool,
    failed: threading.Event,
) -> bool:
    """Pool worker. Returns False without launching once any invocation has failed."""
    if failed.is_set():
        logger.debug("Skipping %s: an earlier invocation failed", spec.import_path)
        return False
    try:
        _run(adapter, spec, command, quiet)
    except BaseException:
        failed.set()
        raise
    return True


def collect_descriptors(spec: InvocationSpec, sets: dict[str, DescriptorSet]) -> None:
    """Read the invocation's descriptor blob into every set whose prefix matches."""
    if spec.descriptor_out is None:
        return

    fds = read_descriptor_set(spec.descriptor_out)
    for descriptor_set in sets.values():
        if descriptor_set.matches(spec.relative_path):
            descriptor_set.add(*fds.file)


def write_descriptor_sets(
    config: ProtobuildConfig,
    sets: dict[str, DescriptorSet],
    report: BuildReport,
    base_dir: Path | None = None,
    protoc: str = "protoc",
) -> None:
    """Write every configured target; empty sets leave their file alone."""
    for target in config.descriptors:
        path = Path(target.target)
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path

        if sets[target.prefix].write_target(path, protoc=protoc):
            report.descriptors_written.append(str(path))
        else:
            report.descriptors_skipped.append(str(path))


def execute_build(
    config: ProtobuildConfig,
    packages: list[PackageUnit],
    roots: list[str],
    output_dir: str,
    adapter: CompilerAdapter,
    dry_run: bool = False,
    quiet: bool = False,
    jobs: int = 1,
    echo: Callable[[str], None] | None = None,
    base_dir: Path | None = None,
    protoc: str = "protoc",
) -> BuildReport:
    """Compile every package and write the descriptor sets.

    Args:
        config: Validated configuration.
        packages: Discovered packages, in discovery order.
        roots: Import roots (every GOPATH ``src``).
        output_dir: Root protoc writes generated code under.
        adapter: Compiler backend.
        dry_run: Plan and print commands, but run nothing and write nothing.
        quiet: Don't print commands unless one fails.
        jobs: Number of concurrent compiler invocations.
        echo: Sink for planned command lines.
        base_dir: Directory relative descriptor targets resolve against.
        protoc: protoc binary used to render ``.txt`` descriptor targets.

    Raises:
        CompilerExit: protoc exited non-zero; ``code`` is its status.
        ProtobuildError: Any other fatal condition.
    """
    echo = echo or (lambda line: None)
    report = BuildReport(dry_run=dry_run)

    packages = with_inputs(packages)
    report.packages = len(packages)

    overrides = OverrideIndex.build(config.overrides)
    sets = prepare_descriptor_sets(config)

    def announce(command: str) -> None:
        report.commands.append(command)
        if not quiet:
            echo(command)

    if jobs > 1 and not dry_run:
        _execute_concurrent(
            config, packages, roots, output_dir, overrides, sets,
            adapter, quiet, jobs, announce, report,
        )
    else:
        for package in packages:
            spec = plan_package(package, config, roots, output_dir, overrides)
            with descriptor_output(spec):
                command = adapter.format_command(spec)
                announce(command)
                if dry_run:
                    continue

                _run(adapter, spec, command, quiet)
                report.invocations += 1
                collect_descriptors(spec, sets)

    if not dry_run:
        write_descriptor_sets(config, sets, report, base_dir=base_dir, protoc=protoc)

    logger.info(
        "Build finished: %d packages, %d invocations, %d descriptor files written",
        report.packages,
        report.invocations,
        len(report.descriptors_written),
    )
    return report


def _execute_concurrent(
    config: ProtobuildConfig,
    packages: list[PackageUnit],
    roots: list[str],
    output_dir: str,
    overrides: OverrideIndex,
    sets: dict[str, DescriptorSet],
    adapter: CompilerAdapter,
    quiet: bool,
    jobs: int,
    announce: Callable[[str], None],
    report: BuildReport,
) -> None:
    # Each spec owns its temp file. Descriptors are folded here, on the
    # calling thread, in discovery order. Once a worker fails, queued
    # invocations return without launching protoc.
    failed = threading.Event()
    with ExitStack() as stack:
        planned: list[tuple[InvocationSpec, str]] = []
        for package in packages:
            spec = stack.enter_context(
                descriptor_output(plan_package(package, config, roots, output_dir, overrides))
            )
            command = adapter.format_command(spec)
            announce(command)
            planned.append((spec, command))

        pool = ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="protoc")
        try:
            futures: list[Future] = [
                pool.submit(_run_unless_failed, adapter, spec, command, quiet, failed)
                for spec, command in planned
            ]
            for (spec, _command), future in zip(planned, futures):
                if not future.result():
                    continue
                report.invocations += 1
                collect_descriptors(spec, sets)
        except BaseException:
            pool.shutdown(wait=True, cancel_futures=True)
            raise
        pool.shutdown(wait=True)
