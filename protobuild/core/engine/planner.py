"""
Invocation planner — turn one package into one protoc invocation.

The planner is pure apart from allocating the temporary descriptor
file: given the package, its include directories, the defaults and
the override index, it returns a frozen ``InvocationSpec``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

from protobuild.core.errors import PlanningError
from protobuild.core.models.invocation import InvocationSpec
from protobuild.core.models.package import PackageUnit
from protobuild.core.services.descriptors import allocate_descriptor_file
from protobuild.core.services.overrides import OverrideIndex

logger = logging.getLogger(__name__)


def relative_import_path(package_dir: str, output_dir: str) -> str:
    """Package directory relative to the output root, with forward slashes.

    Raises:
        PlanningError: If the package does not live under ``output_dir``.
    """
    try:
        rel = os.path.relpath(os.path.abspath(package_dir), os.path.abspath(output_dir))
    except ValueError as e:
        raise PlanningError(f"Cannot place package {package_dir} under {output_dir}: {e}") from e

    if rel == os.pardir or rel.startswith(os.pardir + os.sep) or os.path.isabs(rel):
        raise PlanningError(f"Package {package_dir} is not under output directory {output_dir}")

    return rel.replace(os.sep, "/")


def wants_descriptors(relative_path: str, prefixes: Iterable[str]) -> bool:
    """Whether any descriptor prefix covers this package."""
    return any(relative_path.startswith(prefix) for prefix in prefixes)


def plan_invocation(
    package: PackageUnit,
    includes: list[str],
    generator: str,
    plugins: list[str],
    package_map: dict[str, str],
    output_dir: str,
    overrides: OverrideIndex,
    want_descriptor: bool,
) -> InvocationSpec:
    """Build the protoc invocation for one package.

    Overrides are looked up by the package path relative to
    ``output_dir``. When ``want_descriptor`` is set, a fresh temporary
    file is allocated for ``--descriptor_set_out``; the caller owns
    its removal.
    """
    rel = relative_import_path(package.dir, output_dir)
    generator, plugins = overrides.apply(rel, generator, plugins)

    descriptor_out = allocate_descriptor_file() if want_descriptor else None

    spec = InvocationSpec(
        generator=generator,
        import_path=package.import_path,
        plugins=tuple(plugins),
        package_map=dict(package_map),
        files=package.proto_files,
        output_dir=output_dir,
        includes=tuple(includes),
        relative_path=rel,
        descriptor_out=descriptor_out,
    )
    logger.debug("Planned %s: generator=%s plugins=%s", rel, spec.generator, list(spec.plugins))
    return spec
