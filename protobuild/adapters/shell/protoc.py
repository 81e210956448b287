"""
protoc adapter — run the protocol buffer compiler.

Serializes an ``InvocationSpec`` into protoc's command line:

    protoc -I<dir>:<dir>... [--include_imports --descriptor_set_out=<file>]
        --<generator>_out=[plugins=<a>+<b>,]import_path=<path>[,M<proto>=<pkg>...]:<out>
        <files...>

protoc's own stdout/stderr are passed through to the terminal.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time

from protobuild.adapters.base import CompilerAdapter
from protobuild.core.errors import CompilerLaunchError
from protobuild.core.models.invocation import InvocationSpec, ProcessResult

logger = logging.getLogger(__name__)


class ProtocAdapter(CompilerAdapter):
    """Invoke a ``protoc`` binary."""

    def __init__(self, binary: str = "protoc"):
        self._binary = binary

    @property
    def name(self) -> str:
        return "protoc"

    @property
    def binary(self) -> str:
        return self._binary

    def is_available(self) -> bool:
        return shutil.which(self._binary) is not None

    def command_line(self, spec: InvocationSpec) -> list[str]:
        args = [self._binary, "-I" + os.pathsep.join(spec.includes)]

        if spec.descriptor_out:
            args += ["--include_imports", f"--descriptor_set_out={spec.descriptor_out}"]

        params = []
        if spec.plugins:
            params.append("plugins=" + "+".join(spec.plugins))
        params.append(f"import_path={spec.import_path}")
        params.extend(f"M{proto}={pkg}" for proto, pkg in sorted(spec.package_map.items()))

        args.append(f"--{spec.generator}_out={','.join(params)}:{spec.output_dir}")
        args.extend(spec.files)
        return args

    def execute(self, spec: InvocationSpec) -> ProcessResult:
        argv = self.command_line(spec)
        logger.debug("Executing: %s", argv)
        start = time.monotonic()

        try:
            proc = subprocess.run(argv)
        except OSError as e:
            raise CompilerLaunchError(f"Cannot run {self._binary}: {e}") from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        result = ProcessResult.from_returncode(proc.returncode)
        logger.info(
            "%s %s (%dms) → %s %d",
            "✓" if result.ok else "✗",
            spec.relative_path or spec.import_path,
            elapsed_ms,
            result.kind,
            result.code,
        )
        return result
