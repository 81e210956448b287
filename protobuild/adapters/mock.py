"""
Mock compiler — test double for the compiler adapter.

Records every spec it receives, returns success by default, and can
be told to fail (or write a descriptor blob) for specific packages.
"""

from __future__ import annotations

from pathlib import Path

from google.protobuf import descriptor_pb2

from protobuild.adapters.base import CompilerAdapter
from protobuild.core.models.invocation import InvocationSpec, ProcessResult


class MockCompiler(CompilerAdapter):
    """Universal mock compiler for testing.

    Results and descriptor payloads are keyed by import path.
    """

    def __init__(self, adapter_name: str = "mock", available: bool = True):
        self._name = adapter_name
        self._available = available
        self._results: dict[str, ProcessResult] = {}
        self._descriptors: dict[str, list[descriptor_pb2.FileDescriptorProto]] = {}
        self._call_log: list[InvocationSpec] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[InvocationSpec]:
        """All specs this mock has executed."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_result(self, import_path: str, result: ProcessResult) -> None:
        """Set a custom result for a specific package."""
        self._results[import_path] = result

    def set_exit(self, import_path: str, code: int) -> None:
        """Configure a specific package to exit with ``code``."""
        self._results[import_path] = ProcessResult.exited(code)

    def set_descriptors(self, import_path: str, *names: str) -> None:
        """Emit FileDescriptorProtos with these names when asked for descriptors."""
        self._descriptors[import_path] = [
            descriptor_pb2.FileDescriptorProto(name=n, package=import_path.replace("/", "."))
            for n in names
        ]

    def command_line(self, spec: InvocationSpec) -> list[str]:
        args = [self._name, f"--{spec.generator}_out={spec.output_dir}"]
        if spec.descriptor_out:
            args.append(f"--descriptor_set_out={spec.descriptor_out}")
        return args + list(spec.files)

    def execute(self, spec: InvocationSpec) -> ProcessResult:
        self._call_log.append(spec)

        result = self._results.get(spec.import_path, ProcessResult.exited(0))
        if result.ok and spec.descriptor_out:
            fds = descriptor_pb2.FileDescriptorSet()
            fds.file.extend(self._descriptors.get(spec.import_path, []))
            Path(spec.descriptor_out).write_bytes(fds.SerializeToString())
        return result

    def reset(self) -> None:
        """Clear call log and custom results."""
        self._call_log.clear()
        self._results.clear()
        self._descriptors.clear()
