"""
Adapter base — the contract between the build engine and the compiler.

The engine only talks to the compiler through this protocol, never
directly to a subprocess. Tests swap in ``MockCompiler``.
"""

from __future__ import annotations

import shlex
from abc import ABC, abstractmethod

from protobuild.core.models.invocation import InvocationSpec, ProcessResult


class CompilerAdapter(ABC):
    """Abstract base class for schema compiler backends.

    To create a new adapter:
        1. Subclass CompilerAdapter
        2. Implement name, is_available, command_line, execute
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'protoc')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the underlying compiler can be found. Never raises."""

    @abstractmethod
    def command_line(self, spec: InvocationSpec) -> list[str]:
        """The argv this adapter would run for ``spec``."""

    @abstractmethod
    def execute(self, spec: InvocationSpec) -> ProcessResult:
        """Run the compiler and report how it terminated.

        Non-zero exits and signals are returned as results. Only a
        failure to start the process raises (``CompilerLaunchError``).
        """

    def format_command(self, spec: InvocationSpec) -> str:
        """Printable form of ``command_line``."""
        return shlex.join(self.command_line(spec))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
