"""
Invocation models — what to run and how it ended.

An ``InvocationSpec`` is built fresh for each package by the planner
and consumed once by the compiler adapter. ``ProcessResult`` is the
adapter's answer: a normal exit with a code, or termination by signal.
Launch failures are raised, never returned.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class InvocationSpec(BaseModel):
    """A single planned compiler run."""

    model_config = ConfigDict(frozen=True)

    generator: str                  # protoc --<generator>_out
    import_path: str
    plugins: tuple[str, ...] = Field(default_factory=tuple)
    package_map: dict[str, str] = Field(default_factory=dict)
    files: tuple[str, ...] = Field(default_factory=tuple)
    output_dir: str
    includes: tuple[str, ...] = Field(default_factory=tuple)
    relative_path: str = ""         # package dir relative to output_dir
    descriptor_out: str | None = None

    @property
    def wants_descriptors(self) -> bool:
        return self.descriptor_out is not None


class ProcessResult(BaseModel):
    """How the compiler process terminated."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["exited", "signaled"] = "exited"
    code: int = 0       # exit status for "exited", signal number for "signaled"

    @property
    def ok(self) -> bool:
        return self.kind == "exited" and self.code == 0

    @classmethod
    def exited(cls, code: int) -> ProcessResult:
        return cls(kind="exited", code=code)

    @classmethod
    def signaled(cls, signal: int) -> ProcessResult:
        return cls(kind="signaled", code=signal)

    @classmethod
    def from_returncode(cls, returncode: int) -> ProcessResult:
        """Map a ``subprocess`` return code (negative = killed) to a result."""
        if returncode < 0:
            return cls.signaled(-returncode)
        return cls.exited(returncode)
