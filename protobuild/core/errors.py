"""
Error taxonomy — every fatal condition the build can hit.

The CLI catches ``ProtobuildError`` and maps it to an exit status.
Only ``CompilerExit`` carries its own code; everything else exits 1.
"""

from __future__ import annotations


class ProtobuildError(Exception):
    """Base class for all protobuild failures."""

    exit_code: int = 1


class ConfigError(ProtobuildError):
    """Raised when configuration is invalid, missing, or incomplete."""


class DiscoveryError(ProtobuildError):
    """Raised when package discovery fails outright."""


class VendorResolutionError(ProtobuildError):
    """Raised when a vendor candidate cannot be inspected."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot inspect vendor directory {path}: {reason}")
        self.path = path


class PlanningError(ProtobuildError):
    """Raised when a package cannot be turned into an invocation."""


class CompilerLaunchError(ProtobuildError):
    """Raised when the compiler binary cannot be started at all."""


class CompilerFailure(ProtobuildError):
    """Raised when the compiler terminated abnormally (killed by a signal)."""

    def __init__(self, message: str, command: str = ""):
        super().__init__(message)
        self.command = command


class CompilerExit(CompilerFailure):
    """Raised when the compiler exited with a non-zero status.

    The CLI exits with exactly ``code`` so callers see what protoc reported.
    """

    def __init__(self, code: int, command: str = ""):
        super().__init__(f"protoc exited with status {code}", command)
        self.code = code

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        return self.code


class DescriptorError(ProtobuildError):
    """Raised on descriptor temp-file or output-file I/O and parse failures."""
