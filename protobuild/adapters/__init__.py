"""Adapters — bindings for the external tools protobuild drives.

Public re-exports for convenient access.
"""

from protobuild.adapters.base import CompilerAdapter
from protobuild.adapters.mock import MockCompiler
from protobuild.adapters.shell.protoc import ProtocAdapter

__all__ = [
    "CompilerAdapter",
    "MockCompiler",
    "ProtocAdapter",
]
