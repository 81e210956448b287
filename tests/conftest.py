"""
Shared test fixtures and configuration.
"""

import logging
import textwrap
from pathlib import Path

import pytest

from protobuild.core.models.package import PackageUnit


@pytest.fixture
def gopath(tmp_path: Path, monkeypatch) -> Path:
    """A single-entry GOPATH with an empty src directory."""
    root = tmp_path / "go"
    (root / "src").mkdir(parents=True)
    monkeypatch.setenv("GOPATH", str(root))
    return root


@pytest.fixture
def src_root(gopath: Path) -> Path:
    return gopath / "src"


@pytest.fixture
def make_package(src_root: Path):
    """Factory: create a package directory under GOPATH/src with .proto files."""

    def _make(import_path: str, *files: str) -> PackageUnit:
        pkg_dir = src_root / import_path
        pkg_dir.mkdir(parents=True, exist_ok=True)
        for name in files:
            (pkg_dir / name).write_text('syntax = "proto3";\n')
        return PackageUnit(
            dir=str(pkg_dir),
            import_path=import_path,
            proto_files=tuple(str(pkg_dir / name) for name in files),
        )

    return _make


@pytest.fixture
def include_dir(tmp_path: Path) -> Path:
    """An include root holding google/protobuf/descriptor.proto."""
    root = tmp_path / "include"
    proto = root / "google" / "protobuf" / "descriptor.proto"
    proto.parent.mkdir(parents=True)
    proto.write_text('syntax = "proto2";\npackage google.protobuf;\n')
    return root


@pytest.fixture
def write_config(tmp_path: Path):
    """Factory: write a Protobuild.toml and return its path."""

    def _write(content: str, name: str = "Protobuild.toml") -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(content))
        return path

    return _write


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
