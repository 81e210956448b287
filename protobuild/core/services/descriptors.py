"""
Descriptor aggregation — stable, deduplicated FileDescriptorSets.

Each configured prefix owns one ``DescriptorSet``. Every package under
that prefix that was compiled with ``--descriptor_set_out`` contributes
its FileDescriptorProtos; the set keeps one entry per file name, in the
order names were first seen, and is written once at the end of the run.

Temporary descriptor blobs are handled here too: ``descriptor_output``
guarantees the blob is removed however the caller leaves the block.
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

from google.protobuf import descriptor_pb2
from google.protobuf.message import DecodeError

from protobuild.core.config.loader import DESCRIPTOR_PROTO
from protobuild.core.errors import DescriptorError
from protobuild.core.models.config import DescriptorTarget
from protobuild.core.models.invocation import InvocationSpec

logger = logging.getLogger(__name__)

TEXT_SUFFIX = ".txt"
FILE_DESCRIPTOR_SET = "google.protobuf.FileDescriptorSet"


class DescriptorSet:
    """Descriptors accumulated for one prefix.

    Adding a file whose name was already seen replaces its content but
    keeps its original position. Files named in ``ignore_files`` are
    accepted but never appear in ``merged()``.
    """

    def __init__(
        self,
        prefix: str,
        ignore_files: list[str] | None = None,
        descriptor_proto: str | Path | None = None,
    ):
        self.prefix = prefix
        self.ignore_files = frozenset(ignore_files or ())
        self.descriptor_proto = Path(descriptor_proto) if descriptor_proto else None
        self._files: dict[str, descriptor_pb2.FileDescriptorProto] = {}

    @classmethod
    def from_target(
        cls, target: DescriptorTarget, descriptor_proto: str | Path | None
    ) -> DescriptorSet:
        return cls(target.prefix, target.ignore_files, descriptor_proto)

    def matches(self, relative_path: str) -> bool:
        return relative_path.startswith(self.prefix)

    def add(self, *files: descriptor_pb2.FileDescriptorProto) -> None:
        for file in files:
            self._files[file.name] = file

    def merged(self) -> list[descriptor_pb2.FileDescriptorProto]:
        return [f for name, f in self._files.items() if name not in self.ignore_files]

    def to_message(self) -> descriptor_pb2.FileDescriptorSet:
        fds = descriptor_pb2.FileDescriptorSet()
        fds.file.extend(self.merged())
        return fds

    def marshal_to(self, writer: BinaryIO) -> bool:
        """Write the merged set in wire format. Returns False if nothing was written."""
        merged = self.merged()
        if not merged:
            return False
        writer.write(self.to_message().SerializeToString(deterministic=True))
        return True

    def render_text(self, protoc: str = "protoc") -> bytes:
        """Render the merged set as protobuf text via ``protoc --decode``.

        The located descriptor.proto is the schema the decoder reads.
        """
        if self.descriptor_proto is None:
            raise DescriptorError(
                f"Cannot render descriptors for {self.prefix!r} as text: "
                f"{DESCRIPTOR_PROTO} was not located"
            )

        include_root = _include_root(self.descriptor_proto)
        cmd = [protoc, f"-I{include_root}", f"--decode={FILE_DESCRIPTOR_SET}", DESCRIPTOR_PROTO]
        logger.debug("Rendering descriptors for %s: %s", self.prefix, " ".join(cmd))

        try:
            result = subprocess.run(
                cmd,
                input=self.to_message().SerializeToString(deterministic=True),
                capture_output=True,
            )
        except OSError as e:
            raise DescriptorError(f"Cannot run {protoc} to decode descriptors: {e}") from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise DescriptorError(
                f"{' '.join(cmd)} failed with status {result.returncode}: {stderr}"
            )
        return result.stdout

    def write_target(self, target: str | Path, protoc: str = "protoc") -> bool:
        """Truncate and write ``target``. Leaves it untouched when the set is empty."""
        if not self.merged():
            logger.info("No descriptors for %s; leaving %s untouched", self.prefix, target)
            return False

        target = Path(target)
        # decode before truncating, so a failed render keeps the old file
        text = self.render_text(protoc) if target.name.endswith(TEXT_SUFFIX) else None

        try:
            with open(target, "wb") as fp:
                if text is not None:
                    fp.write(text)
                else:
                    self.marshal_to(fp)
                fp.flush()
                os.fsync(fp.fileno())
        except OSError as e:
            raise DescriptorError(f"Cannot write descriptors for {self.prefix!r} to {target}: {e}") from e

        logger.info("Wrote %d descriptors for %s to %s", len(self.merged()), self.prefix, target)
        return True

    def __len__(self) -> int:
        return len(self.merged())

    def __repr__(self) -> str:
        return f"<DescriptorSet prefix={self.prefix!r} files={len(self._files)}>"


def _include_root(descriptor_proto: Path) -> Path:
    # <root>/google/protobuf/descriptor.proto -> <root>
    return descriptor_proto.parents[len(Path(DESCRIPTOR_PROTO).parts) - 1]


def allocate_descriptor_file() -> str:
    """Create an empty private temp file for protoc's --descriptor_set_out."""
    try:
        fd, path = tempfile.mkstemp(prefix="descriptors.pb-")
    except OSError as e:
        raise DescriptorError(f"Cannot create temporary descriptor file: {e}") from e
    os.close(fd)
    return path


def read_descriptor_set(path: str | Path) -> descriptor_pb2.FileDescriptorSet:
    """Parse a binary FileDescriptorSet written by protoc."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise DescriptorError(f"Cannot read descriptor blob {path}: {e}") from e

    fds = descriptor_pb2.FileDescriptorSet()
    try:
        fds.ParseFromString(data)
    except DecodeError as e:
        raise DescriptorError(f"Invalid descriptor blob {path}: {e}") from e
    return fds


@contextmanager
def descriptor_output(spec: InvocationSpec) -> Iterator[InvocationSpec]:
    """Scope the lifetime of ``spec.descriptor_out``; removed on every exit path."""
    try:
        yield spec
    finally:
        if spec.descriptor_out is not None:
            try:
                os.remove(spec.descriptor_out)
            except FileNotFoundError:
                pass
            except OSError as e:
                raise DescriptorError(
                    f"Cannot remove temporary descriptor file {spec.descriptor_out}: {e}"
                ) from e
