"""
Import roots — GOPATH handling.

protoc-gen-go writes its output relative to the GOPATH root, so the
output directory is always ``<first GOPATH entry>/src``. Every GOPATH
entry's ``src`` is an equivalent import root for include resolution.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from protobuild.core.errors import ConfigError


def gopaths(env: Mapping[str, str] | None = None) -> list[str]:
    """Split GOPATH into its entries (empty entries dropped)."""
    env = os.environ if env is None else env
    raw = env.get("GOPATH", "")
    return [p for p in raw.split(os.pathsep) if p]


def gopath_roots(env: Mapping[str, str] | None = None) -> list[str]:
    """``src`` directory of every GOPATH entry, in order."""
    entries = gopaths(env)
    if not entries:
        raise ConfigError("must be run from a gopath (GOPATH is not set)")
    return [os.path.join(p, "src") for p in entries]


def output_root(env: Mapping[str, str] | None = None) -> str:
    """Directory protoc output is written relative to."""
    return gopath_roots(env)[0]
