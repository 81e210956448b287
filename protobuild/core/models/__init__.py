"""
Domain models — Pydantic types for protobuild.

All models are re-exported here for convenient access:

    from protobuild.core.models import ProtobuildConfig, PackageUnit, InvocationSpec
"""

from protobuild.core.models.config import (
    DescriptorTarget,
    IncludeConfig,
    OverrideRule,
    ProtobuildConfig,
)
from protobuild.core.models.invocation import InvocationSpec, ProcessResult
from protobuild.core.models.package import PackageUnit

__all__ = [
    # config.py
    "DescriptorTarget",
    "IncludeConfig",
    # invocation.py
    "InvocationSpec",
    "OverrideRule",
    # package.py
    "PackageUnit",
    "ProcessResult",
    "ProtobuildConfig",
]
