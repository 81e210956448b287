"""protobuild — drive protoc across a multi-package source tree."""

__version__ = "0.1.0"
