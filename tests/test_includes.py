"""
Tests for include path construction — precedence and staging.
"""

import logging

import pytest

from protobuild.core.models.config import IncludeConfig
from protobuild.core.services.includes import (
    IncludeOrderError,
    IncludePath,
    build_includes,
)

ROOTS = ["/go1/src", "/go2/src"]


def _config(**kwargs) -> IncludeConfig:
    return IncludeConfig(**kwargs)


class TestBuildIncludes:
    def test_full_precedence_with_vendor(self):
        config = _config(
            before=["/before"],
            vendored=["github.com/gogo/protobuf"],
            packages=["github.com/gogo/googleapis"],
            after=["/usr/include"],
        )
        includes = build_includes(config, ROOTS, "/v/vendor")
        assert includes == [
            "/before",
            "/v/vendor/github.com/gogo/protobuf",
            "/v/vendor/github.com/gogo/googleapis",
            "/v/vendor",
            "/go1/src/github.com/gogo/googleapis",
            "/go2/src/github.com/gogo/googleapis",
            "/go1/src",
            "/go2/src",
            "/usr/include",
        ]

    def test_no_vendor_skips_vendored(self, caplog):
        config = _config(
            before=["/before"],
            vendored=["github.com/gogo/protobuf"],
            packages=["github.com/gogo/googleapis"],
            after=["/after"],
        )
        with caplog.at_level(logging.WARNING):
            includes = build_includes(config, ROOTS, None)

        assert includes == [
            "/before",
            "/go1/src/github.com/gogo/googleapis",
            "/go2/src/github.com/gogo/googleapis",
            "/go1/src",
            "/go2/src",
            "/after",
        ]
        assert "vendor directory not found" in caplog.text

    def test_no_vendor_no_vendored_is_silent(self, caplog):
        with caplog.at_level(logging.WARNING):
            build_includes(_config(), ROOTS, None)
        assert caplog.text == ""

    def test_empty_config_is_just_roots(self):
        assert build_includes(_config(), ROOTS, None) == ROOTS

    def test_vendor_root_without_entries(self):
        assert build_includes(_config(), ["/go/src"], "/v/vendor") == ["/v/vendor", "/go/src"]

    def test_multiple_package_entries_keep_entry_order(self):
        config = _config(packages=["p1", "p2"])
        includes = build_includes(config, ROOTS, None)
        assert includes[:4] == ["/go1/src/p1", "/go2/src/p1", "/go1/src/p2", "/go2/src/p2"]

    def test_before_and_after_verbatim(self):
        config = _config(before=["b2", "b1"], after=["a2", "a1"])
        includes = build_includes(config, ["/go/src"], None)
        assert includes == ["b2", "b1", "/go/src", "a2", "a1"]


class TestIncludePath:
    def test_stage_order_is_enforced(self):
        path = IncludePath().before(["/b"]).roots(["/r"])
        with pytest.raises(IncludeOrderError):
            path.vendor("/v", [], [])

    def test_stage_cannot_repeat(self):
        path = IncludePath().before(["/b"])
        with pytest.raises(IncludeOrderError):
            path.before(["/c"])

    def test_stages_may_be_skipped(self):
        path = IncludePath().roots(["/r"]).after(["/a"])
        assert list(path) == ["/r", "/a"]
        assert len(path) == 2
