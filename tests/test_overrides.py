"""
Tests for the override index.
"""

import pytest

from protobuild.core.models.config import OverrideRule
from protobuild.core.services.overrides import OverrideIndex


class TestOverrideIndex:
    def test_build_flattens_prefixes(self):
        rule = OverrideRule(prefixes=["x/y", "x/z"], generator="g2")
        index = OverrideIndex.build([rule])
        assert len(index) == 2
        assert index.lookup("x/y") is rule
        assert index.lookup("x/z") is rule

    def test_matching_prefix_overrides_generator(self):
        index = OverrideIndex.build([OverrideRule(prefixes=["x/y/pkg", "x/z"], generator="g2")])
        generator, plugins = index.apply("x/y/pkg", "go", ["grpc"])
        assert generator == "g2"
        assert plugins == ["grpc"]

    def test_non_matching_keeps_defaults(self):
        index = OverrideIndex.build([OverrideRule(prefixes=["x/y", "x/z"], generator="g2")])
        assert index.apply("x/w/pkg", "go", ["grpc"]) == ("go", ["grpc"])

    def test_lookup_is_exact_match(self):
        index = OverrideIndex.build([OverrideRule(prefixes=["x/y"], generator="g2")])
        assert index.lookup("x/y/pkg") is None
        assert index.lookup("x") is None

    def test_empty_plugins_means_no_plugins(self):
        index = OverrideIndex.build([OverrideRule(prefixes=["api/events"], plugins=[])])
        assert index.apply("api/events", "gogoctrd", ["grpc"]) == ("gogoctrd", [])

    def test_absent_fields_leave_defaults(self):
        index = OverrideIndex.build([OverrideRule(prefixes=["api/events"])])
        assert index.apply("api/events", "gogoctrd", ["grpc"]) == ("gogoctrd", ["grpc"])

    def test_later_rule_wins_on_collision(self):
        first = OverrideRule(prefixes=["shared"], generator="first")
        second = OverrideRule(prefixes=["shared"], generator="second")
        index = OverrideIndex.build([first, second])
        assert index.lookup("shared") is second

    def test_index_is_read_only(self):
        index = OverrideIndex.build([OverrideRule(prefixes=["a"], generator="g")])
        with pytest.raises(TypeError):
            index["b"] = OverrideRule(prefixes=["b"])  # type: ignore[index]

    def test_apply_returns_fresh_plugin_list(self):
        defaults = ["grpc"]
        index = OverrideIndex.build([])
        _, plugins = index.apply("any", "go", defaults)
        plugins.append("extra")
        assert defaults == ["grpc"]
