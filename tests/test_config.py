"""
Tests for configuration loading — Protobuild.toml parsing and validation.
"""

from pathlib import Path

import pytest

from protobuild.core.config.loader import (
    ConfigError,
    find_config_file,
    load_config,
    locate_descriptor_proto,
)
from protobuild.core.use_cases.config_check import check_config

FULL_CONFIG = """\
    version = "unstable"
    generator = "gogoctrd"
    plugins = ["grpc", "fieldpath"]

    [includes]
      before = ["./protobuf"]
      vendored = ["github.com/gogo/protobuf"]
      packages = ["github.com/gogo/googleapis"]
      after = ["/usr/local/include", "/usr/include"]

    [packages]
      "gogoproto/gogo.proto" = "github.com/gogo/protobuf/gogoproto"
      "google/protobuf/any.proto" = "github.com/gogo/protobuf/types"

    [[overrides]]
    prefixes = ["github.com/containerd/containerd/api/events"]
    plugins = []

    [[overrides]]
    prefixes = ["github.com/containerd/containerd/api/types"]
    generator = "gogo"

    [[descriptors]]
    prefix = "github.com/containerd/containerd/api/services/content/v1"
    target = "api/services/content/v1/content.pb.txt"
    ignore_files = [
      "google/protobuf/descriptor.proto",
      "gogoproto/gogo.proto",
    ]
"""


class TestLoadConfig:
    def test_full_config(self, write_config):
        config = load_config(write_config(FULL_CONFIG))

        assert config.generator == "gogoctrd"
        assert config.plugins == ["grpc", "fieldpath"]
        assert config.includes.before == ["./protobuf"]
        assert config.includes.vendored == ["github.com/gogo/protobuf"]
        assert config.includes.packages == ["github.com/gogo/googleapis"]
        assert config.includes.after == ["/usr/local/include", "/usr/include"]
        assert config.packages["gogoproto/gogo.proto"] == "github.com/gogo/protobuf/gogoproto"
        assert len(config.overrides) == 2
        assert config.descriptor_prefixes == [
            "github.com/containerd/containerd/api/services/content/v1"
        ]
        assert config.descriptors[0].ignore_files == [
            "google/protobuf/descriptor.proto",
            "gogoproto/gogo.proto",
        ]

    def test_absent_and_empty_plugins_differ(self, write_config):
        config = load_config(write_config(FULL_CONFIG))
        events, types = config.overrides
        assert events.plugins == []
        assert events.generator is None
        assert types.plugins is None
        assert types.generator == "gogo"

    def test_defaults(self, write_config):
        config = load_config(write_config('version = "unstable"\n'))
        assert config.generator == "go"
        assert config.plugins == []
        assert config.includes.before == []
        assert config.overrides == []
        assert config.descriptors == []

    def test_yaml_config(self, write_config):
        path = write_config(
            """\
            version: unstable
            generator: gogo
            includes:
              after: [/usr/include]
            """,
            name="protobuild.yml",
        )
        config = load_config(path)
        assert config.generator == "gogo"
        assert config.includes.after == ["/usr/include"]

    def test_unknown_version(self, write_config):
        with pytest.raises(ConfigError) as exc:
            load_config(write_config('version = "v2"\n'))
        assert "unstable" in str(exc.value)

    def test_invalid_toml(self, write_config):
        path = write_config("generator = \n")
        with pytest.raises(ConfigError) as exc:
            load_config(path)
        assert str(path) in str(exc.value)

    def test_invalid_field_type(self, write_config):
        with pytest.raises(ConfigError):
            load_config(write_config('plugins = "grpc"\n'))

    def test_yaml_not_a_mapping(self, write_config):
        with pytest.raises(ConfigError):
            load_config(write_config("- a\n- b\n", name="protobuild.yaml"))

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError) as exc:
            load_config(tmp_path / "Protobuild.toml")
        assert "not found" in str(exc.value)


class TestFindConfigFile:
    def test_walks_up(self, tmp_path: Path):
        (tmp_path / "Protobuild.toml").write_text('version = "unstable"\n')
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == (tmp_path / "Protobuild.toml").resolve()


class TestLocateDescriptorProto:
    def test_found(self, include_dir: Path, tmp_path: Path):
        found = locate_descriptor_proto([str(tmp_path / "empty"), str(include_dir)])
        assert found == include_dir / "google" / "protobuf" / "descriptor.proto"

    def test_not_found(self, tmp_path: Path):
        with pytest.raises(ConfigError) as exc:
            locate_descriptor_proto([str(tmp_path)])
        assert "google/protobuf/descriptor.proto" in str(exc.value)
        assert str(tmp_path) in str(exc.value)


class TestCheckConfig:
    def test_valid(self, write_config, include_dir: Path):
        path = write_config(
            f"""\
            version = "unstable"
            [includes]
            after = ["{include_dir}"]
            [[descriptors]]
            prefix = "api"
            target = "api.pb"
            """
        )
        result = check_config(path)
        assert result.valid
        assert result.errors == []
        assert result.to_dict()["descriptor_count"] == 1

    def test_missing_descriptor_proto(self, write_config, tmp_path: Path):
        path = write_config(
            f"""\
            version = "unstable"
            [includes]
            after = ["{tmp_path}"]
            [[descriptors]]
            prefix = "api"
            target = "api.pb"
            """
        )
        result = check_config(path)
        assert not result.valid
        assert "descriptor.proto" in result.errors[0]

    def test_duplicate_override_prefix_warns(self, write_config):
        path = write_config(
            """\
            version = "unstable"
            [[overrides]]
            prefixes = ["shared"]
            generator = "a"
            [[overrides]]
            prefixes = ["shared"]
            generator = "b"
            """
        )
        result = check_config(path)
        assert result.valid
        assert any("shared" in w for w in result.warnings)

    def test_invalid_config(self, write_config):
        result = check_config(write_config('version = "v9"\n'))
        assert not result.valid
        assert result.config is None
