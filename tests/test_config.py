import pytest

from saloon_sdkgen.config import GeneratorConfig, load_config, sdk_namespace
from saloon_sdkgen.exceptions import ConfigError


class TestGeneratorConfig:
    def test_sub_namespaces(self):
        config = GeneratorConfig(connector_name="Petstore", namespace="Acme\\SDK")
        assert config.dto_namespace == "Acme\\SDK\\Dto"
        assert config.request_namespace == "Acme\\SDK\\Requests"
        assert config.resource_namespace == "Acme\\SDK\\Resource"

    def test_root_namespace_strips_sdk_segment(self):
        assert GeneratorConfig(connector_name="X", namespace="App\\Sdk\\SDK").root_namespace == "App\\Sdk"
        assert GeneratorConfig(connector_name="X", namespace="App\\Client").root_namespace == "App\\Client"

    def test_is_frozen(self):
        config = GeneratorConfig(connector_name="X", namespace="App")
        with pytest.raises(Exception):
            config.namespace = "Other"


class TestSdkNamespace:
    def test_appends_sdk(self):
        assert sdk_namespace("App\\Sdk") == "App\\Sdk\\SDK"

    def test_trailing_separator(self):
        assert sdk_namespace(" VendorName\\ ") == "VendorName\\SDK"


class TestLoadConfig:
    def test_defaults(self):
        config = load_config(connector_name="Petstore", namespace="Acme\\SDK")
        assert config.ignored_query_params == ["after", "order_by", "per_page"]
        assert config.fallback_resource_name == "Resource"

    def test_file_values_and_overrides(self, tmp_path):
        path = tmp_path / "sdkgen.yaml"
        path.write_text(
            "connector_name: FromFile\n"
            "dto_namespace_suffix: Data\n"
            "ignored_header_params: [X-Request-Id]\n"
            "fallback_resource_name: Misc\n"
        )
        config = load_config(path, connector_name="FromCli", namespace="Acme\\SDK")
        assert config.connector_name == "FromCli"
        assert config.dto_namespace == "Acme\\SDK\\Data"
        assert config.ignored_header_params == ["X-Request-Id"]
        assert config.fallback_resource_name == "Misc"

    def test_none_overrides_are_ignored(self, tmp_path):
        path = tmp_path / "sdkgen.yaml"
        path.write_text("connector_name: FromFile\nnamespace: Acme\\SDK\n")
        config = load_config(path, connector_name=None)
        assert config.connector_name == "FromFile"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "sdkgen.yaml"
        path.write_text("")
        assert load_config(path, connector_name="X", namespace="App").connector_name == "X"

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "sdkgen.yaml"
        path.write_text("key: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path, connector_name="X", namespace="App")

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "sdkgen.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_config(path, connector_name="X", namespace="App")

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "sdkgen.yaml"
        path.write_text("no_such_option: true\n")
        with pytest.raises(ConfigError, match="Invalid generator config"):
            load_config(path, connector_name="X", namespace="App")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(tmp_path / "missing.yaml", connector_name="X", namespace="App")

    def test_exit_code(self):
        assert ConfigError("bad").exit_code == 1
