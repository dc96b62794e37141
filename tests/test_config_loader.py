"""Tests for conflux.yaml configuration loading."""

import pytest
import yaml

from conflux.adapters import DeclarativeEnvironmentAdapter, default_registry
from conflux.core.config_loader import ConfigLoader
from conflux.core.errors import ConfigFileError
from conflux.core.types import SourceType


class TestConfigLoader:
    """Test ConfigLoader functionality."""

    def test_init_with_explicit_path(self, tmp_path):
        """Test initialization with explicit config path."""
        config_file = tmp_path / "conflux.yaml"
        config_file.write_text("environments: {}")

        loader = ConfigLoader(config_file)
        assert loader.config_path == config_file

    def test_init_with_nonexistent_explicit_path(self, tmp_path):
        """Test initialization with nonexistent explicit path."""
        loader = ConfigLoader(tmp_path / "nonexistent.yaml")
        assert loader.config_path is None
        assert loader.load() == {}

    def test_find_config_in_current_dir(self, tmp_path, monkeypatch):
        """Test finding conflux.yaml in current directory."""
        config_file = tmp_path / "conflux.yaml"
        config_file.write_text("environments: {}")
        monkeypatch.chdir(tmp_path)

        loader = ConfigLoader()
        assert loader.config_path == config_file

    def test_find_config_in_parent_dir(self, tmp_path, monkeypatch):
        """Test finding conflux.yaml in parent directory."""
        config_file = tmp_path / "conflux.yaml"
        config_file.write_text("environments: {}")
        subdir = tmp_path / "subdir"
        subdir.mkdir()
        monkeypatch.chdir(subdir)

        loader = ConfigLoader()
        assert loader.config_path == config_file

    def test_load_valid_config(self, tmp_path):
        """Test loading a valid configuration file."""
        config_data = {
            "environment": "production",
            "environments": {
                "local": {"sources": [{"name": "base", "type": "file", "path": "base.yaml"}]}
            },
        }
        config_file = tmp_path / "conflux.yaml"
        config_file.write_text(yaml.dump(config_data))

        assert ConfigLoader(config_file).load() == config_data

    def test_load_invalid_yaml(self, tmp_path):
        """Test loading an invalid YAML file."""
        config_file = tmp_path / "conflux.yaml"
        config_file.write_text("invalid: yaml: content: [")

        loader = ConfigLoader(config_file)
        with pytest.raises(ConfigFileError, match="Invalid conflux.yaml"):
            loader.load()

    def test_load_non_mapping(self, tmp_path):
        config_file = tmp_path / "conflux.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="must be a mapping"):
            ConfigLoader(config_file).load()

    def test_manager_options_defaults(self, tmp_path):
        config_file = tmp_path / "conflux.yaml"
        config_file.write_text("environments: {}")

        options = ConfigLoader(config_file).manager_options(environ={})
        assert options.environment == "development"
        assert options.enable_cache is True
        assert options.cache_ttl == 60.0
        assert options.enable_hot_reload is False

    def test_manager_options_from_file_and_environment(self, tmp_path):
        """CONFLUX_ENV overrides the environment named in the file."""
        config_file = tmp_path / "conflux.yaml"
        config_file.write_text(
            yaml.dump(
                {
                    "environment": "staging",
                    "cache": {"enabled": False, "ttl": 10},
                    "hot_reload": {"enabled": True, "interval": 2},
                }
            )
        )
        loader = ConfigLoader(config_file)

        options = loader.manager_options(environ={})
        assert options.environment == "staging"
        assert options.enable_cache is False
        assert options.cache_ttl == 10.0
        assert options.enable_hot_reload is True
        assert options.hot_reload_interval == 2.0

        assert loader.manager_options(environ={"CONFLUX_ENV": "prod"}).environment == "prod"

    def test_manager_options_rejects_bad_interval(self, tmp_path):
        config_file = tmp_path / "conflux.yaml"
        config_file.write_text("hot_reload:\n  interval: 0\n")

        with pytest.raises(ConfigFileError, match="hot_reload_interval must be positive"):
            ConfigLoader(config_file).manager_options(environ={})

    @pytest.mark.parametrize(
        "content, message",
        [
            ("cache: true\n", "'cache' .* must be a mapping"),
            ("hot_reload: [1, 2]\n", "'hot_reload' .* must be a mapping"),
            ("cache:\n  ttl: abc\n", "Invalid manager options"),
            ("hot_reload:\n  interval: [5]\n", "Invalid manager options"),
        ],
    )
    def test_manager_options_rejects_malformed_sections(self, tmp_path, content, message):
        """Test that malformed manager sections raise ConfigFileError."""
        config_file = tmp_path / "conflux.yaml"
        config_file.write_text(content)

        with pytest.raises(ConfigFileError, match=message):
            ConfigLoader(config_file).manager_options(environ={})

    def test_malformed_environments_raise_config_file_error(self, tmp_path):
        """Test that malformed environment entries raise ConfigFileError."""
        config_file = tmp_path / "conflux.yaml"

        config_file.write_text("environments: [local]\n")
        with pytest.raises(ConfigFileError, match="'environments' .* must be a mapping"):
            ConfigLoader(config_file).environment_names()

        config_file.write_text("environments:\n  local: yes\n")
        with pytest.raises(ConfigFileError, match="'local' .* must be a mapping"):
            ConfigLoader(config_file).get_sources("local")

        config_file.write_text("environments:\n  local:\n    sources: base\n")
        with pytest.raises(ConfigFileError, match="must be a list"):
            ConfigLoader(config_file).get_sources("local")

        config_file.write_text("environments:\n  local:\n    sources: [base]\n")
        with pytest.raises(ConfigFileError, match="must be a mapping"):
            ConfigLoader(config_file).get_sources("local")

        config_file.write_text("environments:\n  local:\n    required: database.host\n")
        with pytest.raises(ConfigFileError, match="'required' .* must be a list"):
            ConfigLoader(config_file).register_adapters(default_registry())

    def test_source_without_type_fails_registration(self, tmp_path):
        """Test that a source entry without a type stops adapter registration."""
        config_file = tmp_path / "conflux.yaml"
        config_file.write_text(yaml.dump({"environments": {"local": {"sources": [{"name": "x"}]}}}))

        with pytest.raises(ConfigFileError, match="must have both 'name' and 'type'"):
            ConfigLoader(config_file).register_adapters(default_registry())

    def test_get_environment_config(self, tmp_path):
        """Test getting configuration for a specific environment."""
        config_data = {
            "environments": {
                "local": {"sources": []},
                "preview": {"defaults": {"debug": True}},
            }
        }
        config_file = tmp_path / "conflux.yaml"
        config_file.write_text(yaml.dump(config_data))

        loader = ConfigLoader(config_file)
        assert loader.get_environment_config("preview") == {"defaults": {"debug": True}}
        assert loader.get_environment_config("staging") is None
        assert sorted(loader.environment_names()) == ["local", "preview"]

    def test_get_sources(self, tmp_path):
        """Test getting sources for an environment."""
        config_data = {
            "environments": {
                "local": {
                    "sources": [
                        {"name": "base", "type": "file", "path": "config/base.yaml"},
                        {"name": "mem", "type": "file", "path": ":memory:"},
                        {"name": "abs", "type": "file", "path": str(tmp_path / "abs.json")},
                        {"name": "env", "type": "environment", "prefix": "APP_"},
                        {
                            "name": "kv",
                            "type": "remote",
                            "options": {"url": "redis://localhost:6379", "prefix": "cfg:"},
                        },
                    ]
                }
            }
        }
        config_file = tmp_path / "conflux.yaml"
        config_file.write_text(yaml.dump(config_data))

        sources = ConfigLoader(config_file).get_sources("local")

        assert [s.name for s in sources] == ["base", "mem", "abs", "env", "kv"]
        assert sources[0].options["path"] == str(tmp_path / "config" / "base.yaml")
        assert sources[1].options["path"] == ":memory:"
        assert sources[2].options["path"] == str(tmp_path / "abs.json")
        assert sources[3].type == SourceType.ENVIRONMENT
        assert sources[3].options == {"prefix": "APP_"}
        assert sources[4].options == {"url": "redis://localhost:6379", "prefix": "cfg:"}

        assert ConfigLoader(config_file).get_sources("nonexistent") == []

    def test_parse_source_missing_name_or_type(self):
        """Test parsing source without name or type raises error."""
        loader = ConfigLoader()
        with pytest.raises(ConfigFileError, match="must have both 'name' and 'type'"):
            loader.parse_source({"path": "./config.yaml"})
        with pytest.raises(ConfigFileError, match="Invalid source"):
            loader.parse_source({"name": "x", "type": "ftp"})

    def test_register_adapters(self, tmp_path):
        config_data = {
            "environments": {
                "local": {
                    "sources": [{"name": "base", "type": "file", "path": "base.json"}],
                    "defaults": {"debug": True},
                    "required": ["database.host"],
                },
                "production": {"sources": []},
            }
        }
        config_file = tmp_path / "conflux.yaml"
        config_file.write_text(yaml.dump(config_data))
        registry = default_registry()

        registered = ConfigLoader(config_file).register_adapters(registry)

        assert sorted(registered) == ["local", "production"]
        local = registry.resolve("local")
        assert isinstance(local, DeclarativeEnvironmentAdapter)
        assert local.get_configuration_sources()[0].options["path"] == str(tmp_path / "base.json")
        assert local.transform_configuration({}) == {"debug": True}
        assert local.required == ["database.host"]
        # A declared environment replaces the built-in adapter of that name.
        assert isinstance(registry.resolve("production"), DeclarativeEnvironmentAdapter)
        assert isinstance(registry.resolve("prod"), DeclarativeEnvironmentAdapter)
