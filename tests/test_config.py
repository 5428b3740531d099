"""Tests for configuration loading."""

from pathlib import Path

import pytest
from staticgate.checks import DEFAULT_EXPECTATIONS, Expectation
from staticgate.config import CONFIG_FILENAME, Config, MountConfig
from staticgate.core.content_types import DEFAULT_BINARY_MEDIA_TYPES
from staticgate.core.outcome import Forbidden, Found
from staticgate.responder import create_responder


class TestConfigLoad:
    """Tests for Config.load()."""

    def test__explicit_path__loads_config(self, tmp_path: Path) -> None:
        """Load config from explicit path."""
        config_file = tmp_path / "staticgate.toml"
        config_file.write_text("""
[server]
host = "0.0.0.0"
port = 3000

[assets]
root = "public"
deny = [".*", "*.map"]
index = "index.html"
error_page = "/binary/404.html"

[[assets.mounts]]
prefix = "/binary"
directory = "bin"

[[assets.mounts]]
prefix = "/fonts"

[response]
cache_control = "no-cache"
binary_media_types = ["image/*"]

[[checks]]
path = "/binary/png.png"

[[checks]]
path = "/secret"
status = 403
""")

        config = Config.load(config_file)

        assert config.server.host == "0.0.0.0"
        assert config.server.port == 3000
        assert config.assets.root == tmp_path / "public"
        assert config.assets.mounts == [
            MountConfig(prefix="/binary", directory=tmp_path / "public" / "bin"),
            MountConfig(prefix="/fonts", directory=tmp_path / "public" / "fonts"),
        ]
        assert config.assets.deny == [".*", "*.map"]
        assert config.assets.index == "index.html"
        assert config.assets.error_page == "/binary/404.html"
        assert config.response.cache_control == "no-cache"
        assert config.response.binary_media_types == ["image/*"]
        assert config.checks == [
            Expectation("/binary/png.png", 200),
            Expectation("/secret", 403),
        ]
        assert config.config_path == config_file

    def test__minimal_config__uses_defaults(self, tmp_path: Path) -> None:
        """Load minimal config with defaults relative to config file."""
        config_file = tmp_path / "staticgate.toml"
        config_file.write_text("")

        config = Config.load(config_file)

        assert config.server.host == "127.0.0.1"
        assert config.server.port == 8080
        assert config.assets.root == tmp_path / "data-files"
        assert config.assets.mounts == []
        assert config.assets.deny == [".*"]
        assert config.assets.index is None
        assert config.assets.error_page is None
        assert config.response.binary_media_types == list(DEFAULT_BINARY_MEDIA_TYPES)
        assert config.checks == list(DEFAULT_EXPECTATIONS)

    def test__missing_explicit_path__raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            Config.load(tmp_path / "nonexistent.toml")

    def test__no_config_file__returns_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(Config, "_discover_config", classmethod(lambda cls: None))

        config = Config.load()

        assert config.config_path is None
        assert config.assets.root == tmp_path / "data-files"

    def test__discovers_config_in_parent(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Search upwards from the working directory."""
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("[server]\nport = 9000\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        config = Config.load()

        assert config.config_path == config_file
        assert config.server.port == 9000


class TestConfigValidation:
    """Tests for invalid configuration values."""

    @pytest.mark.parametrize(
        ("content", "message"),
        [
            ('server = "x"', "server section must be a dictionary"),
            ('[server]\nport = "80"', "server.port must be an integer"),
            ("[server]\nport = true", "server.port must be an integer"),
            ("[assets]\nroot = 1", "assets.root must be a string"),
            ('[assets]\nmounts = "x"', "assets.mounts must be a list"),
            ("[[assets.mounts]]\ndirectory = 'x'", "assets.mounts.prefix must be a string"),
            ("[assets]\ndeny = [1]", "assets.deny items must be strings"),
            ("[assets]\nindex = 1", "assets.index must be a string"),
            ("[response]\ncache_control = 1", "response.cache_control must be a string"),
            ('[response]\nbinary_media_types = "image/*"', "response.binary_media_types must be a list"),
            ("[[checks]]\nstatus = 200", "checks.path must be a string"),
            ('[[checks]]\npath = "/a"\nstatus = "200"', "checks.status must be an integer"),
        ],
    )
    def test__invalid_value__raises(self, tmp_path: Path, content: str, message: str) -> None:
        config_file = tmp_path / "staticgate.toml"
        config_file.write_text(content)

        with pytest.raises(ValueError, match=message):
            Config.load(config_file)


class TestWithOverrides:
    """Tests for Config.with_overrides()."""

    def test__no_overrides__equal_config(self, test_config: Config) -> None:
        assert test_config.with_overrides() == test_config

    def test__host_port__overridden(self, test_config: Config) -> None:
        config = test_config.with_overrides(host="0.0.0.0", port=9999)

        assert config.server.host == "0.0.0.0"
        assert config.server.port == 9999
        assert test_config.server.port == 8080

    def test__root__replaces_mounts(self, test_config: Config, data_dir: Path) -> None:
        config = test_config.with_overrides(root=data_dir / "binary")

        assert config.assets.mounts == [MountConfig(prefix="/", directory=data_dir / "binary")]
        assert config.assets.effective_mounts() == config.assets.mounts
        assert test_config.assets.mounts != []


class TestBuildResolver:
    """Tests for Config.build_resolver()."""

    def test__mounts__applied(self, test_config: Config) -> None:
        resolver = test_config.build_resolver()

        assert isinstance(resolver.resolve("/binary/png.png"), Found)
        assert isinstance(resolver.resolve("/ff404.png"), Forbidden)

    def test__root_override__serves_whole_directory(self, test_config: Config) -> None:
        config = test_config.with_overrides(root=test_config.assets.root)

        resolver = config.build_resolver()

        assert isinstance(resolver.resolve("/ff404.png"), Found)
        assert isinstance(resolver.resolve("/binary/.secret.png"), Forbidden)


class TestDefaultMounts:
    """Tests for the mount used when none are configured."""

    def test__no_mounts__serves_binary_subdirectory(self, tmp_path: Path) -> None:
        config_file = tmp_path / "staticgate.toml"
        config_file.write_text("")

        config = Config.load(config_file)

        assert config.assets.effective_mounts() == [
            MountConfig(prefix="/binary", directory=tmp_path / "data-files" / "binary"),
        ]

    def test__default_config__passes_default_checks(
        self, tmp_path: Path, data_dir: Path
    ) -> None:
        """Default mounts and default checks agree on every status."""
        config_file = tmp_path / "staticgate.toml"
        config_file.write_text("")
        config = Config.load(config_file)
        responder = create_responder(config)

        statuses = {e.path: responder.respond(e.path).status for e in config.checks}

        assert statuses == {e.path: e.status for e in DEFAULT_EXPECTATIONS}

    def test__builtin_defaults__forbid_paths_outside_binary(
        self,
        tmp_path: Path,
        data_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(Config, "_discover_config", classmethod(lambda cls: None))

        resolver = Config.load().build_resolver()

        assert isinstance(resolver.resolve("/ff404.png"), Forbidden)
        assert isinstance(resolver.resolve("/subdir/ff404.png"), Forbidden)
        assert isinstance(resolver.resolve("/binary/png.png"), Found)
