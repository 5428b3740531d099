"""Configuration management for staticgate.

Supports TOML configuration format with auto-discovery.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from staticgate.checks import DEFAULT_EXPECTATIONS, Expectation
from staticgate.core.content_types import DEFAULT_BINARY_MEDIA_TYPES
from staticgate.core.policy import DEFAULT_DENY_PATTERNS, AccessPolicy, AssetRoot, Mount
from staticgate.core.resolver import StaticAssetResolver

CONFIG_FILENAME = "staticgate.toml"
DEFAULT_MOUNT_PREFIX = "/binary"


@dataclass
class ServerConfig:
    """Local server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class MountConfig:
    """URL prefix mapped to a directory."""

    prefix: str
    directory: Path


@dataclass
class AssetsConfig:
    """Asset root and access rules."""

    root: Path = field(default_factory=lambda: Path("data-files"))
    mounts: list[MountConfig] = field(default_factory=list)
    deny: list[str] = field(default_factory=lambda: list(DEFAULT_DENY_PATTERNS))
    index: str | None = None
    error_page: str | None = None

    def effective_mounts(self) -> list[MountConfig]:
        """Return configured mounts, or the default "/binary" mount.

        The default mount serves root/binary under /binary, which is the
        layout the default checks expect.
        """
        if self.mounts:
            return self.mounts
        return [
            MountConfig(
                prefix=DEFAULT_MOUNT_PREFIX,
                directory=self.root / DEFAULT_MOUNT_PREFIX.strip("/"),
            ),
        ]


@dataclass
class ResponseConfig:
    """Response header settings."""

    cache_control: str = "public, max-age=3600"
    binary_media_types: list[str] = field(
        default_factory=lambda: list(DEFAULT_BINARY_MEDIA_TYPES),
    )


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    assets: AssetsConfig
    response: ResponseConfig
    checks: list[Expectation]
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for staticgate.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> Config:
        """Create config with all defaults, relative to the working directory."""
        return cls(
            server=ServerConfig(),
            assets=AssetsConfig(root=Path.cwd() / "data-files"),
            response=ResponseConfig(),
            checks=list(DEFAULT_EXPECTATIONS),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> Config:
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            data = tomllib.load(f)

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            assets=cls._parse_assets(data.get("assets"), config_dir),
            response=cls._parse_response(data.get("response")),
            checks=cls._parse_checks(data.get("checks")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_assets(cls, data: object, config_dir: Path) -> AssetsConfig:
        """Parse assets configuration section.

        Directories are resolved relative to the config file: ``root``
        against the config directory and each mount ``directory`` against
        ``root``.

        Args:
            data: Raw assets section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            AssetsConfig instance
        """
        if data is None:
            return AssetsConfig(root=config_dir / "data-files")

        if not isinstance(data, dict):
            raise ValueError("assets section must be a dictionary")

        root = data.get("root", "data-files")
        if not isinstance(root, str):
            raise ValueError("assets.root must be a string")
        root_path = config_dir / root

        mounts_raw = data.get("mounts", [])
        if not isinstance(mounts_raw, list):
            raise ValueError("assets.mounts must be a list")
        mounts: list[MountConfig] = []
        for item in mounts_raw:
            if not isinstance(item, dict):
                raise ValueError("assets.mounts items must be tables")
            prefix = item.get("prefix")
            if not isinstance(prefix, str):
                raise ValueError("assets.mounts.prefix must be a string")
            directory = item.get("directory", prefix.strip("/"))
            if not isinstance(directory, str):
                raise ValueError("assets.mounts.directory must be a string")
            mounts.append(MountConfig(prefix=prefix, directory=root_path / directory))

        deny_raw = data.get("deny", list(DEFAULT_DENY_PATTERNS))
        if not isinstance(deny_raw, list):
            raise ValueError("assets.deny must be a list")
        deny: list[str] = []
        for item in deny_raw:
            if not isinstance(item, str):
                raise ValueError("assets.deny items must be strings")
            deny.append(item)

        index = data.get("index")
        if index is not None and not isinstance(index, str):
            raise ValueError("assets.index must be a string")

        error_page = data.get("error_page")
        if error_page is not None and not isinstance(error_page, str):
            raise ValueError("assets.error_page must be a string")

        return AssetsConfig(
            root=root_path,
            mounts=mounts,
            deny=deny,
            index=index or None,
            error_page=error_page or None,
        )

    @classmethod
    def _parse_response(cls, data: object) -> ResponseConfig:
        if data is None:
            return ResponseConfig()

        if not isinstance(data, dict):
            raise ValueError("response section must be a dictionary")

        cache_control = data.get("cache_control", "public, max-age=3600")
        if not isinstance(cache_control, str):
            raise ValueError("response.cache_control must be a string")

        types_raw = data.get("binary_media_types", list(DEFAULT_BINARY_MEDIA_TYPES))
        if not isinstance(types_raw, list):
            raise ValueError("response.binary_media_types must be a list")
        binary_media_types: list[str] = []
        for item in types_raw:
            if not isinstance(item, str):
                raise ValueError("response.binary_media_types items must be strings")
            binary_media_types.append(item)

        return ResponseConfig(
            cache_control=cache_control,
            binary_media_types=binary_media_types,
        )

    @classmethod
    def _parse_checks(cls, data: object) -> list[Expectation]:
        """Parse [[checks]] entries, falling back to the default matrix."""
        if data is None:
            return list(DEFAULT_EXPECTATIONS)

        if not isinstance(data, list):
            raise ValueError("checks must be a list of tables")

        checks: list[Expectation] = []
        for item in data:
            if not isinstance(item, dict):
                raise ValueError("checks items must be tables")
            path = item.get("path")
            if not isinstance(path, str):
                raise ValueError("checks.path must be a string")
            status = item.get("status", 200)
            if not isinstance(status, int) or isinstance(status, bool):
                raise ValueError("checks.status must be an integer")
            checks.append(Expectation(path=path, status=status))
        return checks

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        root: Path | None = None,
    ) -> Config:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified. Overriding root replaces configured mounts
        with a single mount serving the whole directory under "/".

        Args:
            host: Override server.host
            port: Override server.port
            root: Override assets.root

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        assets = self.assets
        if root is not None:
            assets = replace(
                self.assets,
                root=root,
                mounts=[MountConfig(prefix="/", directory=root)],
            )

        return replace(self, server=server, assets=assets)

    def build_resolver(self) -> StaticAssetResolver:
        """Build a resolver from the assets section.

        Raises:
            ValueError: If mounts are invalid (e.g. duplicate prefixes)
        """
        asset_root = AssetRoot(
            mounts=tuple(
                Mount.create(mount.prefix, mount.directory)
                for mount in self.assets.effective_mounts()
            ),
        )
        policy = AccessPolicy(asset_root, deny_patterns=self.assets.deny)
        return StaticAssetResolver(policy, index=self.assets.index)
