"""
Configuration system - layered config loading for routewire servers.

Sources, lowest precedence first: dataclass defaults, JSON/YAML files,
a ``.env`` file, ``RW_``-prefixed environment variables, explicit
overrides.
"""

from typing import Any, Dict, Iterable, Optional
from dataclasses import dataclass, fields
from pathlib import Path
import glob
import json
import os

import yaml
from dotenv import dotenv_values

from .constants import DEFAULT_ROUTING_ROOT_PATH
from .faults import Fault, FaultDomain


class ConfigError(Fault):
    """Configuration could not be loaded or is invalid."""
    code = "CONFIG_INVALID"
    message = "Invalid configuration"
    domain = FaultDomain.CONFIG

    def __init__(self, message: str, **metadata: Any):
        super().__init__(message=message, metadata=metadata)


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files > defaults
    """

    def __init__(self, env_prefix: str = "RW_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[Iterable[str]] = None,
        env_prefix: str = "RW_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources.

        Args:
            paths: Config file paths (glob patterns supported; .json, .yaml, .yml)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Raises:
            ConfigError: If a config file cannot be parsed
        """
        loader = cls(env_prefix=env_prefix)

        for pattern in paths or ():
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load every file matching a glob pattern, in sorted order."""
        matches = sorted(glob.glob(pattern)) or [pattern]
        for match in matches:
            path = Path(match)
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}", path=str(path))
            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)
            else:
                raise ConfigError(f"Unsupported config file type: {path.suffix}", path=str(path))

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        try:
            with open(path) as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in {path}: {exc}", path=str(path)) from exc
        if data:
            self._merge_dict(self.config_data, data)

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}", path=str(path)) from exc
        if data:
            self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load prefixed keys from a .env file."""
        if not Path(path).exists():
            return
        for key, value in dotenv_values(path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert RW_ROUTING__ROOT_PATH to {"routing": {"root_path": ...}}."""
        key = key[len(self.env_prefix):]
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current = self.config_data
        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def to_dict(self) -> dict:
        return dict(self.config_data)


def _section(cls, loader: ConfigLoader, name: str):
    data = loader.get(name, {}) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping", section=name)
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(
            f"Unknown keys in '{name}' config: {', '.join(sorted(unknown))}",
            section=name,
        )
    return cls(**data)


@dataclass
class RoutingConfig:
    """Where the controller router is mounted and how paths match."""
    root_path: str = DEFAULT_ROUTING_ROOT_PATH
    case_sensitive: bool = False
    strict: bool = False

    def __post_init__(self):
        if not isinstance(self.root_path, str) or not self.root_path.startswith("/"):
            raise ConfigError(f"routing.root_path must start with '/', got {self.root_path!r}")

    @classmethod
    def from_loader(cls, loader: ConfigLoader) -> "RoutingConfig":
        return _section(cls, loader, "routing")


@dataclass
class ServerConfig:
    """uvicorn settings and debug mode."""
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "info"
    debug: bool = False

    def __post_init__(self):
        if not isinstance(self.port, int) or not 0 <= self.port <= 65535:
            raise ConfigError(f"server.port must be an integer in 0..65535, got {self.port!r}")

    @classmethod
    def from_loader(cls, loader: ConfigLoader) -> "ServerConfig":
        return _section(cls, loader, "server")
