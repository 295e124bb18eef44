"""
Configuration loader for the novel workspace engine.

This module provides configuration management with:
- Multiple configuration sources (files, dicts, env vars)
- Schema validation
- Type coercion
- Configuration merging
"""

import os
import json
import yaml
from pathlib import Path
from typing import Optional, Dict, Any, List, Union
import toml
from pydantic import BaseModel, Field, field_validator, ValidationError, ConfigDict

from .logging import get_logger
from .errors import ConfigurationError


logger = get_logger("novel-workspace.config")

ENV_PREFIX = "NOVEL_"
ENV_NESTING = "__"


class ConfigSource(BaseModel):
    """Configuration source definition."""
    path: Optional[Path] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    priority: int = 0
    source_type: str = "dict"

    model_config = ConfigDict(arbitrary_types_allowed=True)


class StorageConfig(BaseModel):
    """Metadata store configuration."""
    meta_dir_name: str = ".novel"
    db_file: str = "vcs.db"
    timeout: float = 30.0
    journal_mode: str = "WAL"
    synchronous: str = "NORMAL"
    compression_enabled: bool = True
    compression_level: int = 3

    @field_validator('meta_dir_name', 'db_file')
    @classmethod
    def validate_name(cls, v):
        """Names must be single path components."""
        if not v or v in (".", "..") or "/" in v or "\\" in v:
            raise ValueError(f"must be a single path component: {v!r}")
        return v

    @field_validator('compression_level')
    @classmethod
    def validate_level(cls, v):
        """Zstd accepts levels 1-22."""
        if not 1 <= v <= 22:
            raise ValueError(f"compression level out of range: {v}")
        return v

    @field_validator('journal_mode')
    @classmethod
    def validate_journal_mode(cls, v):
        valid = ["DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"]
        if v.upper() not in valid:
            raise ValueError(f"Invalid journal mode: {v}")
        return v.upper()


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "WARNING"
    format: str = "console"
    directory: Path = Field(default_factory=lambda: Path.home() / ".novel-workspace" / "logs")
    enable_file: bool = False
    max_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 10
    enable_sentry: bool = False
    sentry_dsn: Optional[str] = None

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator('format')
    @classmethod
    def validate_format(cls, v):
        if v not in ("json", "console"):
            raise ValueError(f"Invalid log format: {v}")
        return v


class WorkspaceConfig(BaseModel):
    """Main workspace engine configuration."""
    app_name: str = "novel-workspace"
    debug: bool = False

    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=True
    )


class ConfigLoader:
    """Configuration loader with multiple source support."""

    def __init__(self, env_prefix: str = ENV_PREFIX):
        """Initialize configuration loader."""
        self.env_prefix = env_prefix
        self._sources: List[ConfigSource] = []
        self._config: Optional[WorkspaceConfig] = None

    def add_source(
        self,
        source: Union[str, Path, Dict[str, Any]],
        priority: int = 0,
        source_type: Optional[str] = None
    ) -> None:
        """
        Add configuration source.

        Args:
            source: Configuration source (file path or dict)
            priority: Source priority (higher wins)
            source_type: Source type (auto-detected if None)
        """
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not source_type:
                source_type = self._detect_source_type(path)

            self._sources.append(ConfigSource(
                path=path,
                priority=priority,
                source_type=source_type
            ))
        else:
            self._sources.append(ConfigSource(
                data=source,
                priority=priority,
                source_type="dict"
            ))

        # Lowest priority first so later merges win
        self._sources.sort(key=lambda s: s.priority)

    def _detect_source_type(self, path: Path) -> str:
        """Detect configuration file type."""
        suffix = path.suffix.lower()
        if suffix == ".json":
            return "json"
        elif suffix in (".yaml", ".yml"):
            return "yaml"
        elif suffix == ".toml":
            return "toml"
        else:
            raise ConfigurationError(f"Unknown config file type: {suffix}")

    def load(self) -> WorkspaceConfig:
        """
        Load configuration from all sources.

        Returns:
            Merged configuration
        """
        merged_data: Dict[str, Any] = {}

        for source in self._sources:
            data = self._load_source(source)
            merged_data = self._deep_merge(merged_data, data)

        env_data = self._load_env_vars()
        merged_data = self._deep_merge(merged_data, env_data)

        try:
            self._config = WorkspaceConfig(**merged_data)
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                errors.append(f"{field}: {error['msg']}")

            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}",
                cause=e
            ) from e

        logger.debug("configuration_loaded", sources=len(self._sources))
        return self._config

    def _load_source(self, source: ConfigSource) -> Dict[str, Any]:
        """Load data from a configuration source."""
        if source.path is None:
            return source.data

        if not source.path.exists():
            logger.debug("config_file_not_found", path=str(source.path))
            return {}

        content = source.path.read_text(encoding="utf-8")

        try:
            if source.source_type == "json":
                data = json.loads(content)
            elif source.source_type == "yaml":
                data = yaml.safe_load(content) or {}
            elif source.source_type == "toml":
                data = toml.loads(content)
            else:
                raise ConfigurationError(f"Unknown source type: {source.source_type}")
        except (json.JSONDecodeError, yaml.YAMLError, toml.TomlDecodeError) as e:
            raise ConfigurationError(
                f"Failed to parse {source.path}: {e}",
                cause=e
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {source.path}")
        return data

    def _load_env_vars(self) -> Dict[str, Any]:
        """Load configuration from environment variables.

        ``NOVEL_STORAGE__COMPRESSION_LEVEL=9`` sets ``storage.compression_level``.
        """
        result: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(self.env_prefix):
                continue

            parts = key[len(self.env_prefix):].lower().split(ENV_NESTING)
            current = result

            for part in parts[:-1]:
                current = current.setdefault(part, {})
                if not isinstance(current, dict):
                    break
            else:
                current[parts[-1]] = self._convert_value(value)

        return result

    def _convert_value(self, value: str) -> Any:
        """Convert string value to appropriate type."""
        if value.lower() in ("true", "yes", "on"):
            return True
        elif value.lower() in ("false", "no", "off"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith("~"):
            return str(Path(value).expanduser())

        return value

    def _deep_merge(self, base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in update.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def get_config(self) -> WorkspaceConfig:
        """Get current configuration."""
        if self._config is None:
            raise ConfigurationError("Configuration not loaded")
        return self._config


def load_config(
    root: Optional[Union[str, Path]] = None,
    config_paths: Optional[List[Union[str, Path]]] = None,
    extra_config: Optional[Dict[str, Any]] = None
) -> WorkspaceConfig:
    """
    Load configuration from standard locations.

    Args:
        root: Workspace root whose metadata directory may hold a config file
        config_paths: Additional configuration paths
        extra_config: Extra configuration to merge

    Returns:
        Loaded configuration
    """
    loader = ConfigLoader()

    user_dir = Path.home() / ".novel-workspace"
    for name in ("config.yaml", "config.json", "config.toml"):
        path = user_dir / name
        if path.exists():
            loader.add_source(path, priority=10)

    if root is not None:
        meta_dir = Path(root) / StorageConfig().meta_dir_name
        for name in ("config.yaml", "config.json", "config.toml"):
            path = meta_dir / name
            if path.exists():
                loader.add_source(path, priority=15)

    if config_paths:
        for i, path in enumerate(config_paths):
            loader.add_source(path, priority=20 + i)

    if extra_config:
        loader.add_source(extra_config, priority=100)

    return loader.load()


__all__ = [
    'WorkspaceConfig',
    'StorageConfig',
    'LoggingConfig',
    'ConfigLoader',
    'load_config',
]
