from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field, ValidationError
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from quill.constants import DEFAULT_CACHE_SIZE, MAX_CACHE_SIZE
from quill.exceptions import ConfigError
from quill.logging import get_logger

__all__ = [
    "QuillConfig",
    "YamlConfigSource",
    "load_config",
    "get_user_config_path",
    "get_project_config_path",
]

logger = get_logger(__name__)

PROJECT_CONFIG_NAME = "quill.yaml"

# Project config path requested by load_config(); read by settings_customise_sources.
_project_config_path: ContextVar[Path | None] = ContextVar(
    "quill_project_config_path", default=None
)


class YamlConfigSource(PydanticBaseSettingsSource):
    """Settings source that reads a single YAML mapping from disk."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | None = None,
    ):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._config_data: dict[str, Any] = {}
        if yaml_file is None or not yaml_file.exists():
            return
        try:
            loaded = yaml.safe_load(yaml_file.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {yaml_file}: {e}") from e
        if loaded is None:
            logger.warning("config_file_empty", path=str(yaml_file))
        elif not isinstance(loaded, dict):
            raise ConfigError(
                f"Config file {yaml_file} must contain a mapping",
                value=type(loaded).__name__,
            )
        else:
            self._config_data = loaded

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        """Get value for a specific field from the YAML config."""
        return self._config_data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return the complete config data."""
        return dict(self._config_data)


class QuillConfig(BaseSettings):
    """Root configuration object for Quill.

    Attributes:
        cache_expressions: Keep parsed expressions in the process-wide cache.
        cache_size: Maximum number of parsed expressions kept in the cache.
        verbosity: Default log verbosity for the command line.
    """

    model_config = SettingsConfigDict(
        env_prefix="QUILL_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    cache_expressions: bool = True
    cache_size: int = Field(default=DEFAULT_CACHE_SIZE, ge=1, le=MAX_CACHE_SIZE)
    verbosity: Literal["error", "warning", "info", "debug"] = "warning"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Order settings sources.

        Priority (highest to lowest):
        1. Init arguments
        2. Environment variables (QUILL_*)
        3. Project YAML config (./quill.yaml or the path given to load_config)
        4. User YAML config (~/.config/quill/config.yaml)
        """
        project_path = _project_config_path.get() or get_project_config_path()
        return (
            init_settings,
            env_settings,
            YamlConfigSource(settings_cls, project_path),
            YamlConfigSource(settings_cls, get_user_config_path()),
        )


def get_user_config_path() -> Path:
    """Get the path to the user configuration file.

    Returns:
        Path to ~/.config/quill/config.yaml
    """
    return Path.home() / ".config" / "quill" / "config.yaml"


def get_project_config_path() -> Path:
    """Get the path to the project configuration file in the working directory."""
    return Path.cwd() / PROJECT_CONFIG_NAME


def load_config(config_path: Path | None = None) -> QuillConfig:
    """Load configuration with hierarchy: defaults -> user -> project -> env.

    Args:
        config_path: Optional path to the project config file.
            Defaults to ./quill.yaml.

    Returns:
        QuillConfig instance with merged configuration.

    Raises:
        ConfigError: If a config file is not valid YAML or a value fails
            validation.
    """
    project_path = config_path or get_project_config_path()
    if not project_path.exists():
        logger.debug("project_config_missing", path=str(project_path))

    token = _project_config_path.set(project_path)
    try:
        return QuillConfig()
    except ValidationError as e:
        first_error = e.errors()[0]
        field = ".".join(str(loc) for loc in first_error["loc"])
        raise ConfigError(
            message=f"Invalid configuration: {first_error['msg']}",
            field=field,
            value=first_error.get("input"),
        ) from e
    finally:
        _project_config_path.reset(token)
