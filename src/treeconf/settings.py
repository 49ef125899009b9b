"""
Runtime settings for treeconf using pydantic-settings.

Loads settings from:
1. Constructor arguments (highest precedence)
2. Environment variables with TREECONF_ prefix
3. .env file named by TREECONF_ENV_FILE (if set and present)

Example:
    TREECONF_WATCH_FILES=false TREECONF_REQUEST_QUEUE_SIZE=4 treeconf -f app.yaml watch
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

ENV_FILE_VAR = "TREECONF_ENV_FILE"

LogLevel = _typing.Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _get_env_file() -> str | None:
    """Return the .env file named by TREECONF_ENV_FILE, if it exists."""
    if env_file := _os.environ.get(ENV_FILE_VAR):
        if _pathlib.Path(env_file).exists():
            return env_file
    return None


class Settings(_pydantic_settings.BaseSettings):
    """
    treeconf settings.

    All settings can be overridden via environment variables with the
    TREECONF_ prefix, e.g. TREECONF_REQUEST_QUEUE_SIZE=64.
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="TREECONF_",
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    request_queue_size: int = _pydantic.Field(
        default=16,
        gt=0,
        description="Pending set/reset requests before callers block",
    )
    control_queue_size: int = _pydantic.Field(
        default=16,
        gt=0,
        description="Pending register/unregister requests before callers block",
    )
    watch_files: bool = _pydantic.Field(
        default=True,
        description="Reload when a file store is changed by someone else",
    )
    json_indent: int = _pydantic.Field(
        default=4,
        ge=0,
        description="Indentation used when writing JSON files",
    )
    log_level: LogLevel = _pydantic.Field(
        default="WARNING",
        description="Log level configured by the command line tool",
    )

    @_pydantic.field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: _typing.Any) -> _typing.Any:
        if isinstance(value, str):
            return value.upper()
        return value
