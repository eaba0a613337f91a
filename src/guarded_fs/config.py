"""centralized configuration management using pydantic settings.

settings are loaded from environment variables and an optional .env file,
then turned into an immutable SecurityPolicy by build_policy(). the policy
is what the rest of the package consumes; settings never leak past startup.
"""

import os
from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .types import (
    DEFAULT_CONFIRMATION_TIMEOUT,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_RESTRICTED_EXTENSIONS,
    SecurityPolicy,
)


def split_directory_list(raw: str) -> list[str]:
    """split a delimiter-separated directory list.

    ';' is accepted on every platform; os.pathsep is accepted as well so
    the usual PATH-style value works on posix.
    """
    parts: list[str] = []
    for chunk in raw.split(";"):
        parts.extend(chunk.split(os.pathsep) if os.pathsep != ";" else [chunk])
    return [p.strip() for p in parts if p.strip()]


def normalize_extensions(values: Any) -> tuple[str, ...]:
    """lower-case and dot-prefix a list (or comma-separated string) of extensions."""
    if not values:
        return ()
    if isinstance(values, str):
        values = values.split(",")
    result = []
    for ext in values:
        ext = str(ext).strip().lower()
        if not ext:
            continue
        result.append(ext if ext.startswith(".") else f".{ext}")
    return tuple(result)


class Settings(BaseSettings):
    """environment-derived settings for guarded-fs.

    attributes:
        allowed_dirs: raw allow-list (FS_ALLOWED_DIRS, ';'-separated)
        max_file_size: maximum size in bytes of files that may be touched
        allow_force_delete: master switch for force deletes
        force_delete_requires_confirmation: gate force deletes behind confirmation
        restricted_extensions: comma-separated extension blacklist; an empty
            value turns the blacklist off
        confirmation_timeout: seconds to wait for a human confirmation
        log_level: logging level (DEBUG, INFO, WARNING, ERROR)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    allowed_dirs: str | None = Field(default=None, alias="FS_ALLOWED_DIRS")
    max_file_size: int = Field(default=DEFAULT_MAX_FILE_SIZE, alias="FS_MAX_FILE_SIZE", ge=0)
    allow_force_delete: bool = Field(default=True, alias="FS_ALLOW_FORCE_DELETE")
    force_delete_requires_confirmation: bool = Field(
        default=True, alias="FS_FORCE_DELETE_REQUIRES_CONFIRMATION"
    )
    restricted_extensions: str | None = Field(
        default=",".join(DEFAULT_RESTRICTED_EXTENSIONS), alias="FS_RESTRICTED_EXTENSIONS"
    )
    confirmation_timeout: float = Field(
        default=DEFAULT_CONFIRMATION_TIMEOUT, alias="FS_CONFIRMATION_TIMEOUT", gt=0
    )
    log_level: str = Field(default="WARNING", alias="GUARDED_FS_LOG_LEVEL")

    @field_validator("allowed_dirs", "restricted_extensions")
    @classmethod
    def _blank_is_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    def get_allowed_dirs(self) -> list[str]:
        """allowed directories from the environment, or [] if unset."""
        if not self.allowed_dirs:
            return []
        return split_directory_list(self.allowed_dirs)


@lru_cache
def get_settings() -> Settings:
    """get the singleton settings instance.

    call get_settings.cache_clear() to reload settings if needed.
    """
    return Settings()


def build_policy(
    settings: Settings | None = None,
    allowed_dirs: list[str] | None = None,
    yaml_config: dict | None = None,
) -> SecurityPolicy:
    """assemble the process-wide SecurityPolicy.

    priority order for every field:
    1. explicit arguments (cli)
    2. the `security:` section of the yaml config
    3. environment variables (via pydantic settings)
    4. built-in defaults; with no directories anywhere, the current
       working directory is allowed

    args:
        settings: settings instance (defaults to get_settings())
        allowed_dirs: directories passed on the command line
        yaml_config: parsed yaml configuration

    returns:
        the immutable policy
    """
    settings = settings or get_settings()
    security = (yaml_config or {}).get("security") or {}

    directories = (
        allowed_dirs
        or security.get("allowed_directories")
        or settings.get_allowed_dirs()
        or [os.getcwd()]
    )
    max_file_size = security.get("max_file_size", settings.max_file_size)

    return SecurityPolicy(
        allowed_directories=tuple(os.path.abspath(os.path.expanduser(d)) for d in directories),
        enable_path_traversal_protection=bool(
            security.get("enable_path_traversal_protection", True)
        ),
        enable_symlink_validation=bool(security.get("enable_symlink_validation", True)),
        allow_force_delete=bool(security.get("allow_force_delete", settings.allow_force_delete)),
        force_delete_requires_confirmation=bool(
            security.get(
                "force_delete_requires_confirmation",
                settings.force_delete_requires_confirmation,
            )
        ),
        restricted_extensions=normalize_extensions(
            security.get("restricted_extensions", settings.restricted_extensions)
        ),
        max_file_size=int(max_file_size) if max_file_size else None,
        confirmation_timeout=float(
            security.get("confirmation_timeout", settings.confirmation_timeout)
        ),
    )
