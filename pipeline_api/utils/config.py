"""Configuration helpers for environment-aware setup."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

from dotenv import dotenv_values

__all__ = [
    "EnvironmentSettings",
    "load_environment_settings",
    "log_configuration_snapshot",
    "parse_bool",
    "split_env_list",
]


@dataclass(frozen=True)
class EnvironmentSettings:
    """Environment name plus the values read from layered ``.env`` files."""

    name: str
    loaded_files: tuple[str, ...]
    file_values: Mapping[str, str]

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return ``key`` from the process environment, then from the files."""

        value = os.getenv(key)
        if value is not None:
            return value
        return self.file_values.get(key, default)


def split_env_list(raw: str | None) -> list[str]:
    return [item.strip() for item in (raw or "").split(",") if item.strip()]


def parse_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_environment_settings(
    *, env: str | None = None, project_root: str | Path | None = None
) -> EnvironmentSettings:
    """Read ``.env``, ``.env.local``, ``.env.<env>`` and ``.env.<env>.local``.

    Later files override earlier ones; the process environment overrides all
    of them and is never modified.
    """

    root = Path(project_root or Path.cwd())
    name = (env or os.getenv("APP_ENV") or "development").strip() or "development"
    slug = name.lower()
    candidates = [
        root / ".env",
        root / ".env.local",
        root / f".env.{slug}",
        root / f".env.{slug}.local",
    ]

    loaded_files: list[str] = []
    file_values: dict[str, str] = {}
    for candidate in candidates:
        if not candidate.is_file():
            continue
        loaded_files.append(str(candidate))
        for key, value in dotenv_values(candidate).items():
            if value is not None:
                file_values[key] = value

    return EnvironmentSettings(
        name=name,
        loaded_files=tuple(loaded_files),
        file_values=file_values,
    )


def _sanitize_value(key: str, value: Any) -> Any:
    if any(marker in key.upper() for marker in ("SECRET", "PASSWORD", "TOKEN", "KEY")):
        return "***"
    return value


def log_configuration_snapshot(
    *,
    logger: Any,
    settings: EnvironmentSettings,
    config: Mapping[str, Any],
    keys_of_interest: Iterable[str],
) -> None:
    """Log the configuration values in ``keys_of_interest``, secrets masked."""

    snapshot = {
        key: _sanitize_value(key, config.get(key))
        for key in keys_of_interest
        if key in config
    }
    logger.info(
        "Runtime configuration initialised",
        extra={
            "environment": settings.name,
            "env_files": settings.loaded_files,
            "config_snapshot": snapshot,
        },
    )
