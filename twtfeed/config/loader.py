"""Configuration loading helpers for twtfeed."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationError
from .models import ClientConfig, TwtxtSettings

CONFIG_FILENAME = "config.yaml"
CACHE_FILENAME = "cache.db"
SETTINGS_SECTION = "twtxt"
FOLLOWING_SECTION = "following"


def _read_file(path: Path) -> dict:
    try:
        text = path.read_text(encoding="utf-8")
        data = yaml.safe_load(text) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Can't read configuration file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as stream:
        yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"])
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve the config home and the files living in it."""

    home: Path | None = None
    config_file: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_home = os.environ.get("TWTFEED_HOME")
        if self.home is not None:
            root = Path(self.home).expanduser()
        elif env_home:
            root = Path(env_home).expanduser()
        else:
            root = Path("~/.config/twtfeed").expanduser()
        self.home = root.resolve()
        if self.config_file is None:
            self.config_file = self.home / CONFIG_FILENAME
        else:
            self.config_file = Path(self.config_file).expanduser().resolve()
        self.logs_dir = self.home / "logs"

    def cache_path(self) -> Path:
        return self.home / CACHE_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(
        self,
        locator: ConfigLocator | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> None:
        self.locator = locator or ConfigLocator()
        self.overrides = dict(overrides or {})

    @property
    def path(self) -> Path:
        return self.locator.config_file

    def exists(self) -> bool:
        return self.path.exists()

    # ------------------------------------------------------------------
    # Whole document
    # ------------------------------------------------------------------
    def load(self) -> ClientConfig:
        """Read, validate and apply command line overrides."""

        if not self.exists():
            raise ConfigurationError(
                f"Configuration file {self.path} doesn't exist. "
                "Create it with `twtfeed config edit` or `twtfeed follow`."
            )
        payload = self.read_raw()
        try:
            config = ClientConfig.model_validate(payload)
            if self.overrides:
                merged = {**config.twtxt.model_dump(), **self.overrides}
                config.twtxt = TwtxtSettings.model_validate(merged)
        except ValidationError as exc:
            raise ConfigurationError(
                f"Invalid configuration in {self.path}: {_validation_message(exc)}"
            ) from exc
        return config

    def initialise(self) -> None:
        """Write a default document when none exists yet."""

        if self.exists():
            return
        nick = os.environ.get("USER")
        payload = {
            SETTINGS_SECTION: {"nick": nick} if nick else {},
            FOLLOWING_SECTION: {},
        }
        _write_file(self.path, payload)

    def sync_following(self, following: Mapping[str, str]) -> None:
        """Persist the follow list, leaving the rest of the document untouched."""

        payload = self.read_raw() if self.exists() else {}
        payload[FOLLOWING_SECTION] = dict(following)
        _write_file(self.path, payload)

    # ------------------------------------------------------------------
    # Raw key access for ``config get/set/remove``
    # ------------------------------------------------------------------
    def read_raw(self) -> dict:
        return _read_file(self.path)

    def write_raw(self, payload: dict) -> None:
        try:
            ClientConfig.model_validate(payload)
        except ValidationError as exc:
            raise ConfigurationError(
                f"Refusing to write invalid configuration: {_validation_message(exc)}"
            ) from exc
        _write_file(self.path, payload)

    def get_option(self, key: str) -> Any:
        section = self.read_raw().get(SETTINGS_SECTION) or {}
        return section.get(key)

    def set_option(self, key: str, value: Any) -> None:
        payload = self.read_raw() if self.exists() else {}
        section = payload.get(SETTINGS_SECTION) or {}
        section[key] = value
        payload[SETTINGS_SECTION] = section
        self.write_raw(payload)

    def remove_option(self, key: str) -> bool:
        payload = self.read_raw()
        section = payload.get(SETTINGS_SECTION) or {}
        if key not in section:
            return False
        del section[key]
        payload[SETTINGS_SECTION] = section
        self.write_raw(payload)
        return True


__all__ = ["CONFIG_FILENAME", "ConfigLocator", "ConfigRepository"]
