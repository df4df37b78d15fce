"""Client settings loaded from YAML, environment, and explicit overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from extblock.errors import ConfigError
from extblock.store.mirror import default_mirror_path

DEFAULT_API_URL = "https://file-extension-blocker-wellbeing-dough.store/api"
ENV_API_URL = "EXTBLOCK_API_URL"
ENV_TIMEOUT = "EXTBLOCK_TIMEOUT"


def default_config_path() -> Path:
    """Return the default configuration file location."""
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return Path(xdg_config_home).expanduser() / "extblock" / "config.yml"
    return Path.home() / ".config" / "extblock" / "config.yml"


class ClientSettings(BaseModel):
    """Resolved settings for one blocklist session."""

    api_url: str = DEFAULT_API_URL
    timeout_seconds: float = 10.0
    mirror_path: Path | None = Field(default_factory=default_mirror_path)
    rollback_failed_toggle: bool = True

    @field_validator("api_url")
    @classmethod
    def _validate_api_url(_cls, value: str) -> str:
        normalized = value.strip().rstrip("/")
        if not (normalized.startswith("http://") or normalized.startswith("https://")):
            raise ValueError("api_url must be an http:// or https:// URL")
        return normalized

    @field_validator("timeout_seconds")
    @classmethod
    def _validate_timeout(_cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be > 0")
        return value

    @field_validator("mirror_path")
    @classmethod
    def _expand_mirror_path(_cls, value: Path | None) -> Path | None:
        return value.expanduser() if value is not None else None


def load_settings(
    path: Path | None = None,
    *,
    api_url: str | None = None,
    timeout_seconds: float | None = None,
) -> ClientSettings:
    """Load settings; explicit arguments beat environment, which beats the file."""
    payload = _read_config_file(path)

    env_api_url = os.environ.get(ENV_API_URL)
    if env_api_url:
        payload["api_url"] = env_api_url
    env_timeout = os.environ.get(ENV_TIMEOUT)
    if env_timeout:
        payload["timeout_seconds"] = env_timeout

    if api_url is not None:
        payload["api_url"] = api_url
    if timeout_seconds is not None:
        payload["timeout_seconds"] = timeout_seconds

    try:
        return ClientSettings.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc


def _read_config_file(path: Path | None) -> dict[str, object]:
    config_path = path
    if config_path is None:
        config_path = default_config_path()
        if not config_path.is_file():
            return {}

    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Unable to read config file: {config_path}: {exc}") from exc

    try:
        payload = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Unable to parse config YAML: {config_path}: {exc}") from exc

    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigError(f"Config must be a YAML object: {config_path}")
    return dict(payload)
