"""Configuration loader for the solo pool tracker."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import yaml
from dotenv import load_dotenv

DEFAULT_ENDPOINT = "https://broad-cell-151e.schne564.workers.dev/"
DEFAULT_ADDRESS = "bc1qd6mfkav3yzztuhpq6qg0kfm5fc2ay7jvy52rdn"

ENDPOINT_ENV = "SOLO_TRACKER_ENDPOINT"


@dataclass
class UIConfig:
    """Auto-dismiss delays for transient UI feedback, in seconds."""

    toast_seconds: float = 3.0
    error_seconds: float = 5.0
    highlight_seconds: float = 3.0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, object]]) -> "UIConfig":
        if not data:
            return cls()
        return cls(**data)


@dataclass
class DesktopNotifierConfig:
    """Desktop notifications; when enabled permission is requested at start."""

    enabled: bool = False


@dataclass
class LocalSoundNotifierConfig:
    """Local sound notifier configuration."""

    enabled: bool = True
    sound_file: Optional[str] = None
    volume: float = 1.0


@dataclass
class NotifiersConfig:
    """Notifier collection configuration."""

    desktop: DesktopNotifierConfig = field(default_factory=DesktopNotifierConfig)
    local_sound: LocalSoundNotifierConfig = field(default_factory=LocalSoundNotifierConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, object]]) -> "NotifiersConfig":
        if not data:
            return cls()
        desktop = DesktopNotifierConfig(**(data.get("desktop") or {}))
        local_sound = LocalSoundNotifierConfig(**(data.get("local_sound") or {}))
        return cls(desktop=desktop, local_sound=local_sound)


@dataclass
class AppConfig:
    """Top level configuration model."""

    endpoint: str = DEFAULT_ENDPOINT
    default_address: str = DEFAULT_ADDRESS
    refresh_interval_ms: int = 5000
    max_history_items: int = 10
    request_timeout: float = 10.0
    log_level: str = "INFO"
    ui: UIConfig = field(default_factory=UIConfig)
    notifiers: NotifiersConfig = field(default_factory=NotifiersConfig)

    def __post_init__(self) -> None:
        if self.refresh_interval_ms <= 0:
            raise ValueError("refresh_interval_ms must be positive")
        if self.max_history_items <= 0:
            raise ValueError("max_history_items must be positive")
        if not self.endpoint:
            raise ValueError("endpoint must be configured")
        if logging.getLevelName(self.log_level.upper()) not in (
            logging.DEBUG,
            logging.INFO,
            logging.WARNING,
            logging.ERROR,
            logging.CRITICAL,
        ):
            raise ValueError(f"unknown log_level: {self.log_level}")

    @property
    def refresh_interval(self) -> float:
        """Refresh interval in seconds."""

        return self.refresh_interval_ms / 1000

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, object]]) -> "AppConfig":
        data = dict(data or {})
        ui = UIConfig.from_dict(data.pop("ui", None))
        notifiers = NotifiersConfig.from_dict(data.pop("notifiers", None))
        endpoint = os.getenv(ENDPOINT_ENV) or data.pop("endpoint", DEFAULT_ENDPOINT)
        data.pop("endpoint", None)
        return cls(endpoint=endpoint, ui=ui, notifiers=notifiers, **data)


def load_config(
    config_path: Optional[Path] = None,
    env_path: Optional[Path] = None,
) -> AppConfig:
    """Load configuration from YAML and environment variables.

    A missing config file is not an error; defaults are used instead.
    """

    base_path = Path(__file__).resolve().parents[1]
    if config_path is None:
        config_path = base_path / "config.yaml"
    if env_path is None:
        default_env = base_path / ".env"
        if default_env.exists():
            env_path = default_env

    if env_path is not None:
        load_dotenv(dotenv_path=env_path, override=False)

    if not Path(config_path).exists():
        return AppConfig.from_dict({})

    with open(config_path, "r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping")
    return AppConfig.from_dict(data)
