"""Configuration loading for tickettrack."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

DEFAULT_HOME = Path.home() / ".tickettrack"
DEFAULT_CONFIG_PATH = DEFAULT_HOME / "config.yaml"
ENV_PREFIX = "TICKETTRACK_"


class ConfigError(Exception):
    """Raised when configuration is invalid."""


@dataclass
class TrackerConfig:
    """Runtime configuration.

    Every field can be set in the YAML file under its own name, or through
    an environment variable named ``TICKETTRACK_<FIELD>`` (upper case).
    Environment variables win over the file.
    """

    base_url: str = "https://app.asana.com/api/1.0"
    db_path: str = str(DEFAULT_HOME / "tickettrack.db")
    tick_interval: float = 1.0
    checkpoint_ticks: int = 60
    request_timeout: float = 30.0
    section_match: str = "in progress"
    min_token_length: int = 20
    reauthenticate_on_expiry: bool = False
    log_dir: str | None = None
    log_level: str | None = None
    host: str = "127.0.0.1"
    port: int = 8765
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TrackerConfig:
        """Create config from a dictionary, coercing values to field types.

        Unknown keys are kept in ``extra``.

        Raises:
            ConfigError: If a value cannot be coerced.
        """
        known = {f.name: f for f in fields(cls) if f.name != "extra"}
        kwargs: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            if key in known:
                kwargs[key] = _coerce(key, value, cls._default_of(key))
            else:
                extra[key] = value
        return cls(**kwargs, extra=extra)

    @classmethod
    def _default_of(cls, name: str) -> Any:
        return cls.__dataclass_fields__[name].default

    def apply_env(self, environ: dict[str, str] | None = None) -> TrackerConfig:
        """Apply TICKETTRACK_* environment overrides in place.

        Returns:
            self, for chaining.
        """
        env = os.environ if environ is None else environ
        for f in fields(self):
            if f.name == "extra":
                continue
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is not None:
                setattr(self, f.name, _coerce(f.name, raw, self._default_of(f.name)))
        return self


_BOOL_WORDS = {
    **dict.fromkeys(("1", "true", "yes", "on"), True),
    **dict.fromkeys(("0", "false", "no", "off", ""), False),
}


def _coerce(name: str, value: Any, default: Any) -> Any:
    """Coerce a raw value (YAML scalar or env string) to the default's type."""
    if value is None:
        return None
    try:
        if isinstance(default, bool):
            if isinstance(value, bool):
                return value
            return _BOOL_WORDS[str(value).strip().lower()]
        if isinstance(default, int):
            return int(value)
        if isinstance(default, float):
            return float(value)
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name}: {value!r}") from e
    return str(value)


def load_config(
    config_path: Path | str | None = None,
    environ: dict[str, str] | None = None,
) -> TrackerConfig:
    """Load configuration from a YAML file plus environment overrides.

    Args:
        config_path: Path to a YAML file. Defaults to TICKETTRACK_CONFIG or
            ~/.tickettrack/config.yaml. A missing default file is not an error.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Parsed configuration object.

    Raises:
        ConfigError: If an explicitly given file doesn't exist, or a file is invalid.
    """
    env = os.environ if environ is None else environ
    explicit = config_path is not None or "TICKETTRACK_CONFIG" in env
    path = Path(config_path or env.get("TICKETTRACK_CONFIG") or DEFAULT_CONFIG_PATH).expanduser()

    data: dict[str, Any] = {}
    if path.exists():
        try:
            with open(path) as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Configuration must be a YAML mapping, got {type(loaded).__name__}")
        data = loaded
    elif explicit:
        raise ConfigError(f"Configuration file not found: {path}")

    return TrackerConfig.from_dict(data).apply_env(dict(env))
