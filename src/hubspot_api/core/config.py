"""
Configuration module for HubSpot API access.

This module provides the immutable client configuration, loading from YAML
and validation. A process-wide default is kept for convenience; clients that
receive an explicit configuration never consult it.
"""

import threading
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.hubapi.com"
DEFAULT_EVENTS_BASE_URL = "https://track.hubspot.com"
DEFAULT_TIMEOUT = 20.0


@dataclass(frozen=True)
class HubspotConfig:
    """
    Connection settings for one HubSpot portal.

    Attributes:
        hapikey: Legacy API key, sent as the ``hapikey`` query parameter
        access_token: OAuth token, sent as a bearer Authorization header
        portal_id: Hub id, required by the events API
        base_url: Root of the REST API
        events_base_url: Root of the event tracking endpoint
        timeout: Transport timeout in seconds
    """
    hapikey: Optional[str] = None
    access_token: Optional[str] = None
    portal_id: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    events_base_url: str = DEFAULT_EVENTS_BASE_URL
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HubspotConfig":
        """
        Create HubspotConfig from a dictionary.

        Keys may be strings or anything with a string form. Missing keys
        fall back to the defaults; ``None`` values for the URL keys and
        timeout do too.

        Raises:
            ConfigurationError: If an unknown key is present or timeout is
                not a number
        """
        known = {f.name for f in fields(cls)}
        values = {str(key): value for key, value in (data or {}).items()}

        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                details={"keys": unknown},
            )

        if values.get("base_url") is None:
            values.pop("base_url", None)
        if values.get("events_base_url") is None:
            values.pop("events_base_url", None)
        if values.get("portal_id") is not None:
            values["portal_id"] = str(values["portal_id"])
        if values.get("timeout") is None:
            values.pop("timeout", None)
        else:
            try:
                values["timeout"] = float(values["timeout"])
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(
                    f"timeout must be a number, got {values['timeout']!r}",
                    details={"key": "timeout"},
                ) from exc

        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    def with_options(self, **options: Any) -> "HubspotConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **options)

    def ensure(self, *names: str) -> None:
        """
        Fail fast if any of the named values was never set.

        Args:
            names: Attribute names that must hold a value

        Raises:
            ConfigurationError: For the first name that is unset
        """
        for name in names:
            if not getattr(self, name, None):
                raise ConfigurationError(f"'{name}' not configured", details={"key": name})


def validate_config(config: HubspotConfig) -> None:
    """
    Validate configuration.

    Args:
        config: Configuration to validate

    Raises:
        ConfigurationError: If configuration is invalid
    """
    for name in ("base_url", "events_base_url"):
        url = getattr(config, name)
        if not url:
            raise ConfigurationError(f"{name} must not be empty")
        if not url.startswith(("http://", "https://")):
            raise ConfigurationError(f"{name} must be an http(s) URL, got {url!r}")

    if config.timeout <= 0:
        raise ConfigurationError("timeout must be positive")

    if config.hapikey and config.access_token:
        raise ConfigurationError("Configure either hapikey or access_token, not both")


def load_config(config_path: str | Path | None = None) -> HubspotConfig:
    """
    Load client configuration from a YAML file.

    The file may hold the settings at top level or under a ``hubspot`` key.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        HubspotConfig built from the file, or defaults if the file is absent

    Raises:
        yaml.YAMLError: If config file is invalid YAML
        ConfigurationError: If config validation fails
    """
    if config_path is None:
        config_path = Path.cwd() / "config" / "hubspot.yml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        return HubspotConfig()

    with open(config_path, "r") as f:
        data = yaml.safe_load(f)

    if not data:
        return HubspotConfig()

    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping")

    if isinstance(data.get("hubspot"), dict):
        data = data["hubspot"]

    config = HubspotConfig.from_dict(data)
    validate_config(config)
    return config


_default_config: HubspotConfig = HubspotConfig()
_config_lock = threading.Lock()


def configure(options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> HubspotConfig:
    """
    Build, validate and install the process default configuration.

    Settings may be passed as a mapping, as keyword arguments, or both;
    keyword arguments win.

    Returns:
        The installed configuration
    """
    global _default_config

    config = HubspotConfig.from_dict({**(options or {}), **kwargs})
    validate_config(config)
    with _config_lock:
        _default_config = config
    return config


def get_config() -> HubspotConfig:
    """Get the process default configuration."""
    return _default_config


def reset_config() -> HubspotConfig:
    """Restore the process default configuration (test helper)."""
    global _default_config

    with _config_lock:
        _default_config = HubspotConfig()
    return _default_config
