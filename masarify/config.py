"""Configuration file management for masarify."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TRANSACTIONS = 100
DEFAULT_API_KEY_ENV = "GEMINI_API_KEY"


@dataclass(frozen=True)
class AdvisorSettings:
    """Settings for the spending advisor."""

    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_transactions: int = DEFAULT_MAX_TRANSACTIONS
    api_key_env: str = DEFAULT_API_KEY_ENV

    @property
    def api_key(self) -> str | None:
        return os.environ.get(self.api_key_env) or None


@dataclass(frozen=True)
class Settings:
    db_path: Path | None = None
    advisor: AdvisorSettings = field(default_factory=AdvisorSettings)


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "masarify" / "config.toml"


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    default_config: dict[str, Any] = {
        "storage": {},
        "advisor": {
            "model": DEFAULT_MODEL,
            "temperature": DEFAULT_TEMPERATURE,
            "max_transactions": DEFAULT_MAX_TRANSACTIONS,
            "api_key_env": DEFAULT_API_KEY_ENV,
        },
    }

    with open(config_path, "wb") as f:
        tomli_w.dump(default_config, f)

    os.chmod(config_path, 0o600)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def parse_settings(config: dict[str, Any]) -> Settings:
    """Build Settings from a configuration dictionary, defaulting missing keys.

    Args:
        config: Configuration dictionary as read from TOML.

    Returns:
        Settings with defaults for anything not configured.

    Raises:
        ValueError: If a section is not a table or a value has the wrong type.
    """
    storage = config.get("storage", {})
    advisor = config.get("advisor", {})
    if not isinstance(storage, dict) or not isinstance(advisor, dict):
        raise ValueError("[storage] and [advisor] must be tables")

    db_path = storage.get("db_path")

    return Settings(
        db_path=Path(db_path).expanduser() if db_path else None,
        advisor=AdvisorSettings(
            model=str(advisor.get("model", DEFAULT_MODEL)),
            temperature=float(advisor.get("temperature", DEFAULT_TEMPERATURE)),
            max_transactions=int(advisor.get("max_transactions", DEFAULT_MAX_TRANSACTIONS)),
            api_key_env=str(advisor.get("api_key_env", DEFAULT_API_KEY_ENV)),
        ),
    )


def get_settings(config_path: Path | None = None) -> Settings:
    """Load settings, falling back to defaults when no config file exists.

    Raises:
        tomllib.TOMLDecodeError: If the file is not valid TOML.
        ValueError: If a section is not a table or a value cannot be converted.
        TypeError: If a value has a type that cannot be converted.
    """
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        return Settings()
    return parse_settings(config)
