"""Centralized configuration and secrets management.

Loads configuration from a .env file and the environment and provides typed
access to settings.

- A fresh checkout boots with a single .env (only PLEVA_DATA_PATH is required)
- Missing or invalid config produces clear errors
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ..core.time import set_default_timezone

__all__ = [
    "ConfigError",
    "Settings",
    "generate_example_env",
    "get_settings",
    "load_env_file",
    "load_settings",
]


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


@dataclass
class Settings:
    """Settings for the diary.

    Attributes
    ----------
    data_path : Path
        Diary data file (JSON export document)
    default_timezone : str
        Timezone for day boundaries (default: UTC)
    default_range : str
        Range label shown when none is selected (W, M, 6M, Y)
    log_level : str
        Logging level
    log_dir : Path
        Directory for loguru sinks
    summary_enabled : bool
        Enable the summary command
    openai_api_key : str
        OpenAI or Azure OpenAI key
    openai_endpoint : str
        Chat completions URL (OpenAI) or resource URL (Azure)
    openai_deployment : str
        Azure deployment name; empty for plain OpenAI
    """

    # Core settings (required fields first)
    data_path: Path

    default_timezone: str = "UTC"
    default_range: str = "W"

    # Logging
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    # Summary (remote text generation)
    summary_enabled: bool = False
    openai_api_key: str = ""
    openai_endpoint: str = "https://api.openai.com/v1/chat/completions"
    openai_deployment: str = ""
    openai_default_model: str = "gpt-4o-mini"
    summary_temperature: float = 0.7
    summary_max_tokens: int = 500
    summary_timeout: float = 30.0

    def __post_init__(self):
        """Validate settings after initialization."""
        if isinstance(self.data_path, str):
            self.data_path = Path(self.data_path) if self.data_path else None  # type: ignore[assignment]

        if isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)

        if not self.data_path:
            raise ConfigError(
                "data_path is required. Set PLEVA_DATA_PATH in .env or environment (e.g., PLEVA_DATA_PATH=diary.json)"
            )

        try:
            set_default_timezone(self.default_timezone)
        except ValueError as exc:
            raise ConfigError(f"PLEVA_DEFAULT_TZ: {exc}") from exc

        from ..trends.periods import TimeRange

        try:
            TimeRange.from_label(self.default_range)
        except ValueError as exc:
            raise ConfigError(f"PLEVA_DEFAULT_RANGE: {exc}") from exc

        if self.summary_enabled and not self.openai_api_key:
            raise ConfigError(
                "OPENAI_API_KEY (or AZURE_OPENAI_KEY) is required when PLEVA_SUMMARY_ENABLED=true. "
                "Set it in .env"
            )

    @property
    def use_azure(self) -> bool:
        return bool(self.openai_deployment)

    @classmethod
    def from_env(cls, env_file: Path | str | None = None) -> Settings:
        """Load settings from environment.

        Loads from .env file if present, otherwise from os.environ. Azure
        settings win over plain OpenAI ones when all three are present.

        Raises
        ------
        ConfigError
            If required settings are missing or invalid
        """
        if env_file is None:
            env_file = Path(".env")

        if isinstance(env_file, str):
            env_file = Path(env_file)

        if env_file.exists():
            load_env_file(env_file)

        try:
            data_path = os.environ.get("PLEVA_DATA_PATH")
            if not data_path:
                raise ConfigError(
                    "PLEVA_DATA_PATH is required.\n\n"
                    "Quick fix:\n"
                    "  1. Run `pleva config example > .env`\n"
                    "  2. Set PLEVA_DATA_PATH=diary.json in .env\n"
                    "  3. Run your command again\n\n"
                    "Or set it in environment: export PLEVA_DATA_PATH=diary.json"
                )

            azure_key = os.environ.get("AZURE_OPENAI_KEY", "")
            azure_endpoint = os.environ.get("AZURE_OPENAI_ENDPOINT", "")
            azure_deployment = os.environ.get("AZURE_OPENAI_DEPLOYMENT", "")
            use_azure = bool(azure_key and azure_endpoint and azure_deployment)

            return cls(
                data_path=Path(data_path),
                default_timezone=os.environ.get("PLEVA_DEFAULT_TZ", "UTC"),
                default_range=os.environ.get("PLEVA_DEFAULT_RANGE", "W"),
                # Logging
                log_level=os.environ.get("PLEVA_LOG_LEVEL", "INFO"),
                log_dir=Path(os.environ.get("PLEVA_LOG_DIR", "logs")),
                # Summary
                summary_enabled=os.environ.get("PLEVA_SUMMARY_ENABLED", "false").lower() == "true",
                openai_api_key=azure_key if use_azure else os.environ.get("OPENAI_API_KEY", ""),
                openai_endpoint=azure_endpoint
                if use_azure
                else os.environ.get("OPENAI_ENDPOINT", "https://api.openai.com/v1/chat/completions"),
                openai_deployment=azure_deployment if use_azure else "",
                openai_default_model=os.environ.get("OPENAI_DEFAULT_MODEL", "gpt-4o-mini"),
                summary_temperature=float(os.environ.get("PLEVA_SUMMARY_TEMPERATURE", "0.7")),
                summary_max_tokens=int(os.environ.get("PLEVA_SUMMARY_MAX_TOKENS", "500")),
                summary_timeout=float(os.environ.get("PLEVA_SUMMARY_TIMEOUT", "30.0")),
            )

        except (ValueError, KeyError) as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc


def load_env_file(env_file: Path) -> None:
    """Load environment variables from .env file (KEY=VALUE, # comments)."""
    with open(env_file) as f:
        for line in f:
            line = line.strip()

            if not line or line.startswith("#"):
                continue

            if "=" in line:
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip()

                if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                    value = value[1:-1]

                os.environ[key] = value


# Global settings instance
_settings: Settings | None = None


def load_settings(env_file: Path | str | None = None) -> Settings:
    """Load settings from environment and keep them as the current settings.

    Raises
    ------
    ConfigError
        If required settings missing (clear error message)
    """
    global _settings
    _settings = Settings.from_env(env_file)
    return _settings


def get_settings() -> Settings:
    """Get current settings.

    Raises
    ------
    ConfigError
        If settings not loaded
    """
    if _settings is None:
        raise ConfigError("Settings not loaded. Call load_settings() first or set PLEVA_DATA_PATH.")
    return _settings


def generate_example_env(output_path: Path | None = None) -> str:
    """Generate example .env file with all settings."""
    example = """# PLEVA Diary Configuration
# Copy this to .env and adjust values

# ====================
# Core Settings
# ====================

# Diary data file (required)
PLEVA_DATA_PATH=diary.json

# Timezone used for day boundaries (optional, default: UTC)
# Examples: UTC, America/New_York, Europe/Brussels
PLEVA_DEFAULT_TZ=UTC

# Default trend range (optional, default: W)
# Options: W, M, 6M, Y
PLEVA_DEFAULT_RANGE=W

# ====================
# Logging
# ====================

# Log level (optional, default: INFO)
PLEVA_LOG_LEVEL=INFO

# Log directory (optional, default: logs)
PLEVA_LOG_DIR=logs

# ====================
# Summary (off by default)
# ====================

PLEVA_SUMMARY_ENABLED=false

# OpenAI
# OPENAI_API_KEY=sk-...
# OPENAI_DEFAULT_MODEL=gpt-4o-mini

# Azure OpenAI (used instead of OpenAI when all three are set)
# AZURE_OPENAI_KEY=...
# AZURE_OPENAI_ENDPOINT=https://your-resource.openai.azure.com
# AZURE_OPENAI_DEPLOYMENT=your-deployment
"""

    if output_path:
        output_path.write_text(example)

    return example
