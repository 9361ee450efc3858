"""Shared fixtures: isolate global timezone, settings and PLEVA_* environment."""

from __future__ import annotations

import os

import pytest

import pleva.config.settings as settings_module
from pleva.core.time import TimeConfig

_ENV_PREFIXES = ("PLEVA_", "OPENAI_", "AZURE_OPENAI_")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Reset diary-related environment and global state for each test."""
    for key in list(os.environ):
        if key.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(key)

    original_tz = TimeConfig._default_timezone
    TimeConfig._default_timezone = "UTC"
    settings_module._settings = None

    yield

    TimeConfig._default_timezone = original_tz
    settings_module._settings = None
