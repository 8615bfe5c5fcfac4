"""Persisted connection settings."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass

from .memory import DEFAULT_PORT

logger = logging.getLogger(__name__)

SETTINGS_FILE = os.path.join(os.path.dirname(__file__), "scanner_settings.json")


@dataclass
class ScannerSettings:
    host: str = ""
    port: int = DEFAULT_PORT
    timeout: float = 5.0
    data_dir: str = "data"


def load_saved_settings(path: str = SETTINGS_FILE) -> ScannerSettings:
    """Return stored :class:`ScannerSettings` or defaults."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        return ScannerSettings(**data)
    except FileNotFoundError:
        return ScannerSettings()
    except (OSError, ValueError, TypeError) as exc:
        logger.warning("Ignoring settings file %s: %s", path, exc)
        return ScannerSettings()


def save_settings(settings: ScannerSettings, path: str = SETTINGS_FILE) -> None:
    """Persist ``settings`` to ``path``."""
    try:
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(asdict(settings), fh, indent=2)
    except OSError as exc:
        logger.error("Failed to save settings: %s", exc)
