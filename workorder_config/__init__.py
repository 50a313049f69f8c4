"""
workorder_config -- single public entrypoint for kernel settings.

Responsibility:
    ``get_active_config()`` is the only way to obtain settings at runtime.
    No other component reads settings files or environment variables.

Resolution order:
    1. The ``config_path`` argument.
    2. The ``WORKORDER_CONFIG`` environment variable.
    3. The packaged ``workorder_config/sets/default.yaml``.

Failure modes:
    - ``FileNotFoundError`` -- the resolved file does not exist.
    - ``KeyError`` / ``ValueError`` -- invalid content.

Every successful call logs a ``settings_loaded`` entry carrying the
config id and the SHA-256 checksum of the source document.
"""

from __future__ import annotations

import os
from pathlib import Path

from workorder_config.loader import load_settings
from workorder_config.schema import (
    DatabaseSettings,
    KernelSettings,
    LedgerSettings,
    LoggingSettings,
    ReportingSettings,
)
from workorder_kernel.logging_config import get_logger

_logger = get_logger("config")

CONFIG_ENV_VAR = "WORKORDER_CONFIG"

_DEFAULT_CONFIG_FILE = Path(__file__).parent / "sets" / "default.yaml"


def resolve_config_path(config_path: Path | str | None = None) -> Path:
    if config_path is not None:
        return Path(config_path)
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)
    return _DEFAULT_CONFIG_FILE


def get_active_config(config_path: Path | str | None = None) -> KernelSettings:
    """
    Load and validate the active settings.

    Args:
        config_path: Explicit settings file.  Overrides the environment.

    Raises:
        FileNotFoundError: The resolved file does not exist.
        KeyError: A required key is missing.
        ValueError: A value is out of range.
    """
    path = resolve_config_path(config_path)
    if not path.is_file():
        raise FileNotFoundError(f"Settings file not found: {path}")

    settings = load_settings(path)

    _logger.info(
        "settings_loaded",
        extra={
            "config_id": settings.config_id,
            "path": str(path),
            "settings_checksum": settings.checksum,
            "status_count": len(settings.ledger.default_statuses),
        },
    )
    return settings


__all__ = [
    "CONFIG_ENV_VAR",
    "DatabaseSettings",
    "KernelSettings",
    "LedgerSettings",
    "LoggingSettings",
    "ReportingSettings",
    "get_active_config",
    "resolve_config_path",
]
