"""
Settings loader (``workorder_config.loader``).

Responsibility
--------------
Load a YAML settings file and parse it into ``KernelSettings``.  Callers
go through ``workorder_config.get_active_config()``; this module is the
parsing half only.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Out-of-range values or a ledger with two end statuses  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json

from pathlib import Path
from typing import Any

import yaml

from workorder_config.schema import (
    DatabaseSettings,
    KernelSettings,
    LedgerSettings,
    LoggingSettings,
    ReportingSettings,
)
from workorder_kernel.domain.lifecycle import StatusDefinitionData, StatusKind
from workorder_kernel.logging_config import get_logger

logger = get_logger("config.loader")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load one YAML file; an empty file yields an empty dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_database(data: dict[str, Any]) -> DatabaseSettings:
    settings = DatabaseSettings(
        url=data.get("url", DatabaseSettings.url),
        echo=bool(data.get("echo", False)),
        pool_size=int(data.get("pool_size", DatabaseSettings.pool_size)),
        max_overflow=int(data.get("max_overflow", DatabaseSettings.max_overflow)),
    )
    if settings.pool_size < 1:
        raise ValueError(f"database.pool_size must be >= 1, got {settings.pool_size}")
    if settings.max_overflow < 0:
        raise ValueError(
            f"database.max_overflow must be >= 0, got {settings.max_overflow}"
        )
    return settings


def parse_logging(data: dict[str, Any]) -> LoggingSettings:
    level = str(data.get("level", "INFO")).upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"logging.level must be one of {_LOG_LEVELS}, got {level!r}")
    return LoggingSettings(level=level)


def parse_status(data: dict[str, Any]) -> StatusDefinitionData:
    """
    Parse one ledger entry.

    Accepts either ``kind`` (normal / end / canceled) or the flag pair
    ``is_end_status`` / ``is_canceled_status``.

    Raises:
        KeyError: ``name`` or ``order`` missing.
        ConflictingStatusFlagsError: Both flags set.
    """
    if "kind" in data:
        kind = StatusKind(data["kind"])
    else:
        kind = StatusKind.from_flags(
            bool(data.get("is_end_status", False)),
            bool(data.get("is_canceled_status", False)),
            data.get("name"),
        )
    return StatusDefinitionData(
        name=data["name"],
        order=int(data["order"]),
        kind=kind,
        color=data.get("color"),
    )


def parse_ledger(data: dict[str, Any]) -> LedgerSettings:
    raw = data.get("default_statuses")
    if raw is None:
        return LedgerSettings()

    statuses = tuple(parse_status(item) for item in raw)
    end_count = sum(1 for s in statuses if s.is_end_status)
    if end_count > 1:
        raise ValueError(
            f"ledger.default_statuses declares {end_count} end statuses; at most one is allowed"
        )
    return LedgerSettings(default_statuses=statuses)


def parse_reporting(data: dict[str, Any]) -> ReportingSettings:
    limit = int(data.get("recent_activity_limit", ReportingSettings.recent_activity_limit))
    if limit < 0:
        raise ValueError(f"reporting.recent_activity_limit must be >= 0, got {limit}")
    return ReportingSettings(recent_activity_limit=limit)


def parse_settings(data: dict[str, Any]) -> KernelSettings:
    """
    Parse a full settings document.

    Raises:
        KeyError: ``config_id`` missing.
        ValueError: A section holds an invalid value.
    """
    return KernelSettings(
        config_id=data["config_id"],
        database=parse_database(data.get("database") or {}),
        logging=parse_logging(data.get("logging") or {}),
        ledger=parse_ledger(data.get("ledger") or {}),
        reporting=parse_reporting(data.get("reporting") or {}),
        checksum=compute_checksum(data),
    )


def load_settings(path: Path) -> KernelSettings:
    logger.debug(
        "settings_file_loading", extra={"path": str(path)}
    )
    return parse_settings(load_yaml_file(path))
