"""
Kernel settings schema.

Frozen dataclasses the YAML loader parses into.  ``KernelSettings`` is the
only runtime artifact; nothing else in the repository reads the YAML.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from workorder_kernel.domain.lifecycle import DEFAULT_STATUSES, StatusDefinitionData


@dataclass(frozen=True)
class DatabaseSettings:
    url: str = "sqlite:///:memory:"
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 5


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class LedgerSettings:
    """The status list written by ``StatusLedgerService.seed_defaults``."""

    default_statuses: tuple[StatusDefinitionData, ...] = DEFAULT_STATUSES


@dataclass(frozen=True)
class ReportingSettings:
    recent_activity_limit: int = 10


@dataclass(frozen=True)
class KernelSettings:
    config_id: str
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    ledger: LedgerSettings = field(default_factory=LedgerSettings)
    reporting: ReportingSettings = field(default_factory=ReportingSettings)
    checksum: str = ""
