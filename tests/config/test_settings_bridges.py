"""
Tests for workorder_config.bridges.

Covers:
- The configured ledger is what seed_defaults writes
- Packaged settings seed the default five statuses
- The configured recent-activity limit bounds lifecycle_summary()
"""

import textwrap

from workorder_config import get_active_config
from workorder_config.bridges import build_status_ledger_service, build_work_order_selector
from workorder_kernel.domain.lifecycle import DEFAULT_STATUSES, StatusKind


def _settings(tmp_path, body):
    path = tmp_path / "settings.yaml"
    path.write_text(textwrap.dedent(body))
    return get_active_config(path)


class TestStatusLedgerBridge:
    def test_seeds_configured_ledger(self, session, tmp_path, deterministic_clock, test_actor_id):
        settings = _settings(tmp_path, """
            config_id: body-shop
            ledger:
              default_statuses:
                - {name: Intake, order: 1}
                - {name: Paint, order: 2}
                - {name: Delivered, order: 3, kind: end}
                - {name: Void, order: 4, kind: canceled}
        """)

        ledger = build_status_ledger_service(session, settings, deterministic_clock).seed_defaults(
            test_actor_id
        )

        assert [s.name for s in ledger.statuses] == ["Intake", "Paint", "Delivered", "Void"]
        assert ledger.end_status.name == "Delivered"
        assert ledger.initial_status() == "Intake"

    def test_configured_ledger_drives_new_work_orders(
        self, session, tmp_path, create_work_order, test_actor_id
    ):
        settings = _settings(tmp_path, """
            config_id: body-shop
            ledger:
              default_statuses:
                - {name: Intake, order: 1}
                - {name: Delivered, order: 2, kind: end}
        """)
        build_status_ledger_service(session, settings).seed_defaults(test_actor_id)

        assert create_work_order().status == "Intake"

    def test_packaged_defaults(self, session, monkeypatch, test_actor_id):
        monkeypatch.delenv("WORKORDER_CONFIG", raising=False)

        ledger = build_status_ledger_service(session, get_active_config()).seed_defaults(
            test_actor_id
        )

        assert [s.name for s in ledger.statuses] == [s.name for s in DEFAULT_STATUSES]
        assert ledger.find("Cancelled").kind is StatusKind.CANCELED


class TestWorkOrderSelectorBridge:
    def test_recent_activity_uses_configured_limit(self, session, tmp_path, create_work_order):
        settings = _settings(tmp_path, """
            config_id: small-dashboard
            reporting:
              recent_activity_limit: 2
        """)
        created = [create_work_order() for _ in range(4)]

        summary = build_work_order_selector(session, settings).lifecycle_summary()

        assert summary.total == 4
        assert [wo.id for wo in summary.recent_activity] == [created[3].id, created[2].id]

    def test_explicit_limit_overrides_configured(self, session, tmp_path, create_work_order):
        settings = _settings(tmp_path, """
            config_id: small-dashboard
            reporting:
              recent_activity_limit: 2
        """)
        for _ in range(4):
            create_work_order()

        summary = build_work_order_selector(session, settings).lifecycle_summary(recent_limit=3)

        assert len(summary.recent_activity) == 3
