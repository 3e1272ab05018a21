from datetime import date

import pytest

from ..core.exceptions import PersistenceError, SessionRequiredError, ValidationError
from ..models import MenuType, NewReservation, ReservationStatus
from ..services.pending_store import PendingSelectionStore
from ..services.reconciliation import ReconciliationEngine, group_by_menu
from ..services.reservation_store import ConfirmedReservationStore
from .conftest import NOW, run

TUESDAY = date(2025, 6, 10)
WEDNESDAY = date(2025, 6, 11)


def _engine(gateway, owner_id="u1"):
    pending = PendingSelectionStore()
    store = ConfirmedReservationStore(gateway)
    if owner_id:
        run(store.fetch_all(owner_id))
    return pending, store, ReconciliationEngine(pending, store, gateway)


def _rows(test_db):
    return test_db.execute_query(
        "SELECT date, menu_type, status FROM reservations WHERE owner_id = 'u1' ORDER BY date"
    )


class TestConfirm:
    """Committing pending selections"""

    def test_new_day_is_inserted(self, persistence, test_db):
        pending, store, engine = _engine(persistence)
        pending.add(TUESDAY, MenuType.HIPOCALORIC)

        assert run(engine.confirm(NOW)) == 1

        assert _rows(test_db) == [(TUESDAY, "Hipocaloric", "confirmed")]
        assert len(pending) == 0
        assert store.find_by_date(TUESDAY).menu_type == MenuType.HIPOCALORIC

    def test_cancelled_day_is_reactivated(self, persistence, test_db):
        """A cancelled row comes back with the new menu, never a second row"""
        pending, store, engine = _engine(persistence)
        pending.add(TUESDAY, MenuType.HIPOCALORIC)
        run(engine.confirm(NOW))
        run(store.cancel(store.find_by_date(TUESDAY).id))

        pending.add(TUESDAY, MenuType.NORMAL)
        assert run(engine.confirm(NOW)) == 1

        assert _rows(test_db) == [(TUESDAY, "Normal", "confirmed")]
        assert store.find_by_date(TUESDAY).status == ReservationStatus.CONFIRMED

    def test_confirmed_day_gets_pending_menu(self, persistence, test_db):
        pending, store, engine = _engine(persistence)
        pending.add(TUESDAY, MenuType.NORMAL)
        run(engine.confirm(NOW))

        pending.add(TUESDAY, MenuType.HIPOCALORIC)
        run(engine.confirm(NOW))

        assert _rows(test_db) == [(TUESDAY, "Hipocaloric", "confirmed")]

    def test_mixed_batch_inserts_missing_rows(self, persistence, test_db):
        """An existing row must not block the insert of the other days"""
        run(persistence.insert_reservations([
            NewReservation(owner_id="u1", date=TUESDAY, menu_type=MenuType.NORMAL,
                           status=ReservationStatus.CANCELLED)
        ]))
        pending, store, engine = _engine(persistence)
        pending.add(TUESDAY, MenuType.NORMAL)
        pending.add(WEDNESDAY, MenuType.HIPOCALORIC)

        assert run(engine.confirm(NOW)) == 2

        assert _rows(test_db) == [
            (TUESDAY, "Normal", "confirmed"),
            (WEDNESDAY, "Hipocaloric", "confirmed"),
        ]
        assert len(store.reservations) == 2

    def test_audit_log_written(self, persistence, test_db):
        pending, store, engine = _engine(persistence)
        pending.add(TUESDAY)
        run(engine.confirm(NOW))
        row = test_db.execute_one(
            "SELECT owner_id FROM logs WHERE action = 'reservation_confirm'")
        assert row == ("u1",)

    def test_one_reactivation_per_menu_group(self, fake_gateway):
        pending, store, engine = _engine(fake_gateway)
        pending.add(TUESDAY, MenuType.NORMAL)
        pending.add(WEDNESDAY, MenuType.NORMAL)
        pending.add(date(2025, 6, 12), MenuType.HIPOCALORIC)
        fake_gateway.calls.clear()

        run(engine.confirm(NOW))

        assert fake_gateway.calls == [
            "update_reservation_status",
            "update_reservation_status",
            "insert_reservations",
            "select_reservations",
        ]


class TestConfirmFailures:
    """Nothing is lost when confirmation cannot complete"""

    def test_empty_pending_is_noop(self, fake_gateway):
        pending, store, engine = _engine(fake_gateway)
        fake_gateway.calls.clear()
        assert run(engine.confirm(NOW)) == 0
        assert fake_gateway.calls == []

    def test_requires_owner(self, fake_gateway):
        pending, store, engine = _engine(fake_gateway, owner_id=None)
        pending.add(TUESDAY)
        with pytest.raises(SessionRequiredError):
            run(engine.confirm(NOW))
        assert len(pending) == 1

    def test_locked_day_rejected_before_any_write(self, fake_gateway):
        pending, store, engine = _engine(fake_gateway)
        pending.add(date(2025, 6, 2))
        pending.add(TUESDAY)
        fake_gateway.calls.clear()

        with pytest.raises(ValidationError) as exc_info:
            run(engine.confirm(NOW))

        assert exc_info.value.details == {
            "dates": {"2025-06-02": "No es posible reservar con menos de 48 horas de anticipación"}
        }
        assert fake_gateway.calls == []
        assert len(pending) == 2

    def test_weekend_day_rejected(self, fake_gateway):
        pending, store, engine = _engine(fake_gateway)
        pending.add(date(2025, 6, 14))
        with pytest.raises(ValidationError):
            run(engine.confirm(NOW))

    def test_failed_refetch_keeps_pending(self, fake_gateway):
        pending, store, engine = _engine(fake_gateway)
        pending.add(TUESDAY)
        fake_gateway.select_error = PersistenceError("timeout")

        with pytest.raises(PersistenceError):
            run(engine.confirm(NOW))

        assert pending.contains(TUESDAY)
        assert len(fake_gateway.rows) == 1

    def test_retry_after_failure_does_not_duplicate(self, fake_gateway):
        pending, store, engine = _engine(fake_gateway)
        pending.add(TUESDAY)
        fake_gateway.select_error = PersistenceError("timeout")
        with pytest.raises(PersistenceError):
            run(engine.confirm(NOW))

        fake_gateway.select_error = None
        assert run(engine.confirm(NOW)) == 1
        assert len(fake_gateway.rows) == 1
        assert len(pending) == 0


def test_group_by_menu():
    pending = PendingSelectionStore()
    pending.add(TUESDAY, MenuType.NORMAL)
    pending.add(WEDNESDAY, MenuType.HIPOCALORIC)
    groups = group_by_menu(pending.selections)
    assert groups == {MenuType.NORMAL: [TUESDAY], MenuType.HIPOCALORIC: [WEDNESDAY]}


class TestScenarios:
    """End-to-end confirmation scenarios"""

    def test_two_new_days(self, persistence):
        pending, store, engine = _engine(persistence)
        pending.add(TUESDAY, MenuType.NORMAL)
        pending.add(date(2025, 6, 12), MenuType.HIPOCALORIC)

        run(engine.confirm(NOW))

        assert [(r.ymd, r.menu_type, r.status) for r in store.reservations] == [
            ("2025-06-10", MenuType.NORMAL, ReservationStatus.CONFIRMED),
            ("2025-06-12", MenuType.HIPOCALORIC, ReservationStatus.CONFIRMED),
        ]
        assert len(pending) == 0

    def test_cancelled_normal_becomes_confirmed_hipocaloric(self, persistence, test_db):
        run(persistence.insert_reservations([
            NewReservation(owner_id="u1", date=TUESDAY, menu_type=MenuType.NORMAL,
                           status=ReservationStatus.CANCELLED)
        ]))
        pending, store, engine = _engine(persistence)
        pending.add(TUESDAY, MenuType.HIPOCALORIC)

        run(engine.confirm(NOW))

        assert _rows(test_db) == [(TUESDAY, "Hipocaloric", "confirmed")]
