"""
DuckDB persistence gateway
Stores reservations and profiles in the local DuckDB database

Behaviour:
- blocking DuckDB calls run in a worker thread under the manager lock
- unique index violations surface as DuplicateKeyError
- every other DuckDB failure surfaces as PersistenceError
- batch inserts are atomic: one duplicate rejects the whole batch
"""

import asyncio
import json
import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence, Tuple

import duckdb

from ..core.database import DatabaseManager, db_manager
from ..core.exceptions import DuplicateKeyError, PersistenceError
from ..models import (
    MenuType,
    NewReservation,
    Profile,
    Reservation,
    ReservationFilter,
    ReservationStatus,
)

logger = logging.getLogger(__name__)

RESERVATION_COLUMNS = "id, owner_id, date, menu_type, status, created_at"
PROFILE_COLUMNS = "owner_id, email, full_name, employee_id, department, role, created_at"


def _build_where(filter: ReservationFilter) -> Tuple[str, list]:
    """Translate a ReservationFilter into a WHERE clause and parameters"""
    clauses = ["owner_id = ?"]
    params: list = [filter.owner_id]

    if filter.ids is not None:
        if not filter.ids:
            return "FALSE", []
        clauses.append(f"id IN ({', '.join('?' for _ in filter.ids)})")
        params.extend(filter.ids)

    if filter.dates is not None:
        if not filter.dates:
            return "FALSE", []
        clauses.append(f"date IN ({', '.join('?' for _ in filter.dates)})")
        params.extend(filter.dates)

    if filter.statuses is not None:
        if not filter.statuses:
            return "FALSE", []
        clauses.append(f"status IN ({', '.join('?' for _ in filter.statuses)})")
        params.extend(ReservationStatus(s).value for s in filter.statuses)

    if filter.date_from is not None:
        clauses.append("date >= ?")
        params.append(filter.date_from)

    if filter.date_to is not None:
        clauses.append("date <= ?")
        params.append(filter.date_to)

    return " AND ".join(clauses), params


class DuckDBPersistenceGateway:
    """PersistenceGateway backed by DuckDB"""

    def __init__(self, db: DatabaseManager = None):
        self.db = db or db_manager

    async def _run(self, fn, *args):
        return await asyncio.to_thread(self._guarded, fn, *args)

    def _guarded(self, fn, *args):
        with self.db.lock:
            try:
                return fn(self.db.get_connection(), *args)
            except duckdb.ConstraintException as e:
                if "duplicate key" in str(e).lower():
                    raise DuplicateKeyError(str(e))
                raise PersistenceError(f"Constraint violated: {e}", "CONSTRAINT_VIOLATION")
            except duckdb.Error as e:
                raise PersistenceError(f"Database operation failed: {e}")

    # Reservations

    async def select_reservations(self, owner_id: str) -> List[Reservation]:
        rows = await self._run(self._select_reservations, owner_id)
        return [
            Reservation(
                id=row[0],
                owner_id=row[1],
                date=row[2],
                menu_type=row[3],
                status=row[4],
                created_at=row[5],
            )
            for row in rows
        ]

    def _select_reservations(self, con, owner_id: str) -> list:
        return con.execute(
            f"SELECT {RESERVATION_COLUMNS} FROM reservations WHERE owner_id = ? ORDER BY date ASC",
            [owner_id],
        ).fetchall()

    async def insert_reservations(self, rows: Sequence[NewReservation]) -> None:
        if not rows:
            return
        await self._run(self._insert_reservations, list(rows))

    def _insert_reservations(self, _con, rows: List[NewReservation]) -> None:
        # All or nothing; a duplicate day rolls back the whole batch
        with self.db.transaction() as tx:
            for row in rows:
                tx.execute(
                    "INSERT INTO reservations(id, owner_id, date, menu_type, status) VALUES (?,?,?,?,?)",
                    [
                        str(uuid.uuid4()),
                        row.owner_id,
                        row.date,
                        MenuType(row.menu_type).value,
                        ReservationStatus(row.status).value,
                    ],
                )

    async def update_reservation_status(self, filter: ReservationFilter,
                                        new_status: ReservationStatus,
                                        menu_type: Optional[MenuType] = None) -> int:
        assignments = {"status": ReservationStatus(new_status).value}
        if menu_type is not None:
            assignments["menu_type"] = MenuType(menu_type).value
        return await self._run(self._update, filter, assignments)

    async def update_reservation_menu(self, filter: ReservationFilter,
                                      new_menu_type: MenuType) -> int:
        return await self._run(
            self._update, filter, {"menu_type": MenuType(new_menu_type).value})

    def _update(self, con, filter: ReservationFilter, assignments: Dict[str, Any]) -> int:
        where, params = _build_where(filter)
        if where == "FALSE":
            return 0
        set_clause = ", ".join(f"{column} = ?" for column in assignments)
        matched = con.execute(
            f"SELECT COUNT(*) FROM reservations WHERE {where}", params
        ).fetchone()[0]
        if matched:
            con.execute(
                f"UPDATE reservations SET {set_clause} WHERE {where}",
                list(assignments.values()) + params,
            )
        return matched

    # Profiles

    async def upsert_profile(self, row: Profile) -> None:
        await self._run(self._upsert_profile, row)

    def _upsert_profile(self, con, row: Profile) -> None:
        con.execute(
            """
            INSERT INTO profiles(owner_id, email, full_name, employee_id, department, role)
            VALUES (?,?,?,?,?,?)
            ON CONFLICT (owner_id) DO UPDATE SET
              email = excluded.email,
              full_name = excluded.full_name,
              employee_id = excluded.employee_id,
              department = excluded.department,
              role = excluded.role
            """,
            [row.owner_id, row.email, row.full_name, row.employee_id,
             row.department, row.role],
        )

    async def get_profile(self, owner_id: str) -> Optional[Profile]:
        row = await self._run(self._get_profile, owner_id)
        if not row:
            return None
        return Profile(
            owner_id=row[0],
            email=row[1],
            full_name=row[2],
            employee_id=row[3],
            department=row[4],
            role=row[5],
            created_at=row[6],
        )

    def _get_profile(self, con, owner_id: str) -> Optional[tuple]:
        return con.execute(
            f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE owner_id = ?", [owner_id]
        ).fetchone()

    # Audit log

    async def log_action(self, owner_id: Optional[str], action: str,
                         detail: Dict[str, Any]) -> None:
        await self._run(self._log_action, owner_id, action, detail)

    def _log_action(self, con, owner_id: Optional[str], action: str,
                    detail: Dict[str, Any]) -> None:
        con.execute(
            "INSERT INTO logs(owner_id, action, detail_json) VALUES (?,?,?)",
            [owner_id, action, json.dumps(detail, default=str)],
        )
