from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..core.enums import LeaveKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _load_chains(cur, ids: Sequence[str]) -> Dict[str, List[str]]:
        placeholders = ",".join(["%s"] * len(ids))
        cur.execute(
            f"""
            SELECT employee_id, approver_id
            FROM employee_approvers
            WHERE employee_id IN ({placeholders})
            ORDER BY employee_id, position
            """,
            tuple(ids),
        )
        chains: Dict[str, List[str]] = {}
        for r in fetchall(cur):
            chains.setdefault(r["employee_id"], []).append(r["approver_id"])
        return chains

    @staticmethod
    def _load_balances(cur, ids: Sequence[str]) -> Dict[str, Dict[LeaveKind, int]]:
        placeholders = ",".join(["%s"] * len(ids))
        cur.execute(
            f"""
            SELECT employee_id, leave_kind, days
            FROM leave_balances
            WHERE employee_id IN ({placeholders})
            """,
            tuple(ids),
        )
        balances: Dict[str, Dict[LeaveKind, int]] = {}
        for r in fetchall(cur):
            balances.setdefault(r["employee_id"], {})[LeaveKind(r["leave_kind"])] = int(r["days"])
        return balances

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        found = self.get_many([employee_id])
        return found.get(employee_id)

    def get_many(self, employee_ids: Iterable[str]) -> Mapping[str, Employee]:
        ids = sorted({str(e) for e in employee_ids if e})
        if not ids:
            return {}

        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT employee_id, full_name, site, designation, is_active
                FROM employees
                WHERE employee_id IN ({placeholders})
                """,
                tuple(ids),
            )
            rows = fetchall(cur)
            if not rows:
                return {}
            chains = self._load_chains(cur, ids)
            balances = self._load_balances(cur, ids)

        return {
            r["employee_id"]: Employee(
                employee_id=r["employee_id"],
                full_name=r["full_name"],
                site=r.get("site"),
                designation=r.get("designation"),
                approval_hierarchy=tuple(chains.get(r["employee_id"], [])),
                leave_balance=balances.get(r["employee_id"], {}),
                is_active=bool(r.get("is_active", True)),
            )
            for r in rows
        }

    def set_approval_hierarchy(self, employee_id: str, approver_ids: Sequence[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock serializes edits of the same chain.
            cur.execute("SELECT employee_id FROM employees WHERE employee_id=%s FOR UPDATE", (employee_id,))
            if not fetchone(cur):
                return False
            cur.execute("DELETE FROM employee_approvers WHERE employee_id=%s", (employee_id,))
            for position, approver_id in enumerate(approver_ids):
                cur.execute(
                    """
                    INSERT INTO employee_approvers(employee_id, position, approver_id)
                    VALUES(%s,%s,%s)
                    """,
                    (employee_id, position, approver_id),
                )
            return True
