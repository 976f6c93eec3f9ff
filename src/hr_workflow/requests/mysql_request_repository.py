from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from ..core.enums import ApprovalStatus, AttendanceStatus, Decision, LeaveKind, RequestKind
from ..core.exceptions import DuplicatePendingError, DuplicateSubmissionError, InsufficientBalanceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, is_duplicate_key, load_json
from ..policy.model import GeoPoint
from .ledger import BalanceDeduction
from .model import ApprovalLogEntry, ApprovalRequest, AttendancePayload, LeavePayload, RequestPayload
from .repository import RequestRepository

_REQUEST_COLUMNS = """
    r.request_id, r.employee_id, r.kind, r.status, r.current_approver,
    r.approval_hierarchy, r.payload, r.submitted_at, r.version
"""


def _point_to_dict(p: Optional[GeoPoint]) -> Optional[dict]:
    if p is None:
        return None
    return {"lat": p.latitude, "lng": p.longitude, "address": p.address}


def _point_from_dict(d: Optional[dict]) -> Optional[GeoPoint]:
    if not d:
        return None
    return GeoPoint(latitude=float(d["lat"]), longitude=float(d["lng"]), address=d.get("address"))


def _dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _db_dt(value: datetime) -> datetime:
    # DATETIME columns hold naive server-local time.
    return value.astimezone().replace(tzinfo=None) if value.tzinfo else value


def _payload_to_dict(payload: RequestPayload) -> Dict[str, Any]:
    if isinstance(payload, AttendancePayload):
        return {
            "work_date": payload.work_date.isoformat(),
            "check_in_time": payload.check_in_time.isoformat(),
            "location": _point_to_dict(payload.location),
            "is_late": payload.is_late,
            "is_out_of_range": payload.is_out_of_range,
            "distance_meters": payload.distance_meters,
            "justification": payload.justification,
            "attendance_status": payload.attendance_status.value,
            "check_out_time": payload.check_out_time.isoformat() if payload.check_out_time else None,
            "check_out_location": _point_to_dict(payload.check_out_location),
            "work_hours": payload.work_hours,
        }
    return {
        "leave_kind": payload.leave_kind.value,
        "start_date": payload.start_date.isoformat(),
        "end_date": payload.end_date.isoformat(),
        "day_count": payload.day_count,
        "reason": payload.reason,
    }


def _payload_from_dict(kind: RequestKind, d: Dict[str, Any]) -> RequestPayload:
    if kind == RequestKind.ATTENDANCE:
        return AttendancePayload(
            work_date=date.fromisoformat(d["work_date"]),
            check_in_time=datetime.fromisoformat(d["check_in_time"]),
            location=_point_from_dict(d.get("location")),
            is_late=bool(d.get("is_late")),
            is_out_of_range=bool(d.get("is_out_of_range")),
            distance_meters=d.get("distance_meters"),
            justification=d.get("justification"),
            attendance_status=AttendanceStatus(d["attendance_status"]),
            check_out_time=_dt(d.get("check_out_time")),
            check_out_location=_point_from_dict(d.get("check_out_location")),
            work_hours=float(d.get("work_hours") or 0.0),
        )
    return LeavePayload(
        leave_kind=LeaveKind(d["leave_kind"]),
        start_date=date.fromisoformat(d["start_date"]),
        end_date=date.fromisoformat(d["end_date"]),
        day_count=int(d["day_count"]),
        reason=d["reason"],
    )


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- row mapping --------
    @staticmethod
    def _load_logs(cur, request_ids: Sequence[int]) -> Dict[int, List[ApprovalLogEntry]]:
        if not request_ids:
            return {}
        placeholders = ",".join(["%s"] * len(request_ids))
        cur.execute(
            f"""
            SELECT request_id, approver_id, decision, comments, decided_at
            FROM approval_logs
            WHERE request_id IN ({placeholders})
            ORDER BY request_id, position
            """,
            tuple(request_ids),
        )
        logs: Dict[int, List[ApprovalLogEntry]] = {}
        for r in fetchall(cur):
            logs.setdefault(int(r["request_id"]), []).append(
                ApprovalLogEntry(
                    approver_id=r["approver_id"],
                    decision=Decision(r["decision"]),
                    comments=r.get("comments"),
                    timestamp=r["decided_at"],
                )
            )
        return logs

    def _hydrate(self, cur, rows: List[Dict[str, Any]]) -> List[ApprovalRequest]:
        logs = self._load_logs(cur, [int(r["request_id"]) for r in rows])
        out: List[ApprovalRequest] = []
        for r in rows:
            kind = RequestKind(r["kind"])
            rid = int(r["request_id"])
            out.append(
                ApprovalRequest(
                    request_id=rid,
                    subject_employee_id=r["employee_id"],
                    submitted_at=r["submitted_at"],
                    approval_hierarchy=tuple(load_json(r["approval_hierarchy"], [])),
                    status=ApprovalStatus(r["status"]),
                    current_approver=r.get("current_approver"),
                    payload=_payload_from_dict(kind, load_json(r["payload"], {})),
                    approval_log=tuple(logs.get(rid, [])),
                    version=int(r["version"]),
                )
            )
        return out

    def _select(self, where: str, params: Sequence[Any], *, order: str = "r.submitted_at DESC", limit: Optional[int] = None):
        sql = f"SELECT {_REQUEST_COLUMNS} FROM approval_requests r WHERE {where} ORDER BY {order}"
        if limit is not None:
            sql += " LIMIT %s"
            params = list(params) + [int(limit)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return self._hydrate(cur, fetchall(cur))

    # -------- writes --------
    @staticmethod
    def _append_logs(cur, request_id: int, entries: Sequence[ApprovalLogEntry]) -> None:
        cur.execute("SELECT COUNT(*) AS n FROM approval_logs WHERE request_id=%s", (int(request_id),))
        stored = int((fetchone(cur) or {"n": 0})["n"])
        for position, e in enumerate(entries[stored:], start=stored):
            cur.execute(
                """
                INSERT INTO approval_logs(request_id, position, approver_id, decision, comments, decided_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(request_id), position, e.approver_id, e.decision.value, e.comments, _db_dt(e.timestamp)),
            )

    @staticmethod
    def _apply_deduction(cur, deduction: BalanceDeduction) -> None:
        cur.execute(
            """
            UPDATE leave_balances
            SET days = days - %s
            WHERE employee_id=%s AND leave_kind=%s AND days >= %s
            """,
            (int(deduction.days), deduction.employee_id, deduction.leave_kind.value, int(deduction.days)),
        )
        if cur.rowcount <= 0:
            raise InsufficientBalanceError(f"Insufficient {deduction.leave_kind.value} leave balance")

    @staticmethod
    def _lock_leave_slot(cur, employee_id: str) -> None:
        # Row lock on the employee serializes concurrent leave submissions.
        cur.execute("SELECT employee_id FROM employees WHERE employee_id=%s FOR UPDATE", (employee_id,))
        fetchone(cur)
        cur.execute(
            "SELECT request_id FROM approval_requests WHERE employee_id=%s AND kind=%s AND status=%s LIMIT 1",
            (employee_id, RequestKind.LEAVE.value, ApprovalStatus.PENDING.value),
        )
        if fetchone(cur):
            raise DuplicatePendingError("A leave request is already awaiting approval")

    def create_request(self, request: ApprovalRequest, *, deduction: Optional[BalanceDeduction] = None) -> int:
        payload = request.payload
        work_date = payload.work_date if isinstance(payload, AttendancePayload) else None
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                if isinstance(payload, LeavePayload):
                    self._lock_leave_slot(cur, request.subject_employee_id)
                cur.execute(
                    """
                    INSERT INTO approval_requests(
                        employee_id, kind, status, current_approver,
                        approval_hierarchy, payload, work_date, submitted_at, version
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,0)
                    """,
                    (
                        request.subject_employee_id,
                        request.kind.value,
                        request.status.value,
                        request.current_approver,
                        dump_json(list(request.approval_hierarchy)),
                        dump_json(_payload_to_dict(payload)),
                        work_date,
                        _db_dt(request.submitted_at),
                    ),
                )
                request_id = int(cur.lastrowid)
                self._append_logs(cur, request_id, request.approval_log)
                if deduction is not None:
                    self._apply_deduction(cur, deduction)
                return request_id
        except Exception as e:
            if is_duplicate_key(e):
                raise DuplicateSubmissionError("Already checked in for today") from e
            raise

    def update_request(
        self,
        request: ApprovalRequest,
        *,
        expected_version: int,
        deduction: Optional[BalanceDeduction] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE approval_requests
                SET status=%s, current_approver=%s, payload=%s, version=version+1
                WHERE request_id=%s AND version=%s
                """,
                (
                    request.status.value,
                    request.current_approver,
                    dump_json(_payload_to_dict(request.payload)),
                    int(request.request_id),
                    int(expected_version),
                ),
            )
            if cur.rowcount <= 0:
                return False
            self._append_logs(cur, int(request.request_id), request.approval_log)
            if deduction is not None:
                self._apply_deduction(cur, deduction)
            return True

    # -------- reads --------
    def get_request(self, request_id: int) -> Optional[ApprovalRequest]:
        found = self._select("r.request_id=%s", [int(request_id)])
        return found[0] if found else None

    def find_attendance_for_day(self, employee_id: str, work_date: date) -> Optional[ApprovalRequest]:
        found = self._select(
            "r.employee_id=%s AND r.kind=%s AND r.work_date=%s",
            [employee_id, RequestKind.ATTENDANCE.value, work_date],
        )
        return found[0] if found else None

    def find_pending_leave(self, employee_id: str) -> Optional[ApprovalRequest]:
        found = self._select(
            "r.employee_id=%s AND r.kind=%s AND r.status=%s",
            [employee_id, RequestKind.LEAVE.value, ApprovalStatus.PENDING.value],
            limit=1,
        )
        return found[0] if found else None

    def find_pending_for_approver(
        self,
        approver_id: str,
        *,
        kind: Optional[RequestKind] = None,
    ) -> Sequence[ApprovalRequest]:
        clauses = ["r.current_approver=%s", "r.status=%s"]
        params: list[object] = [approver_id, ApprovalStatus.PENDING.value]
        if kind is not None:
            clauses.append("r.kind=%s")
            params.append(kind.value)
        return self._select(" AND ".join(clauses), params, order="r.submitted_at ASC")

    def find_history_for_approver(
        self,
        approver_id: str,
        *,
        status: Optional[ApprovalStatus] = None,
        kind: Optional[RequestKind] = None,
        limit: int = 200,
    ) -> Sequence[ApprovalRequest]:
        clauses = ["r.request_id IN (SELECT l.request_id FROM approval_logs l WHERE l.approver_id=%s)"]
        params: list[object] = [approver_id]
        if status is not None:
            clauses.append("r.status=%s")
            params.append(status.value)
        if kind is not None:
            clauses.append("r.kind=%s")
            params.append(kind.value)
        return self._select(" AND ".join(clauses), params, order="r.updated_at DESC", limit=limit)

    def list_for_employee(
        self,
        employee_id: str,
        *,
        kind: Optional[RequestKind] = None,
        limit: int = 200,
    ) -> Sequence[ApprovalRequest]:
        clauses = ["r.employee_id=%s"]
        params: list[object] = [employee_id]
        if kind is not None:
            clauses.append("r.kind=%s")
            params.append(kind.value)
        return self._select(" AND ".join(clauses), params, limit=limit)

    def list_attendance_between(self, start_date: date, end_date: date) -> Sequence[ApprovalRequest]:
        return self._select(
            "r.kind=%s AND r.work_date BETWEEN %s AND %s",
            [RequestKind.ATTENDANCE.value, start_date, end_date],
            order="r.work_date ASC, r.employee_id ASC",
        )
