"""Submission-time checks that keep requests unique and affordable.

The database keeps the final word on the attendance slot (a unique key);
these checks turn the common case into a clean error before anything is
written.
"""

from __future__ import annotations

from datetime import date

from ..core.exceptions import DuplicatePendingError, DuplicateSubmissionError
from ..core.enums import LeaveKind
from ..employees.model import Employee
from .ledger import ensure_sufficient_balance
from .repository import RequestRepository


class SubmissionGuard:
    def __init__(self, requests: RequestRepository):
        self._requests = requests

    def ensure_no_attendance_for_day(self, employee_id: str, work_date: date) -> None:
        if self._requests.find_attendance_for_day(employee_id, work_date):
            raise DuplicateSubmissionError("Already checked in for today")

    def has_pending_leave(self, employee_id: str) -> bool:
        return self._requests.find_pending_leave(employee_id) is not None

    def ensure_no_pending_leave(self, employee_id: str) -> None:
        if self.has_pending_leave(employee_id):
            raise DuplicatePendingError("A leave request is already awaiting approval")

    def ensure_leave_allowed(self, employee: Employee, leave_kind: LeaveKind, days: int) -> None:
        self.ensure_no_pending_leave(employee.employee_id)
        ensure_sufficient_balance(employee, leave_kind, days)
