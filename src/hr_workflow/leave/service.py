from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Dict, List, Optional

from ..common.datetime_utils import inclusive_days, now_local
from ..common.validators import require_non_empty
from ..core.enums import LeaveKind, RequestKind
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..requests import resolver
from ..requests.guard import SubmissionGuard
from ..requests.model import ApprovalRequest, LeavePayload
from ..requests.repository import RequestRepository

logger = logging.getLogger(__name__)


class LeaveService:
    def __init__(
        self,
        requests: RequestRepository,
        employees: EmployeeRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._requests = requests
        self._employees = employees
        self._guard = SubmissionGuard(requests)
        self._clock = clock

    def _get_employee(self, employee_id: str) -> Employee:
        employee = self._employees.get_by_id(str(employee_id))
        if not employee or not employee.is_active:
            raise NotFoundError("Employee not found")
        return employee

    @staticmethod
    def parse_kind(value: str) -> LeaveKind:
        v = str(value or "").strip()
        for kind in LeaveKind:
            if kind.value.lower() == v.lower():
                return kind
        raise ValidationError(f"Unknown leave type: {value!r}")

    def submit_leave(
        self,
        employee_id: str,
        *,
        kind: LeaveKind,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> ApprovalRequest:
        """Apply for leave.

        Balance is checked here, before any approver sees the request, and
        deducted only when the last approver approves (or right away when the
        employee has no approvers).
        """

        if end_date < start_date:
            raise ValidationError("End date must be on or after start date")
        reason = require_non_empty(reason, "Reason")
        employee = self._get_employee(employee_id)
        days = inclusive_days(start_date, end_date)

        self._guard.ensure_leave_allowed(employee, kind, days)

        now = self._clock()
        transition = resolver.open_request(
            subject_employee_id=employee.employee_id,
            approval_hierarchy=employee.approval_hierarchy,
            payload=LeavePayload(
                leave_kind=kind,
                start_date=start_date,
                end_date=end_date,
                day_count=days,
                reason=reason,
            ),
            submitted_at=now,
        )
        request_id = self._requests.create_request(transition.request, deduction=transition.deduction)
        logger.info(
            "Leave %s for %s: %s %d day(s) -> %s (approver=%s)",
            request_id, employee.employee_id, kind.value, days, transition.request.status.value,
            transition.request.current_approver,
        )
        return self._requests.get_request(request_id) or replace(transition.request, request_id=request_id)

    def pending_leave(self, employee_id: str) -> Optional[ApprovalRequest]:
        employee = self._get_employee(employee_id)
        return self._requests.find_pending_leave(employee.employee_id)

    def has_pending_leave(self, employee_id: str) -> bool:
        return self.pending_leave(employee_id) is not None

    def history(self, employee_id: str, *, limit: int = 200) -> List[ApprovalRequest]:
        employee = self._get_employee(employee_id)
        rows = self._requests.list_for_employee(employee.employee_id, kind=RequestKind.LEAVE, limit=limit)
        return sorted(rows, key=lambda r: r.submitted_at, reverse=True)

    def balance(self, employee_id: str) -> Dict[LeaveKind, int]:
        employee = self._get_employee(employee_id)
        return {k: employee.balance_for(k) for k in LeaveKind if k.is_balance_bearing}
