"""The one-time side effect of a final approval.

``finalize`` is called from exactly two places in the resolver: the last
approval of a chain, and the creation of a request whose chain is empty.
The state machine only reaches ``Approved`` once, so no idempotency key is
needed here.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ..core.enums import AttendanceStatus, LeaveKind
from ..core.exceptions import InsufficientBalanceError
from ..employees.model import Employee
from .model import ApprovalRequest, AttendancePayload, LeavePayload


@dataclass(frozen=True)
class BalanceDeduction:
    employee_id: str
    leave_kind: LeaveKind
    days: int


def ensure_sufficient_balance(employee: Employee, leave_kind: LeaveKind, days: int) -> None:
    if not leave_kind.is_balance_bearing:
        return
    available = employee.balance_for(leave_kind)
    if int(days) > available:
        raise InsufficientBalanceError(
            f"Insufficient {leave_kind.value} leave balance: requested {int(days)}, available {available}"
        )


def finalize(request: ApprovalRequest) -> Tuple[ApprovalRequest, Optional[BalanceDeduction]]:
    payload = request.payload

    if isinstance(payload, LeavePayload):
        if not payload.leave_kind.is_balance_bearing:
            return request, None
        return request, BalanceDeduction(
            employee_id=request.subject_employee_id,
            leave_kind=payload.leave_kind,
            days=int(payload.day_count),
        )

    if isinstance(payload, AttendancePayload):
        return replace(request, payload=replace(payload, attendance_status=AttendanceStatus.PRESENT)), None

    raise TypeError(f"Unsupported request payload: {type(payload)!r}")
