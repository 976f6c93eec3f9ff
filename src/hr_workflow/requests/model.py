from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import ClassVar, Optional, Tuple, Union

from ..core.enums import ApprovalStatus, AttendanceStatus, Decision, LeaveKind, RequestKind
from ..policy.model import GeoPoint


@dataclass(frozen=True)
class ApprovalLogEntry:
    approver_id: str
    decision: Decision
    comments: Optional[str]
    timestamp: datetime


@dataclass(frozen=True)
class AttendancePayload:
    """Check-in for one calendar day, with the validation flags kept for audit."""

    kind: ClassVar[RequestKind] = RequestKind.ATTENDANCE

    work_date: date
    check_in_time: datetime
    location: Optional[GeoPoint]
    is_late: bool
    is_out_of_range: bool
    distance_meters: Optional[float]
    justification: Optional[str]
    attendance_status: AttendanceStatus
    check_out_time: Optional[datetime] = None
    check_out_location: Optional[GeoPoint] = None
    work_hours: float = 0.0


@dataclass(frozen=True)
class LeavePayload:
    kind: ClassVar[RequestKind] = RequestKind.LEAVE

    leave_kind: LeaveKind
    start_date: date
    end_date: date
    day_count: int
    reason: str


RequestPayload = Union[AttendancePayload, LeavePayload]


@dataclass(frozen=True)
class ApprovalRequest:
    """Shared envelope of every request that walks an approval chain.

    ``approval_hierarchy`` is a snapshot taken at submission; editing the
    employee's chain later never reroutes a request in flight.
    ``version`` is bumped by the repository on every write.
    """

    request_id: Optional[int]
    subject_employee_id: str
    submitted_at: datetime
    approval_hierarchy: Tuple[str, ...]
    status: ApprovalStatus
    current_approver: Optional[str]
    payload: RequestPayload
    approval_log: Tuple[ApprovalLogEntry, ...] = ()
    version: int = 0

    @property
    def kind(self) -> RequestKind:
        return self.payload.kind

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


@dataclass(frozen=True)
class RequestSummary:
    """Read-model for approver inboxes and history lists."""

    request_id: int
    kind: RequestKind
    subject_employee_id: str
    subject_name: Optional[str]
    subject_designation: Optional[str]
    status: ApprovalStatus
    current_approver: Optional[str]
    submitted_at: datetime
    # Attendance
    work_date: Optional[date] = None
    is_late: Optional[bool] = None
    is_out_of_range: Optional[bool] = None
    justification: Optional[str] = None
    # Leave
    leave_kind: Optional[LeaveKind] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    day_count: Optional[int] = None
    reason: Optional[str] = None
