from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ApprovalStatus, AttendanceStatus


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for the monthly export (one row per check-in)."""

    work_date: date
    employee_id: str
    full_name: Optional[str]
    designation: Optional[str]
    site: Optional[str]
    check_in_time: datetime
    check_out_time: Optional[datetime]
    work_hours: float
    status: AttendanceStatus
    approval_status: ApprovalStatus
    is_late: bool
    is_out_of_range: bool
    justification: Optional[str] = None
