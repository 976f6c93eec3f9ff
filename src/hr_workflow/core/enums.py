from __future__ import annotations

from enum import Enum


class RequestKind(str, Enum):
    """Kinds of request that go through the approval chain."""

    ATTENDANCE = "Attendance"
    LEAVE = "Leave"


class ApprovalStatus(str, Enum):
    """Approval workflow status of a request."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ApprovalStatus.PENDING


class Decision(str, Enum):
    """A single approver's decision."""

    APPROVED = "Approved"
    REJECTED = "Rejected"


class AttendanceStatus(str, Enum):
    """Display status of an attendance record."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    LEAVE = "Leave"
    PENDING = "Pending"
    REJECTED = "Rejected"


class LeaveKind(str, Enum):
    SICK = "Sick"
    CASUAL = "Casual"
    EARNED = "Earned"
    LWP = "LWP"

    @property
    def is_balance_bearing(self) -> bool:
        """Leave without pay never touches the balance."""
        return self is not LeaveKind.LWP


class BlockReason(str, Enum):
    LATE = "LATE"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    BOTH = "BOTH"
