from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import ApprovalStatus, RequestKind
from .ledger import BalanceDeduction
from .model import ApprovalRequest


class RequestRepository(Protocol):
    """Persistence boundary of the approval workflow.

    Every method is one atomic unit of work. ``create_request`` and
    ``update_request`` apply an optional balance deduction in the same
    transaction as the request write and raise ``InsufficientBalanceError``
    (writing nothing) if it would leave the balance negative.
    """

    def create_request(self, request: ApprovalRequest, *, deduction: Optional[BalanceDeduction] = None) -> int:
        """Insert ``request`` and return its id.

        Raises ``DuplicateSubmissionError`` if an attendance record already
        occupies the employee's day, and ``DuplicatePendingError`` if a leave
        request is inserted while another one is still Pending. Both checks
        run inside the insert's transaction.
        """

        raise NotImplementedError

    def get_request(self, request_id: int) -> Optional[ApprovalRequest]:
        raise NotImplementedError

    def update_request(
        self,
        request: ApprovalRequest,
        *,
        expected_version: int,
        deduction: Optional[BalanceDeduction] = None,
    ) -> bool:
        """Compare-and-swap on ``version``.

        Returns False, writing nothing, when the stored version is no longer
        ``expected_version``. New entries at the tail of ``approval_log`` are
        appended; existing ones are never rewritten.
        """

        raise NotImplementedError

    def find_attendance_for_day(self, employee_id: str, work_date: date) -> Optional[ApprovalRequest]:
        raise NotImplementedError

    def find_pending_leave(self, employee_id: str) -> Optional[ApprovalRequest]:
        raise NotImplementedError

    def find_pending_for_approver(
        self,
        approver_id: str,
        *,
        kind: Optional[RequestKind] = None,
    ) -> Sequence[ApprovalRequest]:
        raise NotImplementedError

    def find_history_for_approver(
        self,
        approver_id: str,
        *,
        status: Optional[ApprovalStatus] = None,
        kind: Optional[RequestKind] = None,
        limit: int = 200,
    ) -> Sequence[ApprovalRequest]:
        """Requests this approver has logged a decision on, newest first."""

        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: str,
        *,
        kind: Optional[RequestKind] = None,
        limit: int = 200,
    ) -> Sequence[ApprovalRequest]:
        raise NotImplementedError

    def list_attendance_between(self, start_date: date, end_date: date) -> Sequence[ApprovalRequest]:
        raise NotImplementedError
