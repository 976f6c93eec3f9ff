"""Approval chain state machine.

States are ``Pending(current_approver)``, ``Approved`` and ``Rejected``.
Everything here is pure: functions take a request and return the next one
(plus the ledger effect to commit with it). Persisting the result, and
refusing it when another writer got there first, is the repository's job.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ApprovalStatus, AttendanceStatus, Decision
from ..core.exceptions import AlreadyTerminalError, UnauthorizedApproverError
from . import ledger
from .ledger import BalanceDeduction
from .model import ApprovalLogEntry, ApprovalRequest, AttendancePayload, RequestPayload


@dataclass(frozen=True)
class Transition:
    request: ApprovalRequest
    deduction: Optional[BalanceDeduction] = None

    @property
    def finalized(self) -> bool:
        return self.request.status == ApprovalStatus.APPROVED


def open_request(
    *,
    subject_employee_id: str,
    approval_hierarchy: Sequence[str],
    payload: RequestPayload,
    submitted_at: datetime,
) -> Transition:
    """Initial state: Pending at the first approver, or Approved (and finalized) if nobody has to approve."""

    chain = tuple(approval_hierarchy)
    request = ApprovalRequest(
        request_id=None,
        subject_employee_id=subject_employee_id,
        submitted_at=submitted_at,
        approval_hierarchy=chain,
        status=ApprovalStatus.PENDING if chain else ApprovalStatus.APPROVED,
        current_approver=chain[0] if chain else None,
        payload=payload,
    )
    if chain:
        return Transition(request=request)

    finalized, deduction = ledger.finalize(request)
    return Transition(request=finalized, deduction=deduction)


def current_step(request: ApprovalRequest) -> int:
    """Index in the snapshot of the approver whose turn it is.

    Every approval appends exactly one log entry and a rejection ends the
    chain, so the log length is the position.
    """

    return len(request.approval_log)


def decide(
    request: ApprovalRequest,
    acting_approver_id: str,
    decision: Decision,
    comments: Optional[str],
    *,
    now: datetime,
) -> Transition:
    if request.status != ApprovalStatus.PENDING:
        raise AlreadyTerminalError(f"Request is already {request.status.value}")
    if not acting_approver_id or acting_approver_id != request.current_approver:
        raise UnauthorizedApproverError("You are not the authorized approver for this request")

    entry = ApprovalLogEntry(
        approver_id=acting_approver_id,
        decision=decision,
        comments=comments,
        timestamp=now,
    )
    logged = replace(request, approval_log=request.approval_log + (entry,))

    if decision == Decision.REJECTED:
        payload = logged.payload
        if isinstance(payload, AttendancePayload):
            payload = replace(payload, attendance_status=AttendanceStatus.ABSENT)
        return Transition(
            request=replace(logged, status=ApprovalStatus.REJECTED, current_approver=None, payload=payload),
        )

    next_step = current_step(request) + 1
    chain = request.approval_hierarchy
    if next_step < len(chain):
        return Transition(request=replace(logged, current_approver=chain[next_step]))

    approved = replace(logged, status=ApprovalStatus.APPROVED, current_approver=None)
    finalized, deduction = ledger.finalize(approved)
    return Transition(request=finalized, deduction=deduction)
