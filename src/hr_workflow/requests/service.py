from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_non_empty
from ..core.constants import STALE_STATE_RETRIES
from ..core.enums import ApprovalStatus, Decision, RequestKind
from ..core.exceptions import NotFoundError, StaleStateError, ValidationError
from ..employees.repository import EmployeeRepository
from . import resolver
from .model import ApprovalRequest, AttendancePayload, LeavePayload, RequestSummary
from .repository import RequestRepository

logger = logging.getLogger(__name__)


def summarize(request: ApprovalRequest, *, name: Optional[str] = None, designation: Optional[str] = None) -> RequestSummary:
    summary = dict(
        request_id=int(request.request_id),
        kind=request.kind,
        subject_employee_id=request.subject_employee_id,
        subject_name=name,
        subject_designation=designation,
        status=request.status,
        current_approver=request.current_approver,
        submitted_at=request.submitted_at,
    )
    p = request.payload
    if isinstance(p, AttendancePayload):
        summary.update(
            work_date=p.work_date,
            is_late=p.is_late,
            is_out_of_range=p.is_out_of_range,
            justification=p.justification,
        )
    elif isinstance(p, LeavePayload):
        summary.update(
            leave_kind=p.leave_kind,
            start_date=p.start_date,
            end_date=p.end_date,
            day_count=p.day_count,
            reason=p.reason,
        )
    return RequestSummary(**summary)


class ApprovalService:
    """Use case: approvers act on requests and browse their inbox/history."""

    def __init__(
        self,
        requests: RequestRepository,
        employees: EmployeeRepository,
        *,
        clock: Callable = now_local,
        stale_retries: int = STALE_STATE_RETRIES,
    ):
        self._requests = requests
        self._employees = employees
        self._clock = clock
        self._stale_retries = int(stale_retries)

    def get_request(self, request_id: int) -> ApprovalRequest:
        req = self._requests.get_request(int(request_id))
        if not req:
            raise NotFoundError("Request not found")
        return req

    @staticmethod
    def parse_decision(value: str) -> Decision:
        try:
            return Decision(str(value or "").strip().capitalize())
        except ValueError:
            raise ValidationError("Invalid action: expected Approved or Rejected")

    def decide(
        self,
        *,
        request_id: int,
        approver_id: str,
        decision: Decision,
        comments: Optional[str] = None,
        expected_kind: Optional[RequestKind] = None,
    ) -> ApprovalRequest:
        """Record one approver's decision and move the request along its chain.

        A lost compare-and-swap is retried once against a fresh copy; the
        retry re-checks authorization, so a racing approver who already
        moved the request on turns the retry into an authorization error.
        """

        approver_id = require_non_empty(str(approver_id or ""), "Approver id")
        comments = optional_text(comments)

        attempts = self._stale_retries + 1
        for attempt in range(attempts):
            req = self.get_request(request_id)
            if expected_kind is not None and req.kind != expected_kind:
                raise NotFoundError(f"{expected_kind.value} request not found")

            transition = resolver.decide(req, approver_id, decision, comments, now=self._clock())
            ok = self._requests.update_request(
                transition.request,
                expected_version=req.version,
                deduction=transition.deduction,
            )
            if ok:
                updated = self._requests.get_request(int(request_id)) or transition.request
                self._log_transition(updated, approver_id, decision)
                return updated

            logger.warning(
                "Stale write on request %s by %s (attempt %d/%d)", request_id, approver_id, attempt + 1, attempts
            )

        raise StaleStateError("Request was modified concurrently; refetch and retry")

    @staticmethod
    def _log_transition(req: ApprovalRequest, approver_id: str, decision: Decision) -> None:
        if req.status == ApprovalStatus.PENDING:
            logger.info(
                "%s request %s %s by %s; next approver %s",
                req.kind.value, req.request_id, decision.value.lower(), approver_id, req.current_approver,
            )
        else:
            logger.info(
                "%s request %s finalized as %s by %s", req.kind.value, req.request_id, req.status.value, approver_id
            )

    def _summaries(self, requests: Sequence[ApprovalRequest]) -> List[RequestSummary]:
        people = self._employees.get_many({r.subject_employee_id for r in requests})
        out: List[RequestSummary] = []
        for r in requests:
            emp = people.get(r.subject_employee_id)
            out.append(
                summarize(
                    r,
                    name=emp.full_name if emp else None,
                    designation=emp.designation if emp else None,
                )
            )
        return out

    def list_pending_for(self, approver_id: str, *, kind: Optional[RequestKind] = None) -> List[RequestSummary]:
        return self._summaries(self._requests.find_pending_for_approver(str(approver_id), kind=kind))

    def list_history_for(
        self,
        approver_id: str,
        status: Optional[ApprovalStatus] = None,
        *,
        kind: Optional[RequestKind] = None,
        limit: int = 200,
    ) -> List[RequestSummary]:
        rows = self._requests.find_history_for_approver(str(approver_id), status=status, kind=kind, limit=limit)
        return self._summaries(rows)
