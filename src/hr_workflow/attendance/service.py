from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, List, Optional

from ..common.datetime_utils import local_date, month_bounds, now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus, RequestKind
from ..core.exceptions import JustificationRequired, NotFoundError, StaleStateError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..policy import gate, validator
from ..policy.model import GeoPoint, SitePolicyRegistry, Submission, Verdict
from ..requests import resolver
from ..requests.guard import SubmissionGuard
from ..requests.model import ApprovalRequest, AttendancePayload
from ..requests.repository import RequestRepository
from .model import AttendanceReportRow

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        requests: RequestRepository,
        employees: EmployeeRepository,
        policies: SitePolicyRegistry,
        *,
        clock: Callable[[], datetime] = now_local,
        approve_compliant_checkins: bool = False,
    ):
        self._requests = requests
        self._employees = employees
        self._policies = policies
        self._guard = SubmissionGuard(requests)
        self._clock = clock
        self._approve_compliant = bool(approve_compliant_checkins)

    def _get_employee(self, employee_id: str) -> Employee:
        employee = self._employees.get_by_id(str(employee_id))
        if not employee or not employee.is_active:
            raise NotFoundError("Employee not found")
        return employee

    def precheck(
        self,
        employee_id: str,
        *,
        location: Optional[GeoPoint],
        timestamp: Optional[datetime] = None,
    ) -> Verdict:
        """Tell the client up front whether a check-in would need a justification."""

        employee = self._get_employee(employee_id)
        submission = Submission(
            employee_id=employee.employee_id,
            timestamp=timestamp or self._clock(),
            location=location,
        )
        return validator.validate(submission, self._policies.for_site(employee.site))

    def submit_attendance(
        self,
        employee_id: str,
        *,
        location: Optional[GeoPoint],
        justification: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> ApprovalRequest:
        employee = self._get_employee(employee_id)
        now = timestamp or self._clock()
        submission = Submission(
            employee_id=employee.employee_id,
            timestamp=now,
            location=location,
            justification=justification,
        )
        policy = self._policies.for_site(employee.site)
        verdict = validator.validate(submission, policy)

        result = gate.admit(submission, verdict)
        if isinstance(result, gate.Blocked):
            logger.info(
                "Check-in by %s blocked (%s, distance=%s)",
                employee.employee_id, result.reason.value, verdict.distance_meters,
            )
            raise JustificationRequired(result)

        work_date = local_date(now, policy.timezone)
        self._guard.ensure_no_attendance_for_day(employee.employee_id, work_date)

        # On-time, on-site check-ins only go through the chain when configured to.
        routed = not verdict.is_compliant or self._approve_compliant
        chain = employee.approval_hierarchy if routed else ()

        payload = AttendancePayload(
            work_date=work_date,
            check_in_time=now,
            location=location,
            is_late=verdict.is_late,
            is_out_of_range=verdict.is_out_of_range,
            distance_meters=verdict.distance_meters,
            justification=result.justification,
            attendance_status=AttendanceStatus.PENDING,
        )
        transition = resolver.open_request(
            subject_employee_id=employee.employee_id,
            approval_hierarchy=chain,
            payload=payload,
            submitted_at=now,
        )
        request_id = self._requests.create_request(transition.request, deduction=transition.deduction)
        logger.info(
            "Check-in %s for %s on %s: %s (approver=%s)",
            request_id, employee.employee_id, work_date, transition.request.status.value,
            transition.request.current_approver,
        )
        return self._requests.get_request(request_id) or replace(transition.request, request_id=request_id)

    def check_out(
        self,
        employee_id: str,
        *,
        location: Optional[GeoPoint] = None,
        timestamp: Optional[datetime] = None,
    ) -> ApprovalRequest:
        employee = self._get_employee(employee_id)
        now = timestamp or self._clock()
        policy = self._policies.for_site(employee.site)

        record = self._requests.find_attendance_for_day(employee.employee_id, local_date(now, policy.timezone))
        if not record:
            raise ValidationError("No check-in record found for today. Cannot check out.")
        payload = record.payload
        if payload.check_out_time is not None:
            raise ValidationError("Already checked out today.")
        if now < payload.check_in_time:
            raise ValidationError("Check-out time cannot be before check-in time")

        hours = (now - payload.check_in_time).total_seconds() / 3600
        updated = replace(
            record,
            payload=replace(
                payload,
                check_out_time=now,
                check_out_location=location,
                work_hours=round(hours, 2),
            ),
        )
        if not self._requests.update_request(updated, expected_version=record.version):
            raise StaleStateError("Attendance record changed; please retry")

        logger.info("Check-out for %s after %.2fh", employee.employee_id, hours)
        return self._requests.get_request(int(record.request_id)) or updated

    def get_today(self, employee_id: str, *, today: Optional[date] = None) -> Optional[ApprovalRequest]:
        employee = self._get_employee(employee_id)
        if today is None:
            today = local_date(self._clock(), self._policies.for_site(employee.site).timezone)
        return self._requests.find_attendance_for_day(employee.employee_id, today)

    def history(self, employee_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> List[ApprovalRequest]:
        employee = self._get_employee(employee_id)
        rows = self._requests.list_for_employee(employee.employee_id, kind=RequestKind.ATTENDANCE, limit=limit)
        return sorted(rows, key=lambda r: r.payload.work_date, reverse=True)

    def monthly_report(self, *, year: int, month: int) -> List[AttendanceReportRow]:
        try:
            start, end = month_bounds(int(year), int(month))
        except ValueError:
            raise ValidationError("Month and Year are required.")

        records = self._requests.list_attendance_between(start, end)
        people = self._employees.get_many({r.subject_employee_id for r in records})

        out: List[AttendanceReportRow] = []
        for r in records:
            p = r.payload
            emp = people.get(r.subject_employee_id)
            out.append(
                AttendanceReportRow(
                    work_date=p.work_date,
                    employee_id=r.subject_employee_id,
                    full_name=emp.full_name if emp else None,
                    designation=emp.designation if emp else None,
                    site=emp.site if emp else None,
                    check_in_time=p.check_in_time,
                    check_out_time=p.check_out_time,
                    work_hours=p.work_hours,
                    status=p.attendance_status,
                    approval_status=r.status,
                    is_late=p.is_late,
                    is_out_of_range=p.is_out_of_range,
                    justification=p.justification,
                )
            )
        return out
