from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

import pytest

from hr_workflow.container import wire
from hr_workflow.core.enums import ApprovalStatus, LeaveKind, RequestKind
from hr_workflow.core.exceptions import DuplicatePendingError, DuplicateSubmissionError, InsufficientBalanceError
from hr_workflow.employees.model import Employee
from hr_workflow.policy.model import GeoPoint, SitePolicy, SitePolicyRegistry
from hr_workflow.requests.ledger import BalanceDeduction
from hr_workflow.requests.model import ApprovalRequest, AttendancePayload, LeavePayload

HQ = GeoPoint(latitude=23.8103, longitude=90.4125)


class InMemoryEmployees:
    def __init__(self, employees: Iterable[Employee] = ()):
        self.employees: dict[str, Employee] = {e.employee_id: e for e in employees}

    def add(self, employee: Employee) -> Employee:
        self.employees[employee.employee_id] = employee
        return employee

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        return self.employees.get(employee_id)

    def get_many(self, employee_ids):
        return {i: self.employees[i] for i in employee_ids if i in self.employees}

    def set_approval_hierarchy(self, employee_id: str, approver_ids: Sequence[str]) -> bool:
        emp = self.employees.get(employee_id)
        if not emp:
            return False
        self.employees[employee_id] = replace(emp, approval_hierarchy=tuple(approver_ids))
        return True


class InMemoryRequests:
    """Keeps the repository contract: version CAS and deductions in one step."""

    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self._lock = threading.Lock()
        self._rows: dict[int, ApprovalRequest] = {}
        self._updated: dict[int, int] = {}
        self._id = 0
        self._tick = 0

    def _deduct(self, deduction: Optional[BalanceDeduction]) -> Optional[Employee]:
        if deduction is None:
            return None
        emp = self._employees.employees[deduction.employee_id]
        left = emp.balance_for(deduction.leave_kind) - deduction.days
        if left < 0:
            raise InsufficientBalanceError(f"Insufficient {deduction.leave_kind.value} leave balance")
        balance = dict(emp.leave_balance)
        balance[deduction.leave_kind] = left
        return replace(emp, leave_balance=balance)

    def _touch(self, request_id: int) -> None:
        self._tick += 1
        self._updated[request_id] = self._tick

    def create_request(self, request: ApprovalRequest, *, deduction: Optional[BalanceDeduction] = None) -> int:
        with self._lock:
            p = request.payload
            if isinstance(p, AttendancePayload) and self._day(request.subject_employee_id, p.work_date):
                raise DuplicateSubmissionError("Already checked in for today")
            if isinstance(p, LeavePayload) and self.find_pending_leave(request.subject_employee_id):
                raise DuplicatePendingError("A leave request is already awaiting approval")
            emp = self._deduct(deduction)
            self._id += 1
            self._rows[self._id] = replace(request, request_id=self._id, version=0)
            self._touch(self._id)
            if emp:
                self._employees.employees[emp.employee_id] = emp
            return self._id

    def get_request(self, request_id: int) -> Optional[ApprovalRequest]:
        return self._rows.get(int(request_id))

    def update_request(self, request: ApprovalRequest, *, expected_version: int, deduction=None) -> bool:
        with self._lock:
            rid = int(request.request_id)
            stored = self._rows.get(rid)
            if stored is None or stored.version != expected_version:
                return False
            emp = self._deduct(deduction)
            self._rows[rid] = replace(request, version=stored.version + 1)
            self._touch(rid)
            if emp:
                self._employees.employees[emp.employee_id] = emp
            return True

    def _day(self, employee_id: str, work_date: date) -> Optional[ApprovalRequest]:
        for r in self._rows.values():
            if (
                r.kind == RequestKind.ATTENDANCE
                and r.subject_employee_id == employee_id
                and r.payload.work_date == work_date
            ):
                return r
        return None

    def find_attendance_for_day(self, employee_id: str, work_date: date) -> Optional[ApprovalRequest]:
        return self._day(employee_id, work_date)

    def find_pending_leave(self, employee_id: str) -> Optional[ApprovalRequest]:
        for r in self._rows.values():
            if r.kind == RequestKind.LEAVE and r.subject_employee_id == employee_id and r.status == ApprovalStatus.PENDING:
                return r
        return None

    def find_pending_for_approver(self, approver_id: str, *, kind=None):
        return [
            r
            for r in self._rows.values()
            if r.status == ApprovalStatus.PENDING
            and r.current_approver == approver_id
            and (kind is None or r.kind == kind)
        ]

    def find_history_for_approver(self, approver_id: str, *, status=None, kind=None, limit=200):
        rows = [
            r
            for r in self._rows.values()
            if any(e.approver_id == approver_id for e in r.approval_log)
            and (status is None or r.status == status)
            and (kind is None or r.kind == kind)
        ]
        rows.sort(key=lambda r: self._updated[r.request_id], reverse=True)
        return rows[:limit]

    def list_for_employee(self, employee_id: str, *, kind=None, limit=200):
        rows = [r for r in self._rows.values() if r.subject_employee_id == employee_id and (kind is None or r.kind == kind)]
        return rows[:limit]

    def list_attendance_between(self, start_date: date, end_date: date):
        rows = [r for r in self._rows.values() if r.kind == RequestKind.ATTENDANCE and start_date <= r.payload.work_date <= end_date]
        return sorted(rows, key=lambda r: (r.payload.work_date, r.subject_employee_id))


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_employee(employee_id: str, *, chain=(), balance=None, site="HQ", **kw) -> Employee:
    if balance is None:
        balance = {LeaveKind.SICK: 14, LeaveKind.CASUAL: 10, LeaveKind.EARNED: 0}
    return Employee(
        employee_id=employee_id,
        full_name=kw.pop("full_name", f"Employee {employee_id}"),
        site=site,
        designation=kw.pop("designation", "Field Officer"),
        approval_hierarchy=tuple(chain),
        leave_balance=dict(balance),
        **kw,
    )


@pytest.fixture
def hq_policy() -> SitePolicy:
    return SitePolicy(site="HQ", location=HQ, allowed_radius_meters=500.0)


@pytest.fixture
def policies(hq_policy) -> SitePolicyRegistry:
    return SitePolicyRegistry(policies={"HQ": hq_policy}, default_site="HQ")


@pytest.fixture
def employees() -> InMemoryEmployees:
    return InMemoryEmployees(
        [
            make_employee("E1", chain=("M1", "H1")),
            make_employee("M1", chain=("H1",), designation="Project Manager"),
            make_employee("H1", designation="HR Manager"),
            make_employee("SOLO"),
        ]
    )


@pytest.fixture
def requests_repo(employees) -> InMemoryRequests:
    return InMemoryRequests(employees)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 3, 2, 8, 50))


@pytest.fixture
def container(employees, requests_repo, policies, clock):
    return wire(employees_repo=employees, requests_repo=requests_repo, policies=policies, clock=clock)
