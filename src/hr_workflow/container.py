from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from .attendance.service import AttendanceService
from .common.datetime_utils import now_local
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService
from .leave.service import LeaveService
from .policy.model import SitePolicyRegistry
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.repository import RequestRepository
from .requests.service import ApprovalService


@dataclass(frozen=True)
class Container:
    employees_repo: EmployeeRepository
    requests_repo: RequestRepository
    policies: SitePolicyRegistry

    employee_service: EmployeeService
    attendance_service: AttendanceService
    leave_service: LeaveService
    approval_service: ApprovalService

    conn: Optional[DatabaseConnection] = None


def wire(
    *,
    employees_repo: EmployeeRepository,
    requests_repo: RequestRepository,
    policies: SitePolicyRegistry,
    clock: Callable = now_local,
    approve_compliant_checkins: bool = False,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build the services on top of any repository implementation."""

    return Container(
        employees_repo=employees_repo,
        requests_repo=requests_repo,
        policies=policies,
        employee_service=EmployeeService(employees_repo),
        attendance_service=AttendanceService(
            requests_repo,
            employees_repo,
            policies,
            clock=clock,
            approve_compliant_checkins=approve_compliant_checkins,
        ),
        leave_service=LeaveService(requests_repo, employees_repo, clock=clock),
        approval_service=ApprovalService(requests_repo, employees_repo, clock=clock),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    site_policies: Mapping[str, Mapping],
    default_site: Optional[str] = None,
    timezone: Optional[str] = None,
    approve_compliant_checkins: bool = False,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return wire(
        employees_repo=MySQLEmployeeRepository(conn),
        requests_repo=MySQLRequestRepository(conn),
        policies=SitePolicyRegistry.from_settings(site_policies, default_site=default_site, timezone=timezone),
        approve_compliant_checkins=approve_compliant_checkins,
        conn=conn,
    )
