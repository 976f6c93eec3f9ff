from __future__ import annotations

import logging
from typing import Sequence

from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


class EmployeeService:
    """Use case: read employees and configure their approval chain."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def get(self, employee_id: str) -> Employee:
        employee = self._employees.get_by_id(str(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def set_approval_hierarchy(self, employee_id: str, approver_ids: Sequence[str]) -> Employee:
        """Replace the employee's approval chain.

        Requests already submitted keep the chain they were created with;
        only new submissions follow the new one.
        """

        employee = self.get(employee_id)
        chain = [require_non_empty(str(a or ""), "Approver id") for a in approver_ids]

        if employee.employee_id in chain:
            raise ValidationError("An employee cannot approve their own requests")
        if len(set(chain)) != len(chain):
            raise ValidationError("Approval hierarchy contains duplicate approvers")

        found = self._employees.get_many(chain)
        missing = [a for a in chain if a not in found]
        if missing:
            raise ValidationError(f"Unknown approver(s): {', '.join(missing)}")

        if not self._employees.set_approval_hierarchy(employee.employee_id, chain):
            raise NotFoundError("Employee not found")

        logger.info("Approval hierarchy for %s set to %s", employee.employee_id, chain or "[] (auto-approve)")
        return self.get(employee.employee_id)
