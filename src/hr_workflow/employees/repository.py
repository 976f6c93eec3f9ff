from __future__ import annotations

from typing import Iterable, Mapping, Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Read side of employee master data plus the two fields this core owns.

    Balances are only ever decremented through the request repository, in the
    same transaction as the approval that causes the deduction.
    """

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_many(self, employee_ids: Iterable[str]) -> Mapping[str, Employee]:
        raise NotImplementedError

    def set_approval_hierarchy(self, employee_id: str, approver_ids: Sequence[str]) -> bool:
        raise NotImplementedError
