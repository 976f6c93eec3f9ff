from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from ..core.enums import LeaveKind


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee as seen by the approval workflow.

    Master data (salary, contacts, ...) is owned elsewhere; only identity,
    site, the approval chain and leave balances matter here.
    """

    employee_id: str
    full_name: str
    site: Optional[str] = None
    designation: Optional[str] = None
    approval_hierarchy: Tuple[str, ...] = ()
    leave_balance: Mapping[LeaveKind, int] = field(default_factory=dict)
    is_active: bool = True

    def balance_for(self, kind: LeaveKind) -> int:
        return int(self.leave_balance.get(kind, 0))
