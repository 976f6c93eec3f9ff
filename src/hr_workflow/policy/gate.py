from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..common.validators import optional_text
from ..core.enums import BlockReason
from .model import Submission, Verdict


@dataclass(frozen=True)
class Admitted:
    verdict: Verdict
    justification: Optional[str]


@dataclass(frozen=True)
class Blocked:
    reason: BlockReason
    verdict: Verdict
    required_justification: bool = True


GateResult = Union[Admitted, Blocked]


def block_reason(verdict: Verdict) -> Optional[BlockReason]:
    if verdict.is_late and verdict.is_out_of_range:
        return BlockReason.BOTH
    if verdict.is_late:
        return BlockReason.LATE
    if verdict.is_out_of_range:
        return BlockReason.OUT_OF_RANGE
    return None


def admit(submission: Submission, verdict: Verdict) -> GateResult:
    """Let a compliant or justified submission through; block the rest.

    Stateless: a blocked client resubmits the same check-in with a
    justification and is judged again from scratch.
    """

    justification = optional_text(submission.justification)
    reason = block_reason(verdict)
    if reason is not None and justification is None:
        return Blocked(reason=reason, verdict=verdict)
    return Admitted(verdict=verdict, justification=justification)
