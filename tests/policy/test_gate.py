from __future__ import annotations

from datetime import datetime

import pytest

from hr_workflow.core.enums import BlockReason
from hr_workflow.policy.gate import Admitted, Blocked, admit, block_reason
from hr_workflow.policy.model import Submission, Verdict


def _submission(justification=None) -> Submission:
    return Submission(employee_id="E1", timestamp=datetime(2026, 3, 2, 9, 30), location=None, justification=justification)


@pytest.mark.parametrize(
    "late, out, reason",
    [
        (False, False, None),
        (True, False, BlockReason.LATE),
        (False, True, BlockReason.OUT_OF_RANGE),
        (True, True, BlockReason.BOTH),
    ],
)
def test_block_reason(late, out, reason):
    assert block_reason(Verdict(is_late=late, is_out_of_range=out, distance_meters=None)) is reason


def test_compliant_submission_is_admitted_without_justification():
    verdict = Verdict(is_late=False, is_out_of_range=False, distance_meters=10.0)

    result = admit(_submission(), verdict)

    assert isinstance(result, Admitted)
    assert result.justification is None


@pytest.mark.parametrize("text", [None, "", "   "])
def test_late_without_justification_is_blocked(text):
    verdict = Verdict(is_late=True, is_out_of_range=False, distance_meters=10.0)

    result = admit(_submission(text), verdict)

    assert isinstance(result, Blocked)
    assert result.reason is BlockReason.LATE
    assert result.required_justification is True
    assert result.verdict is verdict


def test_justified_submission_is_admitted_with_trimmed_text():
    verdict = Verdict(is_late=True, is_out_of_range=True, distance_meters=5000.0)

    result = admit(_submission("  Client visit in Gulshan "), verdict)

    assert isinstance(result, Admitted)
    assert result.justification == "Client visit in Gulshan"
