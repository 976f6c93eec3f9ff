from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..policy.gate import Blocked


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DOMAIN_ERROR"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class JustificationRequired(ValidationError):
    """Raised when a late or out-of-range check-in arrives without a reason.

    The client is expected to resubmit the same check-in with a justification;
    nothing is stored in between.
    """

    code = "JUSTIFICATION_REQUIRED"

    def __init__(self, blocked: "Blocked"):
        super().__init__("Justification Required")
        self.blocked = blocked


class NotFoundError(DomainError):
    """Raised when an employee or request id is unknown."""

    code = "NOT_FOUND"


class AuthorizationError(DomainError):
    """Raised when an actor lacks permission for an action."""

    code = "UNAUTHORIZED"


class UnauthorizedApproverError(AuthorizationError):
    """Raised when someone other than the current approver tries to decide."""


class AlreadyTerminalError(AuthorizationError):
    """Raised when a decision targets an already approved or rejected request."""

    code = "ALREADY_TERMINAL"


class BusinessRuleError(DomainError):
    """Submission-time rejection that needs new input from the actor."""


class InsufficientBalanceError(BusinessRuleError):
    code = "INSUFFICIENT_BALANCE"


class DuplicatePendingError(BusinessRuleError):
    code = "DUPLICATE_PENDING"


class DuplicateSubmissionError(BusinessRuleError):
    code = "DUPLICATE_SUBMISSION"


class StaleStateError(DomainError):
    """Raised when a concurrent writer changed the request first."""

    code = "STALE_STATE"


class ConfigurationError(DomainError):
    """Raised when required policy configuration is missing."""

    code = "CONFIGURATION_ERROR"
