from __future__ import annotations

from decimal import Decimal


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced user or leave request does not exist."""


class AlreadyProcessedError(DomainError):
    """Raised when a leave request is no longer pending."""


class DuplicateUserError(DomainError):
    """Raised when enrolling a user whose email is already taken."""


class StoreFailure(DomainError):
    """Raised when the underlying database call fails."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class InsufficientBalanceError(DomainError):
    """Raised when the available balance cannot cover a requested amount."""

    def __init__(self, leave_type: str, *, available: Decimal, total: Decimal, pending: Decimal):
        self.leave_type = leave_type
        self.available = available
        self.total = total
        self.pending = pending
        super().__init__(
            f"Insufficient {leave_type} leave balance. "
            f"Available: {_fmt(available)} ({_fmt(total)} total - {_fmt(pending)} pending)"
        )


def _fmt(value: Decimal) -> str:
    # 6.0 -> "6", 2.5 -> "2.5"
    return f"{Decimal(value).normalize():f}"
