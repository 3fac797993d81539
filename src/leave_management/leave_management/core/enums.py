from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class LeaveType(str, Enum):
    """Leave categories; each one has its own balance column."""

    CASUAL = "casual"
    SICK = "sick"
    ANNUAL = "annual"

    @property
    def balance_column(self) -> str:
        return f"{self.value}_balance"

    @property
    def label(self) -> str:
        return f"{self.value.capitalize()} Leave"


class LeaveStatus(str, Enum):
    """Approval workflow state of a leave request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
