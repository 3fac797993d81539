from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional

from ..core.enums import LeaveType, Role


@dataclass(frozen=True)
class Balance:
    """Per-type leave quota in days (half-day granularity)."""

    casual: Decimal = Decimal("0")
    sick: Decimal = Decimal("0")
    annual: Decimal = Decimal("0")

    def get(self, leave_type: LeaveType) -> Decimal:
        return getattr(self, LeaveType(leave_type).value)

    def with_value(self, leave_type: LeaveType, value: Decimal) -> "Balance":
        return replace(self, **{LeaveType(leave_type).value: value})

    def total(self) -> Decimal:
        return self.casual + self.sick + self.annual

    def as_dict(self) -> dict[str, Decimal]:
        return {t.value: self.get(t) for t in LeaveType}


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object; holds no database access code.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    balance: Balance
    reporting_to: Optional[int] = None
    manager_name: Optional[str] = None
