from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRecord:
    leave_id: int
    user_id: int
    leave_date: date
    amount: Decimal
    leave_type: LeaveType
    status: LeaveStatus
    created_at: datetime
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "leave_id": self.leave_id,
            "user_id": self.user_id,
            "date": self.leave_date.isoformat(),
            "amount": float(self.amount),
            "type": self.leave_type.value,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(timespec="seconds"),
            "decided_by": self.decided_by,
            "decided_at": self.decided_at.isoformat(timespec="seconds") if self.decided_at else None,
            "rejection_reason": self.rejection_reason,
        }


@dataclass(frozen=True)
class PendingLeaveRequest:
    """A pending request joined with its owner, for the approvals view."""

    leave: LeaveRecord
    user_name: str
    user_email: str

    def as_dict(self) -> dict:
        return {**self.leave.as_dict(), "user_name": self.user_name, "user_email": self.user_email}


@dataclass(frozen=True)
class BalanceSummary:
    leave_type: LeaveType
    total: Decimal
    pending: Decimal

    @property
    def available(self) -> Decimal:
        return self.total - self.pending

    def as_dict(self) -> dict:
        return {
            "type": self.leave_type.value,
            "total": float(self.total),
            "pending": float(self.pending),
            "available": float(self.available),
        }
