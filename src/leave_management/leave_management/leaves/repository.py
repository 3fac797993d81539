from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRecord, PendingLeaveRequest


class LeaveRepository(Protocol):
    def insert_pending(
        self,
        *,
        user_id: int,
        leave_date: date,
        amount: Decimal,
        leave_type: LeaveType,
    ) -> Optional[int]:
        """Insert a pending request if the available balance still covers it.

        The availability check and the insert happen in one transaction with
        the owner's row locked. Returns the new id, or None when the balance
        no longer covers ``amount``.
        """

        raise NotImplementedError

    def get(self, leave_id: int) -> Optional[LeaveRecord]:
        raise NotImplementedError

    def list_by_user(
        self,
        user_id: int,
        *,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRecord]:
        """Newest first."""

        raise NotImplementedError

    def sum_pending(self, user_id: int) -> dict[LeaveType, Decimal]:
        raise NotImplementedError

    def count_pending(self, user_id: int) -> int:
        raise NotImplementedError

    def list_pending_for_manager(self, manager_id: int, *, limit: int = 500) -> Sequence[PendingLeaveRequest]:
        """Pending requests of users reporting to ``manager_id``, newest first."""

        raise NotImplementedError

    def approve(self, leave_id: int, *, leave_type: LeaveType, approver_id: int) -> bool:
        """Deduct the owner's balance and mark the request approved.

        Applied only while the request is pending and the stored balance
        covers the amount; both writes succeed together or not at all.
        """

        raise NotImplementedError

    def reject(self, leave_id: int, *, approver_id: int, reason: Optional[str] = None) -> bool:
        """Mark the request rejected if it is still pending."""

        raise NotImplementedError
