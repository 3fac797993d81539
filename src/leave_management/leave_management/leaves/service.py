from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Optional

from ..common.datetime_utils import now_local
from ..common.validators import parse_leave_amount, parse_leave_status, parse_leave_type
from ..core.capabilities import Capability, require_capability
from ..core.constants import DASHBOARD_WINDOW_DAYS, DEFAULT_APPROVALS_LIMIT, DEFAULT_HISTORY_LIMIT
from ..core.enums import LeaveStatus, LeaveType, Role
from ..core.exceptions import (
    AlreadyProcessedError,
    AuthorizationError,
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from ..users.model import User
from ..users.repository import UserRepository
from .model import BalanceSummary, LeaveRecord, PendingLeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveService:
    """The leave request ledger.

    A request reserves balance while pending and deducts it only when
    approved, so for every user and type::

        available = stored balance - sum(pending amounts)

    Both submission and approval re-check this against the store at write
    time; the repository applies each mutation as one conditional write.
    """

    def __init__(self, leaves: LeaveRepository, users: UserRepository):
        self._leaves = leaves
        self._users = users

    def _get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def _get_pending_leave(self, leave_id: int) -> LeaveRecord:
        leave = self._leaves.get(int(leave_id))
        if not leave:
            raise NotFoundError("Leave request not found")
        if leave.status != LeaveStatus.PENDING:
            raise AlreadyProcessedError("Leave request already processed")
        return leave

    def _check_reviewer(self, current_role: Role, approver_id: int, owner: User) -> None:
        require_capability(current_role, Capability.REVIEW_LEAVES)
        if owner.reporting_to is None or owner.reporting_to != int(approver_id):
            raise AuthorizationError("Only the employee's manager can review this request")

    def _insufficient(self, user: User, leave_type: LeaveType) -> InsufficientBalanceError:
        summary = self.balance_summary(user_id=user.user_id, user=user)[leave_type]
        return InsufficientBalanceError(
            leave_type.value,
            available=summary.available,
            total=summary.total,
            pending=summary.pending,
        )

    def balance_summary(self, *, user_id: int, user: Optional[User] = None) -> dict[LeaveType, BalanceSummary]:
        user = user or self._get_user(user_id)
        pending = self._leaves.sum_pending(user.user_id)
        return {
            t: BalanceSummary(leave_type=t, total=user.balance.get(t), pending=pending.get(t, Decimal("0")))
            for t in LeaveType
        }

    def submit(
        self,
        *,
        current_role: Role,
        user_id: int,
        leave_date: date,
        amount: Any,
        leave_type: Any,
    ) -> int:
        require_capability(current_role, Capability.SUBMIT_LEAVE)

        if not isinstance(leave_date, date):
            raise ValidationError("Date is required")
        amount = parse_leave_amount(amount)
        leave_type = parse_leave_type(leave_type)

        user = self._get_user(user_id)
        if self.balance_summary(user_id=user.user_id, user=user)[leave_type].available < amount:
            logger.warning("Rejected %s %s leave request for user %s: insufficient balance", amount, leave_type.value, user.user_id)
            raise self._insufficient(user, leave_type)

        leave_id = self._leaves.insert_pending(
            user_id=user.user_id,
            leave_date=leave_date,
            amount=amount,
            leave_type=leave_type,
        )
        if leave_id is None:
            # Balance moved between the read above and the locked insert.
            logger.warning("Leave request for user %s lost a race on %s balance", user.user_id, leave_type.value)
            raise self._insufficient(self._get_user(user.user_id), leave_type)

        logger.info("User %s submitted leave %s: %s day(s) of %s on %s", user.user_id, leave_id, amount, leave_type.value, leave_date)
        return leave_id

    def list_pending_approvals(
        self,
        *,
        current_role: Role,
        manager_id: int,
        limit: int = DEFAULT_APPROVALS_LIMIT,
    ) -> list[PendingLeaveRequest]:
        require_capability(current_role, Capability.REVIEW_LEAVES)
        return list(self._leaves.list_pending_for_manager(int(manager_id), limit=limit))

    def approve(self, *, current_role: Role, approver_id: int, leave_id: int) -> None:
        leave = self._get_pending_leave(leave_id)
        owner = self._get_user(leave.user_id)
        self._check_reviewer(current_role, approver_id, owner)

        if owner.balance.get(leave.leave_type) < leave.amount:
            logger.warning("Cannot approve leave %s: stored %s balance below %s", leave.leave_id, leave.leave_type.value, leave.amount)
            raise self._insufficient(owner, leave.leave_type)

        if not self._leaves.approve(leave.leave_id, leave_type=leave.leave_type, approver_id=int(approver_id)):
            # The conditional write matched nothing; report what changed.
            self._get_pending_leave(leave.leave_id)
            raise self._insufficient(self._get_user(owner.user_id), leave.leave_type)

        logger.info("Leave %s approved by %s; %s %s day(s) deducted from user %s", leave.leave_id, approver_id, leave.amount, leave.leave_type.value, owner.user_id)

    def reject(
        self,
        *,
        current_role: Role,
        approver_id: int,
        leave_id: int,
        reason: Optional[str] = None,
    ) -> None:
        leave = self._get_pending_leave(leave_id)
        owner = self._get_user(leave.user_id)
        self._check_reviewer(current_role, approver_id, owner)

        reason = (reason or "").strip() or None
        if not self._leaves.reject(leave.leave_id, approver_id=int(approver_id), reason=reason):
            raise AlreadyProcessedError("Leave request already processed")

        logger.info("Leave %s rejected by %s", leave.leave_id, approver_id)

    def list_history(
        self,
        *,
        user_id: int,
        status: Optional[Any] = None,
        leave_type: Optional[Any] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> list[LeaveRecord]:
        status = parse_leave_status(status) if status not in (None, "") else None
        leave_type = parse_leave_type(leave_type) if leave_type not in (None, "") else None

        return list(self._leaves.list_by_user(int(user_id), status=status, leave_type=leave_type, limit=limit))

    def dashboard(self, *, user_id: int, now: Optional[datetime] = None) -> dict:
        now = now or now_local()
        user = self._get_user(user_id)
        summary = self.balance_summary(user_id=user.user_id, user=user)
        history = self._leaves.list_by_user(user.user_id, limit=DEFAULT_HISTORY_LIMIT)

        since = now - timedelta(days=DASHBOARD_WINDOW_DAYS)
        recent_amount = sum(
            (h.amount for h in history if h.status != LeaveStatus.REJECTED and since <= h.created_at <= now),
            Decimal("0"),
        )

        return {
            "total_available": user.balance.total(),
            "leaves_last_30_days": recent_amount,
            "pending_requests": self._leaves.count_pending(user.user_id),
            "balances": summary,
            "recent": list(history[:4]),
        }
