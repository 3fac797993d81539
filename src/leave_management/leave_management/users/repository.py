from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveType, Role
from .model import Balance, User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface rather than on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        balance: Balance,
        reporting_to: Optional[int],
    ) -> int:
        """Insert a user; raises DuplicateUserError when the email exists."""

        raise NotImplementedError

    def update_balance(self, user_id: int, *, leave_type: LeaveType, value: Decimal) -> bool:
        raise NotImplementedError

    def update_password_hash(self, user_id: int, *, password_hash: str) -> bool:
        raise NotImplementedError

    def update_manager_and_balances(self, user_id: int, *, reporting_to: Optional[int], balance: Balance) -> bool:
        raise NotImplementedError
