from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import (
    generate_strong_password,
    parse_balance,
    require_email,
    require_non_empty,
    require_strong_password,
)
from ..core.capabilities import Capability, require_capability
from ..core.enums import LeaveType, Role
from ..core.exceptions import (
    AuthenticationError,
    DuplicateUserError,
    NotFoundError,
    StoreFailure,
    ValidationError,
)
from .model import Balance, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """The signed-in user as handed to request handlers.

    Only ``user_id`` is kept in the Flask session cookie; this object is
    rebuilt from the database on every request.
    """

    user_id: int
    name: str
    email: str
    role: Role
    reporting_to: Optional[int]

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        return cls(
            user_id=user.user_id,
            name=user.name,
            email=user.email,
            role=user.role,
            reporting_to=user.reporting_to,
        )


def parse_balances(values: Mapping[str, Any]) -> Balance:
    return Balance(
        **{t.value: parse_balance(values.get(t.value, 0), f"{t.label} balance") for t in LeaveType}
    )


class AuthService:
    """Use case: authenticate user (login) and resolve the session user."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        if not isinstance(email, str) or not isinstance(password, str):
            raise AuthenticationError("Invalid email or password")
        user = self._users.get_by_email((email or "").strip().lower()) if email else None
        if not user:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.warning("Failed login for user_id=%s", user.user_id)
            raise AuthenticationError("Invalid email or password")

        logger.info("User %s signed in", user.user_id)
        return SessionUser.from_user(user)

    def resolve_session(self, user_id: Any) -> SessionUser:
        if user_id is None:
            raise AuthenticationError("Please sign in to continue")
        try:
            uid = int(user_id)
        except (TypeError, ValueError):
            raise AuthenticationError("Please sign in to continue")

        user = self._users.get_by_id(uid)
        if not user:
            raise AuthenticationError("Please sign in to continue")
        return SessionUser.from_user(user)


class UserService:
    """Use case: manage users and credentials."""

    def __init__(self, users: UserRepository):
        self._users = users

    def _get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def _validate_manager(self, reporting_to: Optional[int], *, user_id: Optional[int] = None) -> Optional[int]:
        if reporting_to in (None, "", 0):
            return None
        try:
            manager_id = int(reporting_to)
        except (TypeError, ValueError):
            raise ValidationError("Manager is not valid")
        if user_id is not None and manager_id == int(user_id):
            raise ValidationError("A user cannot report to themselves")
        if not self._users.get_by_id(manager_id):
            raise ValidationError("Manager does not exist")
        return manager_id

    def enroll_user(
        self,
        *,
        current_role: Role,
        name: str,
        email: str,
        password: str,
        role: Role,
        balance: Balance,
        reporting_to: Optional[int] = None,
    ) -> int:
        require_capability(current_role, Capability.ENROLL_USERS)

        name = require_non_empty(name, "Name")
        email = require_email(email)
        require_strong_password(password)
        try:
            role = Role(role)
        except ValueError:
            raise ValidationError("Role is not valid")
        manager_id = self._validate_manager(reporting_to)

        if self._users.get_by_email(email):
            raise DuplicateUserError("A user with this email already exists")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            balance=balance,
            reporting_to=manager_id,
        )
        logger.info("Enrolled user %s (%s) as %s", user_id, email, role.value)
        return user_id

    def list_users(self, *, current_role: Role) -> list[User]:
        require_capability(current_role, Capability.MANAGE_EMPLOYEES)
        return list(self._users.list_all())

    def update_employee_settings(
        self,
        *,
        current_role: Role,
        user_id: int,
        reporting_to: Optional[int],
        balance: Balance,
    ) -> None:
        require_capability(current_role, Capability.MANAGE_EMPLOYEES)

        user = self._get_user(user_id)
        manager_id = self._validate_manager(reporting_to, user_id=user.user_id)

        if not self._users.update_manager_and_balances(user.user_id, reporting_to=manager_id, balance=balance):
            raise StoreFailure("Failed to update employee settings")
        logger.info("Updated settings of user %s (reporting_to=%s)", user.user_id, manager_id)

    def reset_password(self, *, current_role: Role, user_id: int, new_password: str) -> None:
        require_capability(current_role, Capability.MANAGE_PASSWORDS)

        user = self._get_user(user_id)
        require_strong_password(new_password)

        if not self._users.update_password_hash(user.user_id, password_hash=generate_password_hash(new_password)):
            raise StoreFailure("Failed to reset password")
        logger.info("Password reset for user %s", user.user_id)

    def change_password(
        self,
        *,
        user_id: int,
        current_password: str,
        new_password: str,
        confirm_password: str,
    ) -> None:
        user = self._get_user(user_id)
        if not isinstance(current_password, str):
            raise ValidationError("Current password is incorrect")

        try:
            ok = check_password_hash(user.password_hash, current_password)
        except ValueError:
            ok = False
        if not ok:
            raise ValidationError("Current password is incorrect")
        require_strong_password(new_password)
        if new_password != confirm_password:
            raise ValidationError("New passwords do not match")
        if new_password == current_password:
            raise ValidationError("New password must be different from current password")

        if not self._users.update_password_hash(user.user_id, password_hash=generate_password_hash(new_password)):
            raise StoreFailure("Failed to change password")
        logger.info("User %s changed their password", user.user_id)

    @staticmethod
    def generate_password() -> str:
        return generate_strong_password()
