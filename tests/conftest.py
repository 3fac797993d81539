from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.leave_management.leave_management.core.enums import LeaveStatus, LeaveType, Role
from src.leave_management.leave_management.core.exceptions import DuplicateUserError
from src.leave_management.leave_management.leaves.model import LeaveRecord, PendingLeaveRequest
from src.leave_management.leave_management.leaves.service import LeaveService
from src.leave_management.leave_management.users.model import Balance, User
from src.leave_management.leave_management.users.service import AuthService, UserService

ADMIN_PASSWORD = "Admin@1234"
EMPLOYEE_PASSWORD = "User@1234"


class InMemoryUsers:
    def __init__(self):
        self.users: dict[int, User] = {}
        self._next_id = 1

    def add(self, *, name, email, password, role=Role.EMPLOYEE, balance=None, reporting_to=None) -> User:
        user_id = self.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            balance=balance or Balance(),
            reporting_to=reporting_to,
        )
        return self.users[user_id]

    def get_by_id(self, user_id: int) -> Optional[User]:
        user = self.users.get(int(user_id))
        if user and user.reporting_to is not None:
            manager = self.users.get(user.reporting_to)
            user = replace(user, manager_name=manager.name if manager else None)
        return user

    def get_by_email(self, email: str) -> Optional[User]:
        for user in self.users.values():
            if user.email == email.strip().lower():
                return self.get_by_id(user.user_id)
        return None

    def list_all(self):
        return [self.get_by_id(uid) for uid in sorted(self.users, reverse=True)]

    def create_user(self, *, name, email, password_hash, role, balance, reporting_to) -> int:
        if any(u.email == email.lower() for u in self.users.values()):
            raise DuplicateUserError("A user with this email already exists")
        user_id = self._next_id
        self._next_id += 1
        self.users[user_id] = User(
            user_id=user_id,
            name=name,
            email=email.lower(),
            password_hash=password_hash,
            role=Role(role),
            balance=balance,
            reporting_to=reporting_to,
        )
        return user_id

    def update_balance(self, user_id, *, leave_type, value) -> bool:
        user = self.users.get(int(user_id))
        if not user:
            return False
        self.users[user.user_id] = replace(user, balance=user.balance.with_value(leave_type, value))
        return True

    def update_password_hash(self, user_id, *, password_hash) -> bool:
        user = self.users.get(int(user_id))
        if not user:
            return False
        self.users[user.user_id] = replace(user, password_hash=password_hash)
        return True

    def update_manager_and_balances(self, user_id, *, reporting_to, balance) -> bool:
        user = self.users.get(int(user_id))
        if not user:
            return False
        self.users[user.user_id] = replace(user, reporting_to=reporting_to, balance=balance)
        return True


class InMemoryLeaves:
    """Mirrors the conditional writes of the MySQL repository."""

    def __init__(self, users: InMemoryUsers):
        self._users = users
        self.leaves: dict[int, LeaveRecord] = {}
        self._next_id = 1
        self._clock = datetime(2026, 2, 1, 9, 0, 0)
        # Lets a test change state between the service's read and its write.
        self.before_write = None

    def _tick(self) -> datetime:
        self._clock += timedelta(minutes=1)
        return self._clock

    def _pending(self, user_id: int, leave_type: LeaveType) -> Decimal:
        return sum(
            (
                r.amount
                for r in self.leaves.values()
                if r.user_id == user_id and r.leave_type == leave_type and r.status == LeaveStatus.PENDING
            ),
            Decimal("0"),
        )

    def add(self, *, user_id, amount, leave_type, leave_date=date(2026, 3, 2), status=LeaveStatus.PENDING) -> LeaveRecord:
        leave_id = self._next_id
        self._next_id += 1
        self.leaves[leave_id] = LeaveRecord(
            leave_id=leave_id,
            user_id=int(user_id),
            leave_date=leave_date,
            amount=Decimal(str(amount)),
            leave_type=LeaveType(leave_type),
            status=status,
            created_at=self._tick(),
        )
        return self.leaves[leave_id]

    def insert_pending(self, *, user_id, leave_date, amount, leave_type) -> Optional[int]:
        if self.before_write:
            self.before_write()
        user = self._users.users.get(int(user_id))
        if not user:
            return None
        if user.balance.get(leave_type) - self._pending(user.user_id, leave_type) < amount:
            return None
        return self.add(user_id=user_id, amount=amount, leave_type=leave_type, leave_date=leave_date).leave_id

    def get(self, leave_id):
        return self.leaves.get(int(leave_id))

    def list_by_user(self, user_id, *, status=None, leave_type=None, limit=200):
        rows = [
            r
            for r in self.leaves.values()
            if r.user_id == int(user_id)
            and (status is None or r.status == status)
            and (leave_type is None or r.leave_type == leave_type)
        ]
        rows.sort(key=lambda r: (r.created_at, r.leave_id), reverse=True)
        return rows[:limit]

    def sum_pending(self, user_id):
        return {t: self._pending(int(user_id), t) for t in LeaveType}

    def count_pending(self, user_id):
        return sum(1 for r in self.leaves.values() if r.user_id == int(user_id) and r.status == LeaveStatus.PENDING)

    def list_pending_for_manager(self, manager_id, *, limit=500):
        out = []
        for r in self.list_pending_all():
            owner = self._users.users[r.user_id]
            if owner.reporting_to is not None and owner.reporting_to == int(manager_id):
                out.append(PendingLeaveRequest(leave=r, user_name=owner.name, user_email=owner.email))
        return out[:limit]

    def list_pending_all(self):
        rows = [r for r in self.leaves.values() if r.status == LeaveStatus.PENDING]
        rows.sort(key=lambda r: (r.created_at, r.leave_id), reverse=True)
        return rows

    def approve(self, leave_id, *, leave_type, approver_id) -> bool:
        if self.before_write:
            self.before_write()
        leave = self.leaves.get(int(leave_id))
        if not leave or leave.status != LeaveStatus.PENDING or leave.leave_type != leave_type:
            return False
        owner = self._users.users[leave.user_id]
        current = owner.balance.get(leave_type)
        if current < leave.amount:
            return False
        self._users.update_balance(owner.user_id, leave_type=leave_type, value=current - leave.amount)
        self.leaves[leave.leave_id] = replace(
            leave, status=LeaveStatus.APPROVED, decided_by=int(approver_id), decided_at=self._tick()
        )
        return True

    def reject(self, leave_id, *, approver_id, reason=None) -> bool:
        if self.before_write:
            self.before_write()
        leave = self.leaves.get(int(leave_id))
        if not leave or leave.status != LeaveStatus.PENDING:
            return False
        self.leaves[leave.leave_id] = replace(
            leave,
            status=LeaveStatus.REJECTED,
            decided_by=int(approver_id),
            decided_at=self._tick(),
            rejection_reason=reason,
        )
        return True


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def leaves_repo(users_repo) -> InMemoryLeaves:
    return InMemoryLeaves(users_repo)


@pytest.fixture
def admin(users_repo) -> User:
    return users_repo.add(
        name="Admin User",
        email="admin@example.com",
        password=ADMIN_PASSWORD,
        role=Role.ADMIN,
        balance=Balance(casual=Decimal("10"), sick=Decimal("10"), annual=Decimal("20")),
    )


@pytest.fixture
def employee(users_repo, admin) -> User:
    return users_repo.add(
        name="John Doe",
        email="john@example.com",
        password=EMPLOYEE_PASSWORD,
        balance=Balance(casual=Decimal("8"), sick=Decimal("5"), annual=Decimal("15")),
        reporting_to=admin.user_id,
    )


@pytest.fixture
def leave_service(leaves_repo, users_repo) -> LeaveService:
    return LeaveService(leaves_repo, users_repo)


@pytest.fixture
def user_service(users_repo) -> UserService:
    return UserService(users_repo)


@pytest.fixture
def auth_service(users_repo) -> AuthService:
    return AuthService(users_repo)
