"""Runs the MySQL repositories against a real server.

Skipped unless LEAVE_DB_INTEGRATION=1; connection settings come from
config.testing (DB_HOST, DB_USER, ... environment variables).
"""

from __future__ import annotations

import os
import uuid
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from werkzeug.security import generate_password_hash

from config import testing as settings
from src.leave_management.leave_management.core.enums import LeaveStatus, LeaveType, Role
from src.leave_management.leave_management.database.bootstrap import apply_schema
from src.leave_management.leave_management.database.connection import DatabaseConnection, DBConfig
from src.leave_management.leave_management.leaves.mysql_leave_repository import MySQLLeaveRepository
from src.leave_management.leave_management.users.model import Balance
from src.leave_management.leave_management.users.mysql_user_repository import MySQLUserRepository

pytestmark = [
    pytest.mark.mysql,
    pytest.mark.skipif(os.getenv("LEAVE_DB_INTEGRATION") != "1", reason="needs a MySQL server"),
]

SCHEMA = Path(__file__).resolve().parents[1] / "database" / "schema.sql"


@pytest.fixture(scope="module")
def conn():
    apply_schema(settings.DB_CONFIG, schema_path=SCHEMA)
    return DatabaseConnection(DBConfig.from_dict(settings.DB_CONFIG))


@pytest.fixture
def repos(conn):
    users = MySQLUserRepository(conn)
    return users, MySQLLeaveRepository(conn)


@pytest.fixture
def manager_and_employee(repos):
    users, _ = repos
    tag = uuid.uuid4().hex[:8]
    manager_id = users.create_user(
        name="Manager",
        email=f"manager-{tag}@example.com",
        password_hash=generate_password_hash("Admin@1234"),
        role=Role.ADMIN,
        balance=Balance(),
        reporting_to=None,
    )
    employee_id = users.create_user(
        name="Employee",
        email=f"employee-{tag}@example.com",
        password_hash=generate_password_hash("User@1234"),
        role=Role.EMPLOYEE,
        balance=Balance(casual=Decimal("8"), sick=Decimal("5"), annual=Decimal("15")),
        reporting_to=manager_id,
    )
    return manager_id, employee_id


def test_insert_pending_respects_reserved_balance(repos, manager_and_employee):
    _, leaves = repos
    _, employee_id = manager_and_employee

    first = leaves.insert_pending(user_id=employee_id, leave_date=date(2026, 3, 2), amount=Decimal("5"), leave_type=LeaveType.SICK)
    second = leaves.insert_pending(user_id=employee_id, leave_date=date(2026, 3, 3), amount=Decimal("0.5"), leave_type=LeaveType.SICK)

    assert first is not None
    assert second is None
    assert leaves.sum_pending(employee_id)[LeaveType.SICK] == Decimal("5")
    assert leaves.count_pending(employee_id) == 1


def test_approve_is_applied_once(repos, manager_and_employee):
    users, leaves = repos
    manager_id, employee_id = manager_and_employee
    leave_id = leaves.insert_pending(
        user_id=employee_id, leave_date=date(2026, 3, 2), amount=Decimal("2.5"), leave_type=LeaveType.CASUAL
    )

    assert leaves.approve(leave_id, leave_type=LeaveType.CASUAL, approver_id=manager_id) is True
    assert leaves.approve(leave_id, leave_type=LeaveType.CASUAL, approver_id=manager_id) is False
    assert leaves.reject(leave_id, approver_id=manager_id) is False

    assert users.get_by_id(employee_id).balance.casual == Decimal("5.5")
    leave = leaves.get(leave_id)
    assert leave.status == LeaveStatus.APPROVED
    assert leave.decided_by == manager_id


def test_approve_refuses_when_stored_balance_is_short(repos, manager_and_employee):
    users, leaves = repos
    manager_id, employee_id = manager_and_employee
    leave_id = leaves.insert_pending(
        user_id=employee_id, leave_date=date(2026, 3, 2), amount=Decimal("3"), leave_type=LeaveType.SICK
    )
    users.update_balance(employee_id, leave_type=LeaveType.SICK, value=Decimal("1"))

    assert leaves.approve(leave_id, leave_type=LeaveType.SICK, approver_id=manager_id) is False
    assert leaves.get(leave_id).status == LeaveStatus.PENDING
    assert users.get_by_id(employee_id).balance.sick == Decimal("1")


def test_reject_records_reason(repos, manager_and_employee):
    users, leaves = repos
    manager_id, employee_id = manager_and_employee
    leave_id = leaves.insert_pending(
        user_id=employee_id, leave_date=date(2026, 3, 2), amount=Decimal("1"), leave_type=LeaveType.ANNUAL
    )

    assert leaves.reject(leave_id, approver_id=manager_id, reason="Release week") is True
    assert leaves.approve(leave_id, leave_type=LeaveType.ANNUAL, approver_id=manager_id) is False

    leave = leaves.get(leave_id)
    assert leave.status == LeaveStatus.REJECTED
    assert leave.rejection_reason == "Release week"
    assert users.get_by_id(employee_id).balance.annual == Decimal("15")
