from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.leave_management.leave_management.common.datetime_utils import parse_iso_date
from src.leave_management.leave_management.common.validators import (
    generate_strong_password,
    parse_balance,
    parse_leave_amount,
    parse_leave_status,
    parse_leave_type,
    password_strength_errors,
    require_email,
)
from src.leave_management.leave_management.core.enums import LeaveStatus, LeaveType
from src.leave_management.leave_management.core.exceptions import InsufficientBalanceError, ValidationError


def test_half_day_amounts_are_accepted():
    assert parse_leave_amount("0.5") == Decimal("0.5")
    assert parse_leave_amount(2) == Decimal("2")
    assert parse_leave_amount(1.5) == Decimal("1.5")


def test_non_positive_or_fractional_amounts_are_rejected():
    for value in (0, "-0.5", "0.25", True, "nan"):
        with pytest.raises(ValidationError):
            parse_leave_amount(value)


def test_leave_type_parsing():
    assert parse_leave_type(" Sick ") == LeaveType.SICK
    with pytest.raises(ValidationError):
        parse_leave_type("vacation")


def test_enum_members_parse_as_themselves():
    assert parse_leave_type(LeaveType.ANNUAL) is LeaveType.ANNUAL
    assert parse_leave_status(LeaveStatus.PENDING) is LeaveStatus.PENDING
    assert parse_leave_status(" Approved ") == LeaveStatus.APPROVED
    with pytest.raises(ValidationError, match="Status is not valid"):
        parse_leave_status("cancelled")


def test_balances_are_bounded():
    assert parse_balance("9999.5", "Casual balance") == Decimal("9999.5")
    for value in ("10000", "1e30", "-1", "0.3"):
        with pytest.raises(ValidationError):
            parse_balance(value, "Casual balance")


def test_email_is_normalized():
    assert require_email("  Jane@Example.COM ") == "jane@example.com"


def test_password_strength_lists_each_broken_rule():
    assert password_strength_errors("Str0ng!pass") == []
    assert len(password_strength_errors("")) == 5
    assert password_strength_errors("lowercase1!") == ["Password must contain at least one uppercase letter"]
    assert password_strength_errors(12345678)[0] == "Password must be at least 8 characters long"


def test_generated_passwords_are_strong_and_distinct():
    first = generate_strong_password()
    assert len(first) == 16
    assert password_strength_errors(first) == []
    assert first != generate_strong_password()


def test_parse_iso_date():
    assert parse_iso_date("2026-03-02") == date(2026, 3, 2)
    with pytest.raises(ValidationError):
        parse_iso_date("02/03/2026")
    with pytest.raises(ValidationError):
        parse_iso_date(20260302)


def test_insufficient_balance_message_formats_half_days():
    err = InsufficientBalanceError("annual", available=Decimal("2.5"), total=Decimal("10.0"), pending=Decimal("7.5"))
    assert str(err) == "Insufficient annual leave balance. Available: 2.5 (10 total - 7.5 pending)"
