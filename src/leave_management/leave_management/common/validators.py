from __future__ import annotations

import re
import secrets
import string
from decimal import Decimal, InvalidOperation
from typing import Any

from ..core.constants import (
    GENERATED_PASSWORD_LENGTH,
    LEAVE_AMOUNT_STEP,
    MAX_BALANCE,
    MAX_LEAVE_AMOUNT,
    MIN_PASSWORD_LENGTH,
    PASSWORD_SPECIAL_CHARS,
)
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_email(value: str) -> str:
    email = require_non_empty(value, "Email").lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("Email is not valid")
    return email


def to_decimal(value: Any, field_name: str) -> Decimal:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field_name} must be a number")
    if not number.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    return number


def parse_leave_amount(value: Any) -> Decimal:
    """Leave is taken in half-day steps."""
    amount = to_decimal(value, "Amount")
    if amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    if amount > MAX_LEAVE_AMOUNT:
        raise ValidationError(f"Amount cannot exceed {MAX_LEAVE_AMOUNT}")
    if amount % LEAVE_AMOUNT_STEP != 0:
        raise ValidationError(f"Amount must be a multiple of {LEAVE_AMOUNT_STEP}")
    return amount


def parse_balance(value: Any, field_name: str) -> Decimal:
    amount = to_decimal(value, field_name)
    if amount < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    if amount > MAX_BALANCE:
        raise ValidationError(f"{field_name} cannot exceed {MAX_BALANCE}")
    if amount % LEAVE_AMOUNT_STEP != 0:
        raise ValidationError(f"{field_name} must be a multiple of {LEAVE_AMOUNT_STEP}")
    return amount


def parse_leave_type(value: Any) -> LeaveType:
    if isinstance(value, LeaveType):
        return value
    try:
        return LeaveType(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError("Leave type is not valid")


def parse_leave_status(value: Any) -> LeaveStatus:
    if isinstance(value, LeaveStatus):
        return value
    try:
        return LeaveStatus(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError("Status is not valid")


def password_strength_errors(password: str) -> list[str]:
    """Return every strength rule the password breaks, in display order."""
    password = password if isinstance(password, str) else ""
    errors: list[str] = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if not any(c.islower() for c in password):
        errors.append("Password must contain at least one lowercase letter")
    if not any(c.isupper() for c in password):
        errors.append("Password must contain at least one uppercase letter")
    if not any(c.isdigit() for c in password):
        errors.append("Password must contain at least one number")
    if not any(c in PASSWORD_SPECIAL_CHARS for c in password):
        errors.append("Password must contain at least one special character")
    return errors


def require_strong_password(password: str) -> str:
    errors = password_strength_errors(password)
    if errors:
        raise ValidationError(errors[0])
    return password


def generate_strong_password(length: int = GENERATED_PASSWORD_LENGTH) -> str:
    pools = [string.ascii_lowercase, string.ascii_uppercase, string.digits, PASSWORD_SPECIAL_CHARS]
    alphabet = "".join(pools)
    chars = [secrets.choice(pool) for pool in pools]
    chars += [secrets.choice(alphabet) for _ in range(max(length, len(pools)) - len(pools))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)
