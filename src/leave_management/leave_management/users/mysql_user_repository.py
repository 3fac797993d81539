from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import LeaveType, Role
from ..core.exceptions import DuplicateUserError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import Balance, User
from .repository import UserRepository

_SELECT_USER = """
    SELECT u.user_id, u.name, u.email, u.password_hash, u.role,
           u.casual_balance, u.sick_balance, u.annual_balance,
           u.reporting_to, m.name AS manager_name
    FROM users u
    LEFT JOIN users m ON m.user_id = u.reporting_to
"""


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        balance=Balance(
            casual=to_decimal(row["casual_balance"]),
            sick=to_decimal(row["sick_balance"]),
            annual=to_decimal(row["annual_balance"]),
        ),
        reporting_to=int(row["reporting_to"]) if row.get("reporting_to") is not None else None,
        manager_name=row.get("manager_name"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_USER + " WHERE u.user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_USER + " WHERE u.email=%s", (email.strip().lower(),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_USER + " ORDER BY u.user_id DESC")
            return [_row_to_user(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO users(
                        name, email, password_hash, role,
                        casual_balance, sick_balance, annual_balance, reporting_to
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        name,
                        email.strip().lower(),
                        password_hash,
                        role.value,
                        balance.casual,
                        balance.sick,
                        balance.annual,
                        reporting_to,
                    ),
                )
            except mysql.connector.IntegrityError as e:
                if e.errno == errorcode.ER_DUP_ENTRY:
                    raise DuplicateUserError("A user with this email already exists") from e
                raise
            return int(cur.lastrowid)

    def update_balance(self, user_id: int, *, leave_type: LeaveType, value: Decimal) -> bool:
        column = LeaveType(leave_type).balance_column
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE users SET {column}=%s WHERE user_id=%s",
                (value, int(user_id)),
            )
            return cur.rowcount > 0

    def update_password_hash(self, user_id: int, *, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET password_hash=%s WHERE user_id=%s",
                (password_hash, int(user_id)),
            )
            return cur.rowcount > 0

    def update_manager_and_balances(self, user_id: int, *, reporting_to: Optional[int], balance: Balance) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET reporting_to=%s, casual_balance=%s, sick_balance=%s, annual_balance=%s
                WHERE user_id=%s
                """,
                (reporting_to, balance.casual, balance.sick, balance.annual, int(user_id)),
            )
            return cur.rowcount > 0
