from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import LeaveRecord, PendingLeaveRequest
from .repository import LeaveRepository

_LEAVE_COLUMNS = """
    r.leave_id, r.user_id, r.leave_date, r.amount, r.leave_type, r.status,
    r.created_at, r.decided_by, r.decided_at, r.rejection_reason
"""


def _row_to_leave(r: dict) -> LeaveRecord:
    return LeaveRecord(
        leave_id=int(r["leave_id"]),
        user_id=int(r["user_id"]),
        leave_date=r["leave_date"],
        amount=to_decimal(r["amount"]),
        leave_type=LeaveType(r["leave_type"]),
        status=LeaveStatus(r["status"]),
        created_at=r["created_at"],
        decided_by=int(r["decided_by"]) if r.get("decided_by") is not None else None,
        decided_at=r.get("decided_at"),
        rejection_reason=r.get("rejection_reason"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert_pending(
        self,
        *,
        user_id: int,
        leave_date: date,
        amount: Decimal,
        leave_type: LeaveType,
    ) -> Optional[int]:
        leave_type = LeaveType(leave_type)
        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock serializes concurrent submissions and approvals for this user.
            cur.execute(
                f"SELECT {leave_type.balance_column} AS balance FROM users WHERE user_id=%s FOR UPDATE",
                (int(user_id),),
            )
            user_row = fetchone(cur)
            if not user_row:
                return None

            cur.execute(
                """
                SELECT COALESCE(SUM(amount), 0) AS pending
                FROM leave_requests
                WHERE user_id=%s AND leave_type=%s AND status=%s
                """,
                (int(user_id), leave_type.value, LeaveStatus.PENDING.value),
            )
            pending = to_decimal(fetchone(cur)["pending"])

            if to_decimal(user_row["balance"]) - pending < amount:
                return None

            cur.execute(
                """
                INSERT INTO leave_requests(user_id, leave_date, amount, leave_type, status)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(user_id), leave_date, amount, leave_type.value, LeaveStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def get(self, leave_id: int) -> Optional[LeaveRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_LEAVE_COLUMNS} FROM leave_requests r WHERE r.leave_id=%s",
                (int(leave_id),),
            )
            r = fetchone(cur)
            return _row_to_leave(r) if r else None

    def list_by_user(
        self,
        user_id: int,
        *,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRecord]:
        clauses = ["r.user_id=%s"]
        params: list[object] = [int(user_id)]

        if status is not None:
            clauses.append("r.status=%s")
            params.append(LeaveStatus(status).value)
        if leave_type is not None:
            clauses.append("r.leave_type=%s")
            params.append(LeaveType(leave_type).value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_LEAVE_COLUMNS}
                FROM leave_requests r
                WHERE {where}
                ORDER BY r.created_at DESC, r.leave_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_leave(r) for r in fetchall(cur)]

    def sum_pending(self, user_id: int) -> dict[LeaveType, Decimal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT leave_type, COALESCE(SUM(amount), 0) AS pending
                FROM leave_requests
                WHERE user_id=%s AND status=%s
                GROUP BY leave_type
                """,
                (int(user_id), LeaveStatus.PENDING.value),
            )
            totals = {t: Decimal("0") for t in LeaveType}
            for r in fetchall(cur):
                totals[LeaveType(r["leave_type"])] = to_decimal(r["pending"])
            return totals

    def count_pending(self, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM leave_requests WHERE user_id=%s AND status=%s",
                (int(user_id), LeaveStatus.PENDING.value),
            )
            return int(fetchone(cur)["n"])

    def list_pending_for_manager(self, manager_id: int, *, limit: int = 500) -> Sequence[PendingLeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_LEAVE_COLUMNS}, u.name AS user_name, u.email AS user_email
                FROM leave_requests r
                JOIN users u ON u.user_id = r.user_id
                WHERE u.reporting_to=%s AND r.status=%s
                ORDER BY r.created_at DESC, r.leave_id DESC
                LIMIT %s
                """,
                (int(manager_id), LeaveStatus.PENDING.value, int(limit)),
            )
            return [
                PendingLeaveRequest(
                    leave=_row_to_leave(r),
                    user_name=r["user_name"],
                    user_email=r["user_email"],
                )
                for r in fetchall(cur)
            ]

    def approve(self, leave_id: int, *, leave_type: LeaveType, approver_id: int) -> bool:
        column = LeaveType(leave_type).balance_column
        with db_cursor(self._conn_factory) as (_, cur):
            # Single conditional statement: the deduction and the status flip
            # apply together, and only while the request is still pending.
            cur.execute(
                f"""
                UPDATE leave_requests r
                JOIN users u ON u.user_id = r.user_id
                SET u.{column} = u.{column} - r.amount,
                    r.status=%s, r.decided_by=%s, r.decided_at=NOW(6)
                WHERE r.leave_id=%s AND r.status=%s AND r.leave_type=%s
                  AND u.{column} >= r.amount
                """,
                (
                    LeaveStatus.APPROVED.value,
                    int(approver_id),
                    int(leave_id),
                    LeaveStatus.PENDING.value,
                    LeaveType(leave_type).value,
                ),
            )
            return cur.rowcount > 0

    def reject(self, leave_id: int, *, approver_id: int, reason: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_by=%s, decided_at=NOW(6), rejection_reason=%s
                WHERE leave_id=%s AND status=%s
                """,
                (
                    LeaveStatus.REJECTED.value,
                    int(approver_id),
                    reason,
                    int(leave_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0
