from __future__ import annotations

from dataclasses import dataclass

from .database.connection import DBConfig, DatabaseConnection
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection | None

    users_repo: MySQLUserRepository
    leaves_repo: MySQLLeaveRepository

    auth_service: AuthService
    user_service: UserService
    leave_service: LeaveService


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)

    return Container(
        conn=conn,
        users_repo=users_repo,
        leaves_repo=leaves_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        leave_service=LeaveService(leaves_repo, users_repo),
    )
