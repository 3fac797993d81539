from __future__ import annotations

from flask import Flask, g, jsonify, request, session

from ..common.http import capability_required, error_response, json_body, login_required, to_json
from ..core.capabilities import Capability, menu_for
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from ..container import Container
from .model import User
from .service import parse_balances


def _user_row(user: User) -> dict:
    return {
        "user_id": user.user_id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "balance": to_json(user.balance.as_dict()),
        "reporting_to": user.reporting_to,
        "manager_name": user.manager_name,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        try:
            s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        except AuthenticationError as e:
            return error_response(str(e), 401)

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        session["user_id"] = s_user.user_id

        return jsonify({"user_id": s_user.user_id, "name": s_user.name, "role": s_user.role.value})

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"message": "Signed out"})

    @app.route("/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        user = container.users_repo.get_by_id(g.current_user.user_id)
        return jsonify(_user_row(user))

    @app.route("/menu", methods=["GET"], endpoint="menu")
    @login_required
    def menu():
        return jsonify({"items": menu_for(g.current_user.role)})

    @app.route("/me/password", methods=["POST"], endpoint="change_password")
    @login_required
    def change_password():
        data = json_body()
        container.user_service.change_password(
            user_id=g.current_user.user_id,
            current_password=data.get("current_password", ""),
            new_password=data.get("new_password", ""),
            confirm_password=data.get("confirm_password", ""),
        )
        return jsonify({"message": "Password changed successfully"})

    @app.route("/admin/users", methods=["GET"], endpoint="admin_users")
    @capability_required(Capability.MANAGE_EMPLOYEES)
    def admin_users():
        search = (request.args.get("q") or "").strip().lower()
        users = container.user_service.list_users(current_role=g.current_user.role)
        if search:
            users = [u for u in users if search in u.name.lower() or search in u.email.lower()]
        return jsonify({"users": [_user_row(u) for u in users]})

    @app.route("/admin/users", methods=["POST"], endpoint="enroll_user")
    @capability_required(Capability.ENROLL_USERS)
    def enroll_user():
        data = json_body()
        try:
            role = Role(data.get("role") or Role.EMPLOYEE.value)
        except ValueError:
            raise ValidationError("Role is not valid")

        user_id = container.user_service.enroll_user(
            current_role=g.current_user.role,
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=role,
            balance=parse_balances(data),
            reporting_to=data.get("reporting_to"),
        )
        return jsonify({"user_id": user_id, "message": "User enrolled successfully"}), 201

    @app.route("/admin/users/<int:user_id>/settings", methods=["POST"], endpoint="employee_settings")
    @capability_required(Capability.MANAGE_EMPLOYEES)
    def employee_settings(user_id: int):
        data = json_body()
        container.user_service.update_employee_settings(
            current_role=g.current_user.role,
            user_id=user_id,
            reporting_to=data.get("reporting_to"),
            balance=parse_balances(data),
        )
        return jsonify({"message": "Employee settings updated"})

    @app.route("/admin/users/<int:user_id>/password", methods=["POST"], endpoint="reset_password")
    @capability_required(Capability.MANAGE_PASSWORDS)
    def reset_password(user_id: int):
        container.user_service.reset_password(
            current_role=g.current_user.role,
            user_id=user_id,
            new_password=json_body().get("new_password", ""),
        )
        return jsonify({"message": "Password reset successfully"})

    @app.route("/admin/password/generate", methods=["GET"], endpoint="generate_password")
    @capability_required(Capability.MANAGE_PASSWORDS)
    def generate_password():
        return jsonify({"password": container.user_service.generate_password()})
