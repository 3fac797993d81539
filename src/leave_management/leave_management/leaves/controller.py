from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import capability_required, json_body, to_json
from ..core.capabilities import Capability
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/leaves", methods=["GET"], endpoint="leave_history")
    @capability_required(Capability.VIEW_HISTORY)
    def leave_history():
        leaves = container.leave_service.list_history(
            user_id=g.current_user.user_id,
            status=request.args.get("status"),
            leave_type=request.args.get("type"),
        )
        return jsonify({"leaves": to_json(leaves)})

    @app.route("/leaves", methods=["POST"], endpoint="submit_leave")
    @capability_required(Capability.SUBMIT_LEAVE)
    def submit_leave():
        data = json_body()
        leave_id = container.leave_service.submit(
            current_role=g.current_user.role,
            user_id=g.current_user.user_id,
            leave_date=parse_iso_date(data.get("date") or ""),
            amount=data.get("amount"),
            leave_type=data.get("type"),
        )
        return jsonify({"leave_id": leave_id, "message": "Leave request submitted for approval"}), 201

    @app.route("/leaves/balance", methods=["GET"], endpoint="leave_balance")
    @capability_required(Capability.SUBMIT_LEAVE)
    def leave_balance():
        summary = container.leave_service.balance_summary(user_id=g.current_user.user_id)
        return jsonify({"balances": to_json(summary)})

    @app.route("/dashboard", methods=["GET"], endpoint="dashboard")
    @capability_required(Capability.SUBMIT_LEAVE)
    def dashboard():
        return jsonify(to_json(container.leave_service.dashboard(user_id=g.current_user.user_id)))

    @app.route("/approvals", methods=["GET"], endpoint="pending_approvals")
    @capability_required(Capability.REVIEW_LEAVES)
    def pending_approvals():
        requests_ = container.leave_service.list_pending_approvals(
            current_role=g.current_user.role,
            manager_id=g.current_user.user_id,
        )
        return jsonify({"requests": to_json(requests_)})

    @app.route("/approvals/<int:leave_id>/approve", methods=["POST"], endpoint="approve_leave")
    @capability_required(Capability.REVIEW_LEAVES)
    def approve_leave(leave_id: int):
        container.leave_service.approve(
            current_role=g.current_user.role,
            approver_id=g.current_user.user_id,
            leave_id=leave_id,
        )
        return jsonify({"message": "Leave request approved"})

    @app.route("/approvals/<int:leave_id>/reject", methods=["POST"], endpoint="reject_leave")
    @capability_required(Capability.REVIEW_LEAVES)
    def reject_leave(leave_id: int):
        container.leave_service.reject(
            current_role=g.current_user.role,
            approver_id=g.current_user.user_id,
            leave_id=leave_id,
            reason=json_body().get("reason"),
        )
        return jsonify({"message": "Leave request rejected"})
