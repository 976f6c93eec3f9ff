from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import (
    error_response,
    internal_error,
    json_body,
    parse_date_field,
    parse_enum,
    parse_int_field,
    require_field,
)
from ..container import Container
from ..core.enums import ApprovalStatus, RequestKind
from ..core.exceptions import DomainError
from ..requests.serializers import request_to_dict, summary_to_dict


def register(app: Flask, container: Container) -> None:
    svc = container.leave_service

    @app.route("/api/leave/apply", methods=["POST"], endpoint="leave_apply")
    def apply():
        try:
            data = json_body()
            leave = svc.submit_leave(
                str(require_field(data, "employeeId")),
                kind=svc.parse_kind(require_field(data, "type")),
                start_date=parse_date_field(require_field(data, "startDate"), "startDate"),
                end_date=parse_date_field(require_field(data, "endDate"), "endDate"),
                reason=str(data.get("reason") or ""),
            )
            return jsonify(request_to_dict(leave)), 201
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while applying for leave")

    @app.route("/api/leave/history/<employee_id>", methods=["GET"], endpoint="leave_history")
    def history(employee_id: str):
        try:
            return jsonify([request_to_dict(r) for r in svc.history(employee_id)])
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while loading leave history")

    @app.route("/api/leave/balance/<employee_id>", methods=["GET"], endpoint="leave_balance")
    def balance(employee_id: str):
        try:
            return jsonify({k.value: v for k, v in svc.balance(employee_id).items()})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while loading leave balance")

    @app.route("/api/leave/check-pending/<employee_id>", methods=["GET"], endpoint="leave_check_pending")
    def check_pending(employee_id: str):
        try:
            pending = svc.pending_leave(employee_id)
            return jsonify({"hasPending": pending is not None, "leave": request_to_dict(pending) if pending else None})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while checking pending leave")

    @app.route("/api/leave/pending/<approver_id>", methods=["GET"], endpoint="leave_pending")
    def pending(approver_id: str):
        try:
            rows = container.approval_service.list_pending_for(approver_id, kind=RequestKind.LEAVE)
            return jsonify([summary_to_dict(s) for s in rows])
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while loading pending leave")

    @app.route("/api/leave/approver-history/<approver_id>", methods=["GET"], endpoint="leave_approver_history")
    def approver_history(approver_id: str):
        try:
            rows = container.approval_service.list_history_for(
                approver_id,
                parse_enum(ApprovalStatus, request.args.get("status"), "status"),
                kind=RequestKind.LEAVE,
            )
            return jsonify([summary_to_dict(s) for s in rows])
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while loading approver history")

    @app.route("/api/leave/approve", methods=["POST"], endpoint="leave_approve")
    def approve():
        try:
            data = json_body()
            request_id = parse_int_field(require_field(data, "leaveId"), "leaveId")
            approvals = container.approval_service
            leave = approvals.decide(
                request_id=request_id,
                approver_id=str(require_field(data, "approverId")),
                decision=approvals.parse_decision(require_field(data, "action")),
                comments=data.get("comments"),
                expected_kind=RequestKind.LEAVE,
            )
            return jsonify(request_to_dict(leave))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while processing leave approval")
