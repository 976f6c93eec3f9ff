from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import error_response, internal_error, json_body, parse_enum, require_field
from ..container import Container
from ..core.enums import ApprovalStatus, RequestKind
from ..core.exceptions import DomainError
from .serializers import request_to_dict, summary_to_dict


def register(app: Flask, container: Container) -> None:
    approvals = container.approval_service

    @app.route("/api/approvals/pending/<approver_id>", methods=["GET"], endpoint="approvals_pending")
    def pending(approver_id: str):
        try:
            kind = parse_enum(RequestKind, request.args.get("kind"), "kind")
            return jsonify([summary_to_dict(s) for s in approvals.list_pending_for(approver_id, kind=kind)])
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while loading pending approvals")

    @app.route("/api/approvals/history/<approver_id>", methods=["GET"], endpoint="approvals_history")
    def history(approver_id: str):
        try:
            status = parse_enum(ApprovalStatus, request.args.get("status"), "status")
            kind = parse_enum(RequestKind, request.args.get("kind"), "kind")
            rows = approvals.list_history_for(approver_id, status, kind=kind)
            return jsonify([summary_to_dict(s) for s in rows])
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while loading approval history")

    @app.route("/api/approvals/<int:request_id>", methods=["GET"], endpoint="approvals_get")
    def get_request(request_id: int):
        try:
            return jsonify(request_to_dict(approvals.get_request(request_id)))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while loading the request")

    @app.route("/api/approvals/<int:request_id>/decide", methods=["POST"], endpoint="approvals_decide")
    def decide(request_id: int):
        try:
            data = json_body()
            updated = approvals.decide(
                request_id=request_id,
                approver_id=str(require_field(data, "approverId")),
                decision=approvals.parse_decision(require_field(data, "action")),
                comments=data.get("comments"),
            )
            return jsonify(request_to_dict(updated))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while processing the decision")
