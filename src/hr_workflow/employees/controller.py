from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import error_response, internal_error, json_body
from ..container import Container
from ..core.exceptions import DomainError, ValidationError
from .model import Employee


def employee_to_dict(e: Employee) -> dict:
    return {
        "employeeId": e.employee_id,
        "name": e.full_name,
        "designation": e.designation,
        "site": e.site,
        "approvalHierarchy": list(e.approval_hierarchy),
        "leaveBalance": {k.value: v for k, v in e.leave_balance.items()},
        "isActive": e.is_active,
    }


def register(app: Flask, container: Container) -> None:
    svc = container.employee_service

    @app.route("/api/employees/<employee_id>", methods=["GET"], endpoint="employee_get")
    def get_employee(employee_id: str):
        try:
            return jsonify(employee_to_dict(svc.get(employee_id)))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while loading the employee")

    @app.route("/api/employees/<employee_id>/approval-hierarchy", methods=["PUT"], endpoint="employee_set_hierarchy")
    def set_hierarchy(employee_id: str):
        try:
            chain = json_body().get("approvalHierarchy")
            if not isinstance(chain, list):
                raise ValidationError("approvalHierarchy must be a list of employee ids")
            return jsonify(employee_to_dict(svc.set_approval_hierarchy(employee_id, chain)))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while updating the approval hierarchy")
