from __future__ import annotations

from dataclasses import asdict
from typing import Any, Optional

from flask import Flask, jsonify, request

from ..common.http import error_response, internal_error, json_body, parse_int_field, require_field
from ..common.validators import optional_text, require_coordinate
from ..container import Container
from ..core.enums import RequestKind
from ..core.exceptions import DomainError, ValidationError
from ..policy.model import GeoPoint
from ..requests.serializers import to_plain, request_to_dict, summary_to_dict


def parse_location(data: dict[str, Any]) -> Optional[GeoPoint]:
    lat, lng = data.get("lat"), data.get("lng")
    if lat in (None, "") and lng in (None, ""):
        return None
    if lat in (None, "") or lng in (None, ""):
        raise ValidationError("Both lat and lng are required for a location")
    return GeoPoint(
        latitude=require_coordinate(lat, "lat", limit=90),
        longitude=require_coordinate(lng, "lng", limit=180),
        address=optional_text(data.get("address")),
    )


def register(app: Flask, container: Container) -> None:
    svc = container.attendance_service

    @app.route("/api/attendance/precheck", methods=["POST"], endpoint="attendance_precheck")
    def precheck():
        try:
            data = json_body()
            verdict = svc.precheck(str(require_field(data, "employeeId")), location=parse_location(data))
            return jsonify(
                {
                    "is_late": verdict.is_late,
                    "is_out_of_range": verdict.is_out_of_range,
                    "distance": round(verdict.distance_meters) if verdict.distance_meters is not None else None,
                    "justification_required": not verdict.is_compliant,
                }
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error during attendance precheck")

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    def check_in():
        try:
            data = json_body()
            record = svc.submit_attendance(
                str(require_field(data, "employeeId")),
                location=parse_location(data),
                justification=data.get("justification"),
            )
            return (
                jsonify(
                    {
                        "message": "Check-in successful",
                        "attendanceId": record.request_id,
                        "checkInTime": record.payload.check_in_time.isoformat(),
                        "approvalStatus": record.status.value,
                        "currentApprover": record.current_approver,
                    }
                ),
                201,
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error during check-in")

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    def check_out():
        try:
            data = json_body()
            record = svc.check_out(str(require_field(data, "employeeId")), location=parse_location(data))
            return jsonify(
                {
                    "message": "Check-out successful",
                    "checkOutTime": record.payload.check_out_time.isoformat(),
                    "workHours": record.payload.work_hours,
                }
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error during check-out")

    @app.route("/api/attendance/today/<employee_id>", methods=["GET"], endpoint="attendance_today")
    def today(employee_id: str):
        try:
            record = svc.get_today(employee_id)
            return jsonify(request_to_dict(record) if record else None)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while loading today's attendance")

    @app.route("/api/attendance/history/<employee_id>", methods=["GET"], endpoint="attendance_history")
    def history(employee_id: str):
        try:
            return jsonify([request_to_dict(r) for r in svc.history(employee_id)])
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while loading attendance history")

    @app.route("/api/attendance/report", methods=["GET"], endpoint="attendance_report")
    def report():
        try:
            month = request.args.get("month", type=int)
            year = request.args.get("year", type=int)
            if not month or not year:
                raise ValidationError("Month and Year are required.")
            rows = svc.monthly_report(year=year, month=month)
            return jsonify([to_plain(asdict(r)) for r in rows])
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while building the attendance report")

    @app.route("/api/attendance/pending/<approver_id>", methods=["GET"], endpoint="attendance_pending")
    def pending(approver_id: str):
        try:
            rows = container.approval_service.list_pending_for(approver_id, kind=RequestKind.ATTENDANCE)
            return jsonify([summary_to_dict(s) for s in rows])
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while loading pending attendance")

    @app.route("/api/attendance/approve", methods=["POST"], endpoint="attendance_approve")
    def approve():
        try:
            data = json_body()
            request_id = parse_int_field(require_field(data, "attendanceId"), "attendanceId")
            approvals = container.approval_service
            record = approvals.decide(
                request_id=request_id,
                approver_id=str(require_field(data, "approverId")),
                decision=approvals.parse_decision(require_field(data, "action")),
                comments=data.get("comments"),
                expected_kind=RequestKind.ATTENDANCE,
            )
            return jsonify({"message": "Approval processed", "attendance": request_to_dict(record)})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return internal_error("System error while processing approval")
