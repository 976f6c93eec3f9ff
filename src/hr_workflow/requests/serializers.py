"""JSON shapes returned by the HTTP layer."""

from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional

from ..policy.model import GeoPoint
from .model import ApprovalRequest, AttendancePayload, RequestSummary


def to_plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


def point_to_dict(p: Optional[GeoPoint]) -> Optional[dict]:
    if p is None:
        return None
    return {"lat": p.latitude, "lng": p.longitude, "address": p.address}


def request_to_dict(req: ApprovalRequest) -> Dict[str, Any]:
    payload = asdict(req.payload)
    if isinstance(req.payload, AttendancePayload):
        payload["location"] = point_to_dict(req.payload.location)
        payload["check_out_location"] = point_to_dict(req.payload.check_out_location)
        if req.payload.distance_meters is not None:
            payload["distance_meters"] = round(req.payload.distance_meters, 1)

    return to_plain(
        {
            "request_id": req.request_id,
            "kind": req.kind,
            "employee_id": req.subject_employee_id,
            "submitted_at": req.submitted_at,
            "status": req.status,
            "current_approver": req.current_approver,
            "approval_hierarchy": list(req.approval_hierarchy),
            "approval_logs": [asdict(e) for e in req.approval_log],
            "payload": payload,
        }
    )


_ENVELOPE_KEYS = {"request_id", "kind", "subject_employee_id", "subject_name", "status", "current_approver", "submitted_at"}


def summary_to_dict(summary: RequestSummary) -> Dict[str, Any]:
    # Kind-specific fields of the other kind are always None; leave them out.
    return {k: v for k, v in to_plain(asdict(summary)).items() if v is not None or k in _ENVELOPE_KEYS}
