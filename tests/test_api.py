from __future__ import annotations

from datetime import datetime

import pytest

from hr_workflow.main import create_app

ON_SITE = {"lat": 23.8105, "lng": 90.4126, "address": "HQ gate"}
FAR = {"lat": 23.8553, "lng": 90.4125}


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    return app.test_client()


def test_health(client):
    assert client.get("/api/health").get_json() == {"status": "ok"}


def test_check_in_blocked_then_justified(client):
    res = client.post("/api/attendance/check-in", json={"employeeId": "E1", **FAR})
    assert res.status_code == 400
    body = res.get_json()
    assert body["code"] == "JUSTIFICATION_REQUIRED"
    assert body["reason"] == "OUT_OF_RANGE"
    assert body["details"]["is_out_of_range"] is True
    assert 4990 < body["details"]["distance"] < 5020

    res = client.post("/api/attendance/check-in", json={"employeeId": "E1", "justification": "remote site", **FAR})
    assert res.status_code == 201
    created = res.get_json()
    assert created["approvalStatus"] == "Pending"
    assert created["currentApprover"] == "M1"

    res = client.post("/api/attendance/check-in", json={"employeeId": "E1", "justification": "again", **FAR})
    assert res.status_code == 409
    assert res.get_json()["code"] == "DUPLICATE_SUBMISSION"


def test_precheck(client):
    res = client.post("/api/attendance/precheck", json={"employeeId": "E1", **ON_SITE})
    assert res.status_code == 200
    assert res.get_json()["justification_required"] is False


def test_bad_coordinates(client):
    res = client.post("/api/attendance/check-in", json={"employeeId": "E1", "lat": 123, "lng": 90})
    assert res.status_code == 400
    assert res.get_json()["code"] == "VALIDATION_ERROR"


def test_attendance_approval_flow(client):
    attendance_id = client.post(
        "/api/attendance/check-in", json={"employeeId": "E1", "justification": "remote site", **FAR}
    ).get_json()["attendanceId"]

    pending = client.get("/api/attendance/pending/M1").get_json()
    assert [p["request_id"] for p in pending] == [attendance_id]
    assert pending[0]["is_out_of_range"] is True
    assert "leave_kind" not in pending[0]

    res = client.post(
        "/api/attendance/approve",
        json={"attendanceId": attendance_id, "approverId": "H1", "action": "Approved"},
    )
    assert res.status_code == 403
    assert res.get_json()["code"] == "UNAUTHORIZED"

    client.post("/api/attendance/approve", json={"attendanceId": attendance_id, "approverId": "M1", "action": "Approved"})
    res = client.post(
        "/api/attendance/approve",
        json={"attendanceId": attendance_id, "approverId": "H1", "action": "approved", "comments": "ok"},
    )
    assert res.status_code == 200
    record = res.get_json()["attendance"]
    assert record["status"] == "Approved"
    assert record["current_approver"] is None
    assert record["payload"]["attendance_status"] == "Present"
    assert [log["approver_id"] for log in record["approval_logs"]] == ["M1", "H1"]

    res = client.post(
        "/api/attendance/approve", json={"attendanceId": attendance_id, "approverId": "H1", "action": "Rejected"}
    )
    assert res.status_code == 409
    assert res.get_json()["code"] == "ALREADY_TERMINAL"


def test_leave_flow(client):
    res = client.post(
        "/api/leave/apply",
        json={"employeeId": "E1", "type": "Casual", "startDate": "2026-03-10", "endDate": "2026-03-12", "reason": "Trip"},
    )
    assert res.status_code == 201
    leave_id = res.get_json()["request_id"]

    check = client.get("/api/leave/check-pending/E1").get_json()
    assert check["hasPending"] is True
    assert check["leave"]["request_id"] == leave_id

    res = client.post(
        "/api/leave/apply",
        json={"employeeId": "E1", "type": "Sick", "startDate": "2026-04-01", "endDate": "2026-04-01", "reason": "Flu"},
    )
    assert res.status_code == 409
    assert res.get_json()["code"] == "DUPLICATE_PENDING"

    for approver in ("M1", "H1"):
        res = client.post("/api/leave/approve", json={"leaveId": leave_id, "approverId": approver, "action": "Approved"})
        assert res.status_code == 200

    assert client.get("/api/leave/balance/E1").get_json() == {"Sick": 14, "Casual": 7, "Earned": 0}
    history = client.get("/api/leave/approver-history/H1?status=Approved").get_json()
    assert [h["request_id"] for h in history] == [leave_id]


def test_leave_insufficient_balance(client):
    res = client.post(
        "/api/leave/apply",
        json={"employeeId": "E1", "type": "Earned", "startDate": "2026-03-10", "endDate": "2026-03-10", "reason": "Rest"},
    )
    assert res.status_code == 400
    assert res.get_json()["code"] == "INSUFFICIENT_BALANCE"


def test_leave_bad_date(client):
    res = client.post(
        "/api/leave/apply",
        json={"employeeId": "E1", "type": "Casual", "startDate": "10/03/2026", "endDate": "2026-03-12", "reason": "x"},
    )
    assert res.status_code == 400


def test_generic_approvals_endpoints(client):
    leave_id = client.post(
        "/api/leave/apply",
        json={"employeeId": "E1", "type": "Sick", "startDate": "2026-03-10", "endDate": "2026-03-10", "reason": "Flu"},
    ).get_json()["request_id"]

    assert client.get(f"/api/approvals/{leave_id}").get_json()["kind"] == "Leave"
    assert client.get("/api/approvals/999").status_code == 404
    assert [p["request_id"] for p in client.get("/api/approvals/pending/M1?kind=leave").get_json()] == [leave_id]
    assert client.get("/api/approvals/pending/M1?kind=Attendance").get_json() == []
    assert client.get("/api/approvals/pending/M1?kind=Payroll").status_code == 400

    res = client.post(f"/api/approvals/{leave_id}/decide", json={"approverId": "M1", "action": "Rejected", "comments": "No"})
    assert res.get_json()["status"] == "Rejected"
    assert [h["status"] for h in client.get("/api/approvals/history/M1").get_json()] == ["Rejected"]


def test_employee_endpoints(client):
    res = client.put("/api/employees/SOLO/approval-hierarchy", json={"approvalHierarchy": ["M1"]})
    assert res.status_code == 200
    assert res.get_json()["approvalHierarchy"] == ["M1"]

    res = client.put("/api/employees/SOLO/approval-hierarchy", json={"approvalHierarchy": "M1"})
    assert res.status_code == 400

    assert client.get("/api/employees/NOPE").status_code == 404


def test_check_out_flow(client, clock):
    client.post("/api/attendance/check-in", json={"employeeId": "E1", **ON_SITE})
    clock.now = datetime(2026, 3, 2, 17, 50)

    res = client.post("/api/attendance/check-out", json={"employeeId": "E1"})
    assert res.status_code == 200
    assert res.get_json()["workHours"] == 9.0

    res = client.post("/api/attendance/check-out", json={"employeeId": "E1"})
    assert res.status_code == 400

    report = client.get("/api/attendance/report?month=3&year=2026").get_json()
    assert report[0]["employee_id"] == "E1"
    assert report[0]["status"] == "Present"
    assert client.get("/api/attendance/report").status_code == 400


def test_approve_rejects_non_integer_id(client):
    res = client.post("/api/leave/approve", json={"leaveId": "abc", "approverId": "M1", "action": "Approved"})
    assert res.status_code == 400
    assert res.get_json()["error"] == "leaveId must be an integer"

    res = client.post("/api/attendance/approve", json={"attendanceId": "x1", "approverId": "M1", "action": "Approved"})
    assert res.status_code == 400
    assert res.get_json()["error"] == "attendanceId must be an integer"


def test_unexpected_service_failure_is_not_reported_as_bad_id(client, container, monkeypatch):
    def broken(**kwargs):
        raise ValueError("corrupt payload row")

    monkeypatch.setattr(container.approval_service, "decide", broken)

    res = client.post("/api/attendance/approve", json={"attendanceId": 1, "approverId": "M1", "action": "Approved"})
    assert res.status_code == 500
    assert res.get_json()["code"] == "INTERNAL_ERROR"

    res = client.post("/api/leave/approve", json={"leaveId": "1", "approverId": "M1", "action": "Approved"})
    assert res.status_code == 500
