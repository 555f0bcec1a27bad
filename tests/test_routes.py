from datetime import datetime, timedelta, timezone

import jwt

from tests.conftest import ON_CAMPUS

LAT, LNG = ON_CAMPUS


def create_session(client, headers, subject_id="SUB001"):
    resp = client.post("/faculty/session", json={"subject_id": subject_id, "date": "2024-01-15"}, headers=headers)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


def scan(client, headers, qr_data, lat=LAT, lng=LNG):
    return client.post("/attendance/scan", json={"qr_data": qr_data, "lat": lat, "lng": lng}, headers=headers)


def test_login_returns_profile_without_password(client):
    resp = client.post("/auth/login", json={"id": "STU001", "password": "student123"})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["user"]["name"] == "Arjun Patel"
    assert "password" not in body["user"]
    claims = jwt.decode(body["token"], "test-jwt-secret", algorithms=["HS256"])
    assert claims["id"] == "STU001"
    assert claims["role"] == "student"


def test_login_rejects_bad_password(client):
    resp = client.post("/auth/login", json={"id": "STU001", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "error": "authentication_error", "msg": "Invalid credentials"}


def test_login_requires_fields(client):
    resp = client.post("/auth/login", json={"id": "STU001"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"


def test_missing_and_bad_bearer_token(client):
    assert client.get("/subjects").status_code == 401
    resp = client.get("/subjects", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.get_json()["msg"] == "Invalid token"


def test_expired_bearer_token(client):
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    token = jwt.encode({"id": "STU001", "role": "student", "exp": past}, "test-jwt-secret", algorithm="HS256")
    resp = client.get("/subjects", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_subjects_by_role(client, faculty_headers, student_headers):
    faculty_subjects = client.get("/subjects", headers=faculty_headers).get_json()["subjects"]
    assert [s["id"] for s in faculty_subjects] == ["SUB001", "SUB002"]
    assert len(client.get("/subjects", headers=student_headers).get_json()["subjects"]) == 3


def test_role_checks(client, faculty_headers, student_headers):
    resp = client.post("/faculty/session", json={"subject_id": "SUB001", "date": "2024-01-15"}, headers=student_headers)
    assert resp.status_code == 403
    assert resp.get_json()["msg"] == "Faculty access required"
    assert scan(client, faculty_headers, "x:y").status_code == 403


def test_create_session_returns_token_and_qr(client, faculty_headers):
    body = create_session(client, faculty_headers)
    assert body["session_id"].startswith("SUB001:")
    assert body["in_qr_data"].startswith('{"sessionId":"SUB001:')
    assert body["qr"]
    assert body["session"]["status"] == "active"
    assert "test-qr-secret" not in str(body)


def test_create_session_validation_error(client, faculty_headers):
    resp = client.post("/faculty/session", json={"date": "2024-01-15"}, headers=faculty_headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"


def test_full_attendance_flow(client, clock, faculty_headers, student_headers):
    created = create_session(client, faculty_headers)

    resp = scan(client, student_headers, created["in_qr_data"])
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["msg"] == "IN scan recorded successfully"
    assert body["attendance"]["is_complete"] is False

    clock.advance(50 * 60 * 1000)
    resp = client.post(f"/faculty/session/{created['session_id']}/generate-out", headers=faculty_headers)
    assert resp.status_code == 200
    out = resp.get_json()
    assert out["session"]["status"] == "completed"

    resp = scan(client, student_headers, out["out_qr_data"])
    assert resp.get_json()["attendance"]["is_complete"] is True

    report = client.get(f"/session/{created['session_id']}/attendance", headers=faculty_headers).get_json()
    assert report["complete_attendance"] == 1
    assert report["attendance"][0]["student_name"] == "Arjun Patel"

    profile = client.get("/student/profile", headers=student_headers).get_json()
    sub001 = next(row for row in profile["attendance"] if row["subject_id"] == "SUB001")
    assert sub001["percentage"] == 100


def test_scan_errors_are_distinguishable(client, clock, faculty_headers, student_headers):
    created = create_session(client, faculty_headers)
    wire = created["in_qr_data"]
    payload, _, _ = wire.rpartition(":")

    resp = scan(client, student_headers, wire, lat=0, lng=0)
    assert (resp.status_code, resp.get_json()["error"]) == (400, "outside_campus_boundary")

    resp = scan(client, student_headers, f"{payload}:{'0' * 64}")
    assert (resp.status_code, resp.get_json()["error"]) == (400, "signature_mismatch")

    resp = scan(client, student_headers, "DEMO-IN")
    assert (resp.status_code, resp.get_json()["error"]) == (400, "malformed_token")

    assert scan(client, student_headers, wire).status_code == 200
    resp = scan(client, student_headers, wire)
    assert (resp.status_code, resp.get_json()["error"]) == (409, "already_scanned")

    clock.advance(31 * 60 * 1000)
    resp = scan(client, student_headers, wire)
    assert (resp.status_code, resp.get_json()["error"]) == (400, "token_expired")


def test_generate_out_for_other_faculty_session(client, faculty_headers, other_faculty_headers):
    created = create_session(client, faculty_headers)
    resp = client.post(f"/faculty/session/{created['session_id']}/generate-out", headers=other_faculty_headers)
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "session_not_found"

    resp = client.get(f"/session/{created['session_id']}/attendance", headers=other_faculty_headers)
    assert resp.status_code == 403


def test_faculty_dashboard(client, faculty_headers):
    create_session(client, faculty_headers, "SUB002")
    body = client.get("/faculty/dashboard", headers=faculty_headers).get_json()
    assert body["profile"]["department"] == "Computer Science"
    assert body["recent_sessions"][0]["subject_id"] == "SUB002"


def test_scan_with_non_ascii_signature_is_rejected(client, student_headers):
    resp = scan(client, student_headers, '{"a":1}:é')
    assert (resp.status_code, resp.get_json()["error"]) == (400, "signature_mismatch")


def test_scan_with_high_bit_flipped_in_signature(client, faculty_headers, student_headers):
    wire = create_session(client, faculty_headers)["in_qr_data"]
    payload, _, signature = wire.rpartition(":")
    flipped = chr(ord(signature[0]) ^ 0x80) + signature[1:]
    resp = scan(client, student_headers, f"{payload}:{flipped}")
    assert (resp.status_code, resp.get_json()["error"]) == (400, "signature_mismatch")


def test_create_session_rejects_non_string_fields(client, faculty_headers):
    for body in (
        {"subject_id": ["SUB001"], "date": "2024-01-15"},
        {"subject_id": {"x": 1}, "date": "2024-01-15"},
        {"subject_id": "SUB001", "date": 20240115},
        {"subject_id": "SUB001", "date": "2024-01-15", "start_time": 900},
    ):
        resp = client.post("/faculty/session", json=body, headers=faculty_headers)
        assert resp.status_code == 400, body
        assert resp.get_json()["error"] == "validation_error"

    dashboard = client.get("/faculty/dashboard", headers=faculty_headers).get_json()
    assert dashboard["recent_sessions"] == []
