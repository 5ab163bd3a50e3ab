# tests/test_server.py
import pytest
from fastapi.testclient import TestClient

from auditdesk.auth import create_user
from auditdesk.server import app

client = TestClient(app)


def _login(email, password):
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200
    return {"Authorization": "Bearer " + r.json()["token"]}


@pytest.fixture
def headers():
    create_user("admin@example.com", "admin123", "admin")
    create_user("auditor@example.com", "auditor123", "auditor")
    create_user("external@example.com", "external123", "external")
    return {
        "admin": _login("admin@example.com", "admin123"),
        "auditor": _login("auditor@example.com", "auditor123"),
        "external": _login("external@example.com", "external123"),
    }


TEMPLATE_BODY = {
    "name": "Supplier – Plastic Moulding",
    "points": [{"code": "1", "title": "Quality", "subQuestions": [
        {"text": "Certified?", "type": "multi", "options": [
            {"label": "Yes", "score": "2"}, {"label": "No", "score": ""}]},
        {"text": "Contact", "type": "open"},
    ]}],
}


def test_health():
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_login_rejects_bad_password(headers):
    r = client.post("/auth/login", json={"email": "admin@example.com", "password": "x"})
    assert r.status_code == 401


def test_template_crud(headers):
    r = client.post("/api/supplier-audit-templates", json=TEMPLATE_BODY, headers=headers["admin"])
    assert r.status_code == 201
    tpl = r.json()
    options = tpl["points"][0]["subQuestions"][0]["options"]
    assert [o["score"] for o in options] == [2, 0]

    assert [t["id"] for t in client.get("/api/supplier-audit-templates").json()] == [tpl["id"]]
    assert client.get(f"/api/supplier-audit-templates/{tpl['id']}").json() == tpl

    r = client.put(f"/api/supplier-audit-templates/{tpl['id']}", json={"name": "Renamed"},
                   headers=headers["admin"])
    assert r.json()["name"] == "Renamed"
    assert r.json()["points"] == tpl["points"]

    r = client.delete(f"/api/supplier-audit-templates/{tpl['id']}", headers=headers["admin"])
    assert r.status_code == 204
    r = client.get(f"/api/supplier-audit-templates/{tpl['id']}")
    assert r.status_code == 404
    assert r.json()["kind"] == "not_found"


def test_template_writes_are_admin_only(headers):
    assert client.post("/api/supplier-audit-templates", json=TEMPLATE_BODY).status_code == 401
    r = client.post("/api/supplier-audit-templates", json=TEMPLATE_BODY, headers=headers["auditor"])
    assert r.status_code == 403
    r = client.put("/api/supplier-audit-templates/missing", json={"name": "x"}, headers=headers["admin"])
    assert r.status_code == 404


def test_invalid_question_type_is_400(headers):
    body = {"name": "Bad", "points": [{"title": "x", "subQuestions": [{"type": "single"}]}]}
    r = client.post("/api/supplier-audit-templates", json=body, headers=headers["admin"])
    assert r.status_code == 400
    assert r.json()["kind"] == "validation"


def test_derive_and_score(headers):
    tpl = client.post("/api/supplier-audit-templates", json=TEMPLATE_BODY, headers=headers["admin"]).json()
    r = client.post(f"/api/supplier-audit-templates/{tpl['id']}/derive", json={}, headers=headers["external"])
    assert r.status_code == 200
    instance = r.json()["instance"]
    assert r.json()["imageMap"] == {}
    assert instance["points"][0]["id"] != tpl["points"][0]["id"]

    sub = instance["points"][0]["subQuestions"][0]
    sub["answerOptions"] = [o["id"] for o in sub["options"]]
    r = client.post("/api/supplier-audits/score", json={"instance": instance})
    assert r.json() == {"achieved": 2, "maximum": 2}

    assert client.post("/api/supplier-audits/score", json={"nothing": 1}).status_code == 400


def test_snapshot_check():
    r = client.post("/api/supplier-audits/snapshot", json={"imageMap": {}})
    assert r.status_code == 400
    assert r.json()["kind"] == "malformed_snapshot"
    r = client.post("/api/supplier-audits/snapshot", json={"instance": {"id": "a", "points": []}})
    assert r.json()["score"] == {"achieved": 0, "maximum": 0}


def test_broken_instance_is_rejected_as_malformed():
    r = client.post("/api/supplier-audits/snapshot", json={"instance": {"points": ["x"]}})
    assert r.status_code == 400
    assert r.json()["kind"] == "malformed_snapshot"
    r = client.post("/api/supplier-audits/score", json={"instance": {"points": [{"id": "p"}]}})
    assert r.status_code == 400
    assert r.json()["kind"] == "malformed_snapshot"


def test_iso_flow(headers):
    admin = headers["admin"]
    assert client.post("/api/departments", json={"id": "hr", "name": "HR"}, headers=admin).status_code == 200
    r = client.post("/api/departments", json={"id": "hr", "name": "HR"}, headers=admin)
    assert r.status_code == 400
    r = client.post("/api/questions", json={"id": "Q-1", "department_id": "hr", "text": "Training plan?",
                                            "stds": "9001 45001"}, headers=admin)
    assert r.json()["question"]["stds"] == ["9001", "45001"]
    assert client.get("/api/departments").json() == [{"id": "hr", "name": "HR"}]
    assert client.get("/api/schema").json()["departments"][0]["questions"][0]["id"] == "Q-1"

    r = client.post("/api/audits", json={"department_id": "hr",
                                         "answers": [{"question_id": "Q-1", "mv": True}]},
                    headers=headers["auditor"])
    assert r.status_code == 400
    r = client.post("/api/audits", json={"department_id": "hr",
                                         "answers": [{"question_id": "Q-1", "mv": True, "note": "No plan"}]},
                    headers=headers["auditor"])
    audit_id = r.json()["audit_id"]
    assert client.post("/api/audits", json={"department_id": "hr"}, headers=headers["external"]).status_code == 403

    r = client.get(f"/api/audits/{audit_id}", headers=headers["external"])
    assert r.json()["summary"]["mv"][0]["note"] == "No plan"
    assert client.get("/api/audits/99", headers=headers["external"]).status_code == 404

    assert client.put("/api/departments/hr", json={"name": "People"}, headers=admin).json()["department"]["name"] == "People"
    assert client.delete("/api/questions/Q-1", headers=admin).json() == {"ok": True}
    assert client.delete("/api/departments/hr", headers=admin).json() == {"ok": True}
    assert client.get("/api/departments").json() == []
