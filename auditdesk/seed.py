"""
AuditDesk — Demo Seed
Creates the three role users, one department with an ISO question and a
sample supplier-audit template. Safe to run repeatedly.

    python -m auditdesk.seed
"""
from auditdesk.config import ADMIN_EMAIL, ADMIN_PASSWORD, DB_PATH
from auditdesk.auth import create_user
from auditdesk.db import get_db
from auditdesk import iso, templates

SAMPLE_TEMPLATE = {
    "name": "Supplier – Plastic Moulding",
    "points": [
        {"code": "1", "title": "Quality management", "subQuestions": [
            {"text": "Is the supplier certified to ISO 9001?", "type": "multi", "options": [
                {"label": "Certified", "score": 2},
                {"label": "Certification in progress", "score": 1},
                {"label": "Not certified", "score": 0},
            ]},
            {"text": "Who is responsible for quality?", "type": "open"},
        ]},
        {"code": "2", "title": "Production", "subQuestions": [
            {"text": "Are moulds maintained to a schedule?", "type": "multi", "options": [
                {"label": "Documented schedule", "score": 1},
                {"label": "Ad hoc", "score": 0.5},
            ]},
        ]},
    ],
}


def seed():
    create_user(ADMIN_EMAIL, ADMIN_PASSWORD, "admin")
    create_user("auditor@example.com", "auditor123", "auditor")
    create_user("external@example.com", "external123", "external")

    db = get_db()
    if not any(d["id"] == "purchasing" for d in db.get("departments", [])):
        iso.create_department("purchasing", "Purchasing")
    if not any(q["id"] == "Q-001" for q in get_db().get("questions", [])):
        iso.create_question({
            "id": "Q-001", "department_id": "purchasing",
            "text": "Have interested parties and their requirements been identified and reviewed?",
            "clause": "ISO 9001:2015 – 4.2", "stds": ["9001"],
            "guidance": "Check the register of interested parties and the review records.",
        })
    if not any(t.get("name") == SAMPLE_TEMPLATE["name"] for t in templates.list_templates()):
        templates.save_template(None, SAMPLE_TEMPLATE["points"], SAMPLE_TEMPLATE["name"])
    print(f"[SEED] Seed done at {DB_PATH}")


if __name__ == "__main__":
    seed()
