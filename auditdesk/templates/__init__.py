"""
AuditDesk — Supplier-Audit Templates

A template is a reusable, unanswered questionnaire:

  template ─┬─ point (code, title)
            │    └─ sub-question (open | multi)
            │         └─ option (label, score)      multi only
            └─ point ...

Order at every level is display and export order. Templates never hold
answers; `comment` is stored empty.

This module owns both the shape (normalize_points) and the persistence
gateway over the `supplier_audit_templates` collection.
"""
from auditdesk.config import QUESTION_TYPES, DEFAULT_TEMPLATE_NAME
from auditdesk.db import get_db, save_collection, _n
from auditdesk.errors import ValidationError, NotFound
from auditdesk.ids import new_id

COLLECTION = "supplier_audit_templates"


# ============================================================
# MODEL
# ============================================================
def option_score(option: dict) -> float:
    """Score of an option as a number. Missing, empty or non-numeric → 0."""
    return _n(option.get("score"))


def normalize_sub_question(sub: dict) -> dict:
    qtype = sub.get("type")
    if qtype not in QUESTION_TYPES:
        raise ValidationError(f"Sub-question type must be one of {QUESTION_TYPES}, got {qtype!r}")
    out = {"id": sub.get("id") or new_id(), "text": sub.get("text") or "", "type": qtype}
    if qtype == "multi":
        out["options"] = [{"id": o.get("id") or new_id(),
                           "label": o.get("label") or "",
                           "score": option_score(o)}
                          for o in (sub.get("options") or [])]
    return out


def normalize_point(point: dict) -> dict:
    if not isinstance(point, dict):
        raise ValidationError("Each point must be an object")
    return {
        "id": point.get("id") or new_id(),
        "code": point.get("code") or "",
        "title": point.get("title") or "",
        "comment": "",
        "subQuestions": [normalize_sub_question(s) for s in (point.get("subQuestions") or [])],
    }


def normalize_points(points) -> list:
    """Template-shaped copy of `points`, which may come from a template or an
    answered instance. Answers, comments and open-question options are dropped."""
    if points is None:
        return []
    if not isinstance(points, list):
        raise ValidationError("points must be a list")
    return [normalize_point(p) for p in points]


def build_template_payload(points, name: str) -> dict:
    if not name or not str(name).strip():
        raise ValidationError("Template name is required")
    return {"name": str(name).strip(), "points": normalize_points(points)}


# ============================================================
# PERSISTENCE GATEWAY
# ============================================================
def list_templates() -> list:
    return list(get_db().get(COLLECTION, []))


def get_template(tid: str) -> dict:
    for t in get_db().get(COLLECTION, []):
        if t.get("id") == tid:
            return t
    raise NotFound(f"Template {tid} not found")


def create_template(partial: dict = None) -> dict:
    """Insert a template. The id is assigned unless the caller supplies one;
    a supplied id that is already stored raises ValidationError."""
    template = {"id": new_id(), "name": DEFAULT_TEMPLATE_NAME, "points": [], **(partial or {})}
    if not template.get("id"):
        template["id"] = new_id()
    existing = get_db().get(COLLECTION, [])
    if any(t.get("id") == template["id"] for t in existing):
        raise ValidationError(f"Template {template['id']} already exists")
    save_collection(COLLECTION, existing + [template])
    print(f"[DB] Created template {template['id']} ({template.get('name')})")
    return template


def update_template(tid: str, fields: dict) -> dict:
    """Shallow merge of `fields` into the stored template."""
    current = get_template(tid)
    fresh = {**current, **{k: v for k, v in (fields or {}).items() if k != "id"}}
    templates = [fresh if t.get("id") == tid else t for t in get_db().get(COLLECTION, [])]
    save_collection(COLLECTION, templates)
    return fresh


def delete_template(tid: str) -> None:
    templates = get_db().get(COLLECTION, [])
    remaining = [t for t in templates if t.get("id") != tid]
    if len(remaining) != len(templates):
        save_collection(COLLECTION, remaining)


# ============================================================
# SAVE (admin)
# ============================================================
def save_template(existing_id, points, name: str = None) -> dict:
    """Create (existing_id is None) or fully replace name and points.

    On update the stored name is kept when `name` is not given. Raises
    NotFound for an unknown id and PersistenceUnavailable when the store
    cannot be written; in both cases nothing is mutated."""
    if existing_id is None:
        return create_template(build_template_payload(points, name))
    current = get_template(existing_id)
    payload = build_template_payload(points, name or current.get("name"))
    return update_template(existing_id, payload)
