"""
AuditDesk — Internal ISO Audits

Departments own ISO questions; each question is tagged with the standards it
belongs to (9001, 14001, 45001). An audit walks one department and records a
finding per question:

  vs: conforms to the standard
  pe: improvement proposal
  mv: nonconformity

mv excludes the other two. Any pe or mv needs a note before the audit can be
submitted.
"""
from datetime import datetime, timezone

from auditdesk.config import STANDARDS, SCHEMA_VERSION, ORG_NAME
from auditdesk.db import get_db, save_db, save_collection
from auditdesk.errors import ValidationError, NotFound

FINDING_FLAGS = ("vs", "pe", "mv")
QUESTION_FIELDS = ("department_id", "text", "clause", "stds", "guidance", "tags")


def _stds(value) -> list:
    """Standards as a list; a space-separated string is split."""
    if isinstance(value, (list, tuple)):
        return [str(s) for s in value if str(s)]
    return [s for s in str(value or "").split(" ") if s]


# ============================================================
# DEPARTMENTS
# ============================================================
def list_departments() -> list:
    return list(get_db().get("departments", []))


def create_department(dep_id: str, name: str) -> dict:
    if not dep_id or not name:
        raise ValidationError("id and name required")
    deps = get_db().get("departments", [])
    if any(d["id"] == dep_id for d in deps):
        raise ValidationError("id exists")
    dep = {"id": dep_id, "name": name}
    save_collection("departments", deps + [dep])
    return dep


def update_department(dep_id: str, name: str = None) -> dict:
    deps = get_db().get("departments", [])
    current = next((d for d in deps if d["id"] == dep_id), None)
    if current is None:
        raise NotFound(f"Department {dep_id} not found")
    fresh = {**current, "name": name if name is not None else current["name"]}
    save_collection("departments", [fresh if d["id"] == dep_id else d for d in deps])
    return fresh


def delete_department(dep_id: str) -> None:
    """Removes the department and all of its questions."""
    db = get_db()
    questions = [q for q in db.get("questions", []) if q.get("department_id") != dep_id]
    departments = [d for d in db.get("departments", []) if d["id"] != dep_id]
    save_db({**db, "questions": questions, "departments": departments})


# ============================================================
# QUESTIONS
# ============================================================
def create_question(fields: dict) -> dict:
    fields = fields or {}
    missing = [k for k in ("id", "department_id", "text", "stds") if not fields.get(k)]
    if missing:
        raise ValidationError(f"{', '.join(missing)} required")
    question = {
        "id": fields["id"], "department_id": fields["department_id"], "text": fields["text"],
        "clause": fields.get("clause") or None,
        "stds": _stds(fields["stds"]),
        "guidance": fields.get("guidance") or None,
        "tags": list(fields.get("tags") or []),
    }
    save_collection("questions", get_db().get("questions", []) + [question])
    return question


def update_question(qid: str, fields: dict) -> dict:
    questions = get_db().get("questions", [])
    current = next((q for q in questions if q["id"] == qid), None)
    if current is None:
        raise NotFound(f"Question {qid} not found")
    patch = {k: v for k, v in (fields or {}).items() if k in QUESTION_FIELDS}
    if "stds" in patch:
        patch["stds"] = _stds(patch["stds"])
    fresh = {**current, **patch}
    save_collection("questions", [fresh if q["id"] == qid else q for q in questions])
    return fresh


def delete_question(qid: str) -> None:
    save_collection("questions", [q for q in get_db().get("questions", []) if q["id"] != qid])


# ============================================================
# SCHEMA
# ============================================================
def build_schema(db: dict = None) -> dict:
    db = db or get_db()
    questions = db.get("questions", [])
    return {
        "meta": {"version": SCHEMA_VERSION, "org": ORG_NAME},
        "departments": [{
            "id": d["id"], "name": d["name"],
            "questions": [{
                "id": q["id"], "text": q["text"], "clause": q.get("clause") or None,
                "stds": q.get("stds") or [], "guidance": q.get("guidance") or None,
                "tags": q.get("tags") or [],
            } for q in questions if q.get("department_id") == d["id"]],
        } for d in db.get("departments", [])],
    }


def filter_questions(department: dict, standards=STANDARDS, query: str = "") -> list:
    """Questions tagged with any active standard, narrowed by a free-text query."""
    active = set(standards)
    qs = [q for q in department.get("questions", []) if any(s in active for s in q.get("stds", []))]
    qq = (query or "").strip().lower()
    if qq:
        qs = [q for q in qs
              if qq in " ".join([q["id"], q["text"], q.get("clause") or "", department.get("name", "")]).lower()]
    return qs


# ============================================================
# FINDINGS
# ============================================================
def toggle_finding(answer: dict, flag: str) -> dict:
    """Flip one finding flag. mv clears vs and pe; vs or pe clears mv."""
    if flag not in FINDING_FLAGS:
        raise ValidationError(f"flag must be one of {FINDING_FLAGS}")
    cur = dict(answer or {})
    if flag == "mv":
        return {**cur, "mv": not cur.get("mv"), "vs": False, "pe": False}
    if cur.get("mv"):
        cur["mv"] = False
    return {**cur, flag: not cur.get(flag)}


def needs_note(answer: dict) -> bool:
    return bool(answer and (answer.get("mv") or answer.get("pe"))
                and not (answer.get("note") or "").strip())


def validate_answers(answers: list) -> None:
    for a in answers:
        if needs_note(a):
            raise ValidationError(f'Question {a.get("question_id")} has PE or MV, fill in "Note: PE/MV"')


# ============================================================
# AUDITS
# ============================================================
def submit_audit(payload: dict) -> dict:
    """Store an audit and its answers. Returns the audit record."""
    payload = payload or {}
    if not payload.get("department_id"):
        raise ValidationError("department_id required")
    answers = payload.get("answers") or []
    if not isinstance(answers, list) or not all(isinstance(a, dict) for a in answers):
        raise ValidationError("answers must be a list of objects")
    validate_answers(answers)

    db = get_db()
    audits = db.get("audits", [])
    audit = {
        "id": (audits[-1]["id"] if audits else 0) + 1,
        "org": payload.get("org") or None,
        "department_id": payload["department_id"],
        "standards": list(payload.get("standards") or []),
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    stored = [{**a, "audit_id": audit["id"]} for a in answers]
    save_db({**db, "audits": audits + [audit], "answers": db.get("answers", []) + stored})
    print(f"[DB] Audit {audit['id']} saved with {len(stored)} answers")
    return audit


def get_audit(audit_id: int) -> dict:
    db = get_db()
    audit = next((a for a in db.get("audits", []) if a["id"] == audit_id), None)
    if audit is None:
        raise NotFound(f"Audit {audit_id} not found")
    answers = [a for a in db.get("answers", []) if a.get("audit_id") == audit_id]
    return {"audit": audit, "answers": answers,
            "summary": summarize_findings(answers, db.get("questions", []))}


def summarize_findings(answers: list, questions: list) -> dict:
    """Nonconformities (mv) and improvement proposals (pe) with their clause."""
    by_id = {q["id"]: q for q in questions}
    mv, pe = [], []
    for a in answers:
        q = by_id.get(a.get("question_id"), {})
        item = {"id": a.get("question_id"), "text": q.get("text", ""),
                "note": a.get("note") or None, "clause": q.get("clause") or None}
        if a.get("mv"):
            mv.append(item)
        elif a.get("pe"):
            pe.append(item)
    return {"mv": mv, "pe": pe}
