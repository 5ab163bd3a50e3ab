"""
AuditDesk — Instance Derivation

An instance is one answerable audit session cloned from a template. Cloning
assigns a fresh id to every point, sub-question and option and copies the
content fields by value, so the instance shares nothing with the template or
with any sibling instance derived from it.
"""
from datetime import datetime, timezone

from auditdesk.db import _n
from auditdesk.ids import new_id


def new_audit(ids=new_id, now: datetime = None) -> dict:
    """Empty draft the session starts with."""
    now = now or datetime.now(timezone.utc)
    return {
        "id": ids(),
        "supplierName": "",
        "date": now.isoformat(),
        "auditor": "",
        "status": "draft",
        "points": [],
    }


# ============================================================
# CLONE
# ============================================================
def clone_option(option: dict, ids=new_id) -> dict:
    return {"id": ids(), "label": option.get("label", ""), "score": _n(option.get("score"))}


def clone_sub_question(sub: dict, ids=new_id) -> dict:
    clone = {"id": ids(), "text": sub.get("text", ""), "type": sub.get("type")}
    if clone["type"] == "multi":
        clone["options"] = [clone_option(o, ids) for o in (sub.get("options") or [])]
        clone["answerOptions"] = []
    else:
        clone["answerText"] = None
    return clone


def clone_point(point: dict, ids=new_id) -> dict:
    return {
        "id": ids(),
        "code": point.get("code", ""),
        "title": point.get("title", ""),
        "comment": "",
        "subQuestions": [clone_sub_question(s, ids) for s in (point.get("subQuestions") or [])],
    }


def derive_instance(template: dict, ids=new_id, base: dict = None) -> dict:
    """Clone `template` into an instance.

    With `base`, the header of that instance (id, supplier, auditor, date,
    status) is kept and only its points are replaced. The caller resets the
    image map."""
    points = [clone_point(p, ids) for p in (template.get("points") or [])]
    header = {k: v for k, v in (base or new_audit(ids)).items() if k != "points"}
    return {**header, "points": points}


def collect_ids(node) -> list:
    """Every `id` in a template or instance tree, depth first."""
    found = []
    if isinstance(node, dict):
        if "id" in node:
            found.append(node["id"])
        for key in ("points", "subQuestions", "options"):
            for child in node.get(key) or []:
                found.extend(collect_ids(child))
    return found
