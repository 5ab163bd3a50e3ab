"""
AuditDesk — Answer Capture

Every operation takes an instance and returns a new one; the input is never
mutated. Untouched points and sub-questions are shared between the old and
the new tree, changed ones are rebuilt along the path from the root, so a
consumer can tell what changed by identity comparison.

Answers, comments and audit details may be changed by anyone holding the
instance. Structural edits (points, sub-questions, options) are gated by the
session, not here.
"""
from auditdesk.config import (
    QUESTION_TYPES, AUDIT_STATUSES,
    DEFAULT_POINT_TITLE, DEFAULT_QUESTION_TEXT, DEFAULT_OPTION_LABEL,
)
from auditdesk.db import _n
from auditdesk.errors import ValidationError, NotFound
from auditdesk.ids import new_id

DIRECTIONS = (-1, 1)
DETAIL_FIELDS = ("supplierName", "auditor", "date", "status")
POINT_FIELDS = ("code", "title")


# ============================================================
# LOOKUP HELPERS
# ============================================================
def _point_index(instance: dict, point_id: str) -> int:
    for i, p in enumerate(instance["points"]):
        if p["id"] == point_id:
            return i
    raise NotFound(f"Point {point_id} not found")


def _sub_index(instance: dict, sub_id: str) -> tuple:
    for pi, p in enumerate(instance["points"]):
        for si, s in enumerate(p["subQuestions"]):
            if s["id"] == sub_id:
                return pi, si
    raise NotFound(f"Sub-question {sub_id} not found")


def find_sub_question(instance: dict, sub_id: str) -> dict:
    pi, si = _sub_index(instance, sub_id)
    return instance["points"][pi]["subQuestions"][si]


def _with_point(instance: dict, index: int, point: dict) -> dict:
    points = list(instance["points"])
    points[index] = point
    return {**instance, "points": points}


def _with_sub(instance: dict, pi: int, si: int, sub: dict) -> dict:
    point = instance["points"][pi]
    subs = list(point["subQuestions"])
    subs[si] = sub
    return _with_point(instance, pi, {**point, "subQuestions": subs})


def _moved(items: list, index: int, direction: int) -> list:
    """Copy of `items` with one element shifted; None when out of bounds."""
    if direction not in DIRECTIONS:
        raise ValidationError(f"direction must be -1 or 1, got {direction!r}")
    target = index + direction
    if target < 0 or target >= len(items):
        return None
    arr = list(items)
    arr.insert(target, arr.pop(index))
    return arr


def _multi_sub(instance: dict, sub_id: str) -> tuple:
    pi, si = _sub_index(instance, sub_id)
    sub = instance["points"][pi]["subQuestions"][si]
    if sub["type"] != "multi":
        raise ValidationError(f"Sub-question {sub_id} has no options")
    return pi, si, sub


def _option_index(sub: dict, option_id: str) -> int:
    for i, o in enumerate(sub.get("options") or []):
        if o["id"] == option_id:
            return i
    raise NotFound(f"Option {option_id} not found")


# ============================================================
# ANSWERS
# ============================================================
def set_open_answer(instance: dict, sub_id: str, text: str) -> dict:
    pi, si = _sub_index(instance, sub_id)
    sub = instance["points"][pi]["subQuestions"][si]
    if sub["type"] != "open":
        raise ValidationError(f"Sub-question {sub_id} is not an open question")
    return _with_sub(instance, pi, si, {**sub, "answerText": text})


def toggle_option(instance: dict, sub_id: str, option_id: str) -> dict:
    """Select or deselect one option. Two toggles restore the original set."""
    pi, si, sub = _multi_sub(instance, sub_id)
    _option_index(sub, option_id)
    chosen = list(sub.get("answerOptions") or [])
    if option_id in chosen:
        chosen.remove(option_id)
    else:
        chosen.append(option_id)
    return _with_sub(instance, pi, si, {**sub, "answerOptions": chosen})


def set_comment(instance: dict, point_id: str, text: str) -> dict:
    idx = _point_index(instance, point_id)
    return _with_point(instance, idx, {**instance["points"][idx], "comment": text})


def update_point(instance: dict, point_id: str, **fields) -> dict:
    """Change the code and/or title of a point."""
    unknown = set(fields) - set(POINT_FIELDS)
    if unknown:
        raise ValidationError(f"Cannot update point fields: {sorted(unknown)}")
    idx = _point_index(instance, point_id)
    return _with_point(instance, idx, {**instance["points"][idx], **fields})


def set_audit_details(instance: dict, **fields) -> dict:
    unknown = set(fields) - set(DETAIL_FIELDS)
    if unknown:
        raise ValidationError(f"Cannot update audit fields: {sorted(unknown)}")
    if "status" in fields and fields["status"] not in AUDIT_STATUSES:
        raise ValidationError(f"status must be one of {AUDIT_STATUSES}")
    return {**instance, **fields}


# ============================================================
# POINTS
# ============================================================
def add_point(instance: dict, ids=new_id, title: str = DEFAULT_POINT_TITLE, code: str = "") -> dict:
    point = {"id": ids(), "code": code, "title": title, "comment": "", "subQuestions": []}
    return {**instance, "points": instance["points"] + [point]}


def remove_point(instance: dict, images: dict, point_id: str) -> tuple:
    """Returns (instance, images); the point's images go with it."""
    _point_index(instance, point_id)
    points = [p for p in instance["points"] if p["id"] != point_id]
    remaining = {k: v for k, v in images.items() if k != point_id}
    return {**instance, "points": points}, remaining


def move_point(instance: dict, point_id: str, direction: int) -> dict:
    idx = _point_index(instance, point_id)
    points = _moved(instance["points"], idx, direction)
    if points is None:
        return instance
    return {**instance, "points": points}


# ============================================================
# SUB-QUESTIONS
# ============================================================
def add_sub_question(instance: dict, point_id: str, qtype: str, ids=new_id,
                     text: str = DEFAULT_QUESTION_TEXT) -> dict:
    if qtype not in QUESTION_TYPES:
        raise ValidationError(f"type must be one of {QUESTION_TYPES}")
    sub = {"id": ids(), "text": text, "type": qtype}
    if qtype == "multi":
        sub.update(options=[], answerOptions=[])
    else:
        sub["answerText"] = None
    idx = _point_index(instance, point_id)
    point = instance["points"][idx]
    return _with_point(instance, idx, {**point, "subQuestions": point["subQuestions"] + [sub]})


def update_sub_question(instance: dict, sub_id: str, text: str) -> dict:
    pi, si = _sub_index(instance, sub_id)
    return _with_sub(instance, pi, si, {**instance["points"][pi]["subQuestions"][si], "text": text})


def remove_sub_question(instance: dict, sub_id: str) -> dict:
    pi, _ = _sub_index(instance, sub_id)
    point = instance["points"][pi]
    subs = [s for s in point["subQuestions"] if s["id"] != sub_id]
    return _with_point(instance, pi, {**point, "subQuestions": subs})


def move_sub_question(instance: dict, sub_id: str, direction: int) -> dict:
    pi, si = _sub_index(instance, sub_id)
    point = instance["points"][pi]
    subs = _moved(point["subQuestions"], si, direction)
    if subs is None:
        return instance
    return _with_point(instance, pi, {**point, "subQuestions": subs})


# ============================================================
# OPTIONS
# ============================================================
def add_option(instance: dict, sub_id: str, ids=new_id,
               label: str = DEFAULT_OPTION_LABEL, score: float = 0) -> dict:
    pi, si, sub = _multi_sub(instance, sub_id)
    option = {"id": ids(), "label": label, "score": _n(score)}
    return _with_sub(instance, pi, si, {**sub, "options": list(sub.get("options") or []) + [option]})


def _patch_option(instance: dict, sub_id: str, option_id: str, patch: dict) -> dict:
    pi, si, sub = _multi_sub(instance, sub_id)
    oi = _option_index(sub, option_id)
    options = list(sub["options"])
    options[oi] = {**options[oi], **patch}
    return _with_sub(instance, pi, si, {**sub, "options": options})


def set_option_label(instance: dict, sub_id: str, option_id: str, label: str) -> dict:
    return _patch_option(instance, sub_id, option_id, {"label": label})


def set_option_score(instance: dict, sub_id: str, option_id: str, score) -> dict:
    """Blank or non-numeric input counts as 0."""
    return _patch_option(instance, sub_id, option_id, {"score": _n(score)})


def remove_option(instance: dict, sub_id: str, option_id: str) -> dict:
    # Selections of the removed option stay in answerOptions; scoring ignores them.
    pi, si, sub = _multi_sub(instance, sub_id)
    _option_index(sub, option_id)
    options = [o for o in sub["options"] if o["id"] != option_id]
    return _with_sub(instance, pi, si, {**sub, "options": options})
