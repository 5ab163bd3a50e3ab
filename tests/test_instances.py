# tests/test_instances.py
from datetime import datetime, timezone

from auditdesk.ids import SequentialIds, new_id
from auditdesk.instances import new_audit, derive_instance, collect_ids


def _counts(tree):
    points = tree["points"]
    subs = [s for p in points for s in p["subQuestions"]]
    options = [o for s in subs for o in (s.get("options") or [])]
    return len(points), len(subs), len(options)


def test_new_audit_is_empty_draft(ids):
    now = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
    audit = new_audit(ids, now)
    assert audit == {"id": "n1", "supplierName": "", "date": now.isoformat(),
                     "auditor": "", "status": "draft", "points": []}


def test_derive_keeps_structure_and_content(template, ids):
    instance = derive_instance(template, ids)
    assert _counts(instance) == _counts(template) == (3, 3, 5)
    assert [p["title"] for p in instance["points"]] == ["Quality", "Logistics", "Environment"]
    assert [p["code"] for p in instance["points"]] == ["1", "2", "3"]
    sub = instance["points"][1]["subQuestions"][0]
    assert sub["text"] == "Delivery on time?"
    assert [(o["label"], o["score"]) for o in sub["options"]] == [("Always", 1.5), ("Mostly", 0.5), ("Rarely", 0)]


def test_derive_generates_fresh_unique_ids(template):
    instance = derive_instance(template, new_id)
    generated = collect_ids(instance)
    assert len(generated) == len(set(generated))
    assert not set(generated) & set(collect_ids(template))


def test_two_derivations_share_no_ids(template):
    ids = SequentialIds("x")
    a = derive_instance(template, ids)
    b = derive_instance(template, ids)
    assert not set(collect_ids(a)) & set(collect_ids(b))


def test_answers_start_empty(template, ids):
    instance = derive_instance(template, ids)
    multi, open_q = instance["points"][0]["subQuestions"]
    assert multi["answerOptions"] == []
    assert "answerText" not in multi
    assert open_q["answerText"] is None
    assert "options" not in open_q
    assert all(p["comment"] == "" for p in instance["points"])


def test_instance_does_not_alias_template(template, ids):
    instance = derive_instance(template, ids)
    instance["points"][0]["title"] = "Changed"
    instance["points"][0]["subQuestions"][0]["options"][0]["score"] = 99
    instance["points"].pop()
    assert template["points"][0]["title"] == "Quality"
    assert template["points"][0]["subQuestions"][0]["options"][0]["score"] == 2
    assert len(template["points"]) == 3


def test_empty_template_gives_empty_instance(ids):
    instance = derive_instance({"id": "t", "name": "Empty", "points": []}, ids)
    assert instance["points"] == []
    assert instance["status"] == "draft"


def test_derive_onto_base_keeps_header(template, ids):
    base = {**new_audit(ids), "supplierName": "Acme", "auditor": "Kadri"}
    instance = derive_instance(template, ids, base=base)
    assert instance["id"] == base["id"]
    assert instance["supplierName"] == "Acme"
    assert instance["auditor"] == "Kadri"
    assert len(instance["points"]) == 3
    assert base["points"] == []


def test_missing_scores_become_zero(ids):
    tpl = {"points": [{"title": "P", "subQuestions": [
        {"text": "Q", "type": "multi", "options": [{"label": "a"}, {"label": "b", "score": ""}]}]}]}
    options = derive_instance(tpl, ids)["points"][0]["subQuestions"][0]["options"]
    assert [o["score"] for o in options] == [0, 0]
