# tests/test_scoring.py
from auditdesk.scoring import score


def _instance(*subs):
    return {"id": "a", "points": [{"id": "p", "subQuestions": list(subs)}]}


def _multi(options, chosen=()):
    return {"id": "s", "type": "multi", "options": options, "answerOptions": list(chosen)}


AB = [{"id": "A", "label": "A", "score": 1}, {"id": "B", "label": "B", "score": 2}]


def test_single_selection():
    assert score(_instance(_multi(AB, ["A"]))) == {"achieved": 1, "maximum": 2}


def test_multiple_selections_are_not_clamped():
    assert score(_instance(_multi(AB, ["A", "B"]))) == {"achieved": 3, "maximum": 2}


def test_open_questions_never_count():
    result = score(_instance({"id": "o", "type": "open", "answerText": "anything"}))
    assert result == {"achieved": 0, "maximum": 0}


def test_multi_without_options_counts_zero():
    assert score(_instance(_multi([], ["ghost"]))) == {"achieved": 0, "maximum": 0}


def test_stale_selection_is_ignored():
    assert score(_instance(_multi(AB, ["gone", "B"]))) == {"achieved": 2, "maximum": 2}


def test_sums_across_points_with_fractions():
    instance = {"points": [
        {"subQuestions": [_multi(AB, ["B"])]},
        {"subQuestions": [_multi([{"id": "x", "score": 0.5}, {"id": "y", "score": 1.5}], ["x"])]},
        {"subQuestions": []},
    ]}
    assert score(instance) == {"achieved": 2.5, "maximum": 3.5}


def test_unparseable_scores_count_zero():
    options = [{"id": "a", "score": ""}, {"id": "b", "score": None}, {"id": "c", "score": "abc"},
               {"id": "d", "score": "1.5"}]
    assert score(_instance(_multi(options, ["a", "b", "c", "d"]))) == {"achieved": 1.5, "maximum": 1.5}


def test_unanswered_instance_scores_zero_achieved():
    assert score(_instance(_multi(AB))) == {"achieved": 0, "maximum": 2}


def test_empty_instance():
    assert score({"points": []}) == {"achieved": 0, "maximum": 0}
