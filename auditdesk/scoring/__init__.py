"""
AuditDesk — Scoring Engine

Only multi-choice sub-questions count. Per sub-question:
  achieved += score of every selected option
  maximum  += score of the single best option (0 with no options)

A user may select several options whose sum exceeds the best single option,
so achieved > maximum can happen. That is the observed behaviour and is kept:
no clamping, no rounding.
"""
from auditdesk.templates import option_score


def score_sub_question(sub: dict) -> tuple:
    """(achieved, maximum) for one sub-question."""
    if sub.get("type") != "multi":
        return 0.0, 0.0
    options = sub.get("options") or []
    if not options:
        return 0.0, 0.0
    chosen = set(sub.get("answerOptions") or [])
    scores = [option_score(o) for o in options]
    # ids in answerOptions with no matching option are simply never summed
    achieved = sum(s for o, s in zip(options, scores) if o.get("id") in chosen)
    return achieved, max(scores)


def score(instance: dict) -> dict:
    achieved = 0.0
    maximum = 0.0
    for point in instance.get("points") or []:
        for sub in point.get("subQuestions") or []:
            a, m = score_sub_question(sub)
            achieved += a
            maximum += m
    return {"achieved": achieved, "maximum": maximum}
