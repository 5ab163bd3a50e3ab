"""
AuditDesk — Draft Snapshots

A half-finished supplier audit can be saved to a file chosen by the user and
opened again later. The bundle is self-contained:

    {"instance": {...audit...}, "imageMap": {pointId: [dataUrl, ...]}}

Import checks the tree down to the options and that every imageMap entry is
a list of data URLs, so a draft that loads can always be edited and scored.
"""
import json
from datetime import datetime, timezone
from pathlib import Path

from auditdesk.config import SNAPSHOT_PREFIX, QUESTION_TYPES
from auditdesk.errors import MalformedSnapshot, PersistenceUnavailable


def snapshot_filename(now: datetime = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"{SNAPSHOT_PREFIX}-{now.date().isoformat()}.json"


def export_snapshot(instance: dict, images: dict) -> dict:
    return {"instance": instance, "imageMap": images}


def dump_snapshot(instance: dict, images: dict) -> str:
    return json.dumps(export_snapshot(instance, images), indent=2, ensure_ascii=False)


def _check_sub_question(sub) -> None:
    if not isinstance(sub, dict) or "id" not in sub:
        raise MalformedSnapshot("Snapshot sub-question has no id")
    if sub.get("type") not in QUESTION_TYPES:
        raise MalformedSnapshot(f"Sub-question {sub['id']} has type {sub.get('type')!r}")
    if sub["type"] == "multi":
        options = sub.get("options")
        if not isinstance(options, list) or not all(isinstance(o, dict) and "id" in o for o in options):
            raise MalformedSnapshot(f"Sub-question {sub['id']} options must be a list of options")
        if not isinstance(sub.get("answerOptions", []), list):
            raise MalformedSnapshot(f"Sub-question {sub['id']} answerOptions must be a list")


def validate_instance(instance) -> dict:
    """Check the audit tree down to the options; answer capture relies on it."""
    if not isinstance(instance, dict) or not isinstance(instance.get("points"), list):
        raise MalformedSnapshot("Snapshot instance is not an audit")
    for point in instance["points"]:
        if not isinstance(point, dict) or "id" not in point:
            raise MalformedSnapshot("Snapshot point has no id")
        if not isinstance(point.get("subQuestions"), list):
            raise MalformedSnapshot(f"Point {point['id']} subQuestions must be a list")
        for sub in point["subQuestions"]:
            _check_sub_question(sub)
    return instance


def validate_images(images) -> dict:
    if images is None:
        return {}
    if not isinstance(images, dict):
        raise MalformedSnapshot("Snapshot imageMap must be an object")
    for point_id, urls in images.items():
        if not isinstance(urls, list) or not all(isinstance(u, str) for u in urls):
            raise MalformedSnapshot(f"Images of point {point_id} must be a list of data URLs")
    return images


def validate_snapshot(bundle) -> tuple:
    """(instance, images) from a decoded bundle, or MalformedSnapshot."""
    if not isinstance(bundle, dict) or "instance" not in bundle:
        raise MalformedSnapshot("Snapshot has no instance")
    return validate_instance(bundle["instance"]), validate_images(bundle.get("imageMap"))


def parse_snapshot(text) -> tuple:
    try:
        bundle = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedSnapshot(f"Snapshot is not valid JSON: {e}")
    return validate_snapshot(bundle)


def save_snapshot(path, instance: dict, images: dict) -> Path:
    """Write the bundle; a directory path gets the default file name."""
    path = Path(path)
    if path.is_dir():
        path = path / snapshot_filename()
    try:
        path.write_text(dump_snapshot(instance, images), encoding="utf-8")
    except OSError as e:
        raise PersistenceUnavailable(f"Could not write {path.name}: {e}")
    return path


def load_snapshot(path) -> tuple:
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise PersistenceUnavailable(f"Could not read {path.name}: {e}")
    return parse_snapshot(raw)
