"""
AuditDesk — Audit Session

State of one interactive supplier audit: the current instance, its image map,
the selected template and a version counter bumped on every change. All
mutations go through answer capture and replace `instance` / `images` with new
objects, so observers can compare by identity or by version.

Single actor, no locking. Image loading is the only asynchronous path: files
are read concurrently and every completion appends to the image map as it is
at that moment, never to a copy taken when the load started.
"""
import asyncio

from auditdesk import answers, images as imagelib, snapshots, templates
from auditdesk.auth import can_edit
from auditdesk.errors import PermissionDenied, NotFound, ValidationError, PersistenceUnavailable
from auditdesk.ids import new_id
from auditdesk.instances import new_audit, derive_instance
from auditdesk.scoring import score


class AuditSession:

    def __init__(self, role: str = "auditor", ids=new_id, instance: dict = None, images: dict = None):
        self.role = role
        self.ids = ids
        self.instance = instance or new_audit(ids)
        self.images = dict(images or {})
        self.template_id = None
        self.version = 0

    @property
    def editable(self) -> bool:
        return can_edit(self.role)

    def _commit(self, instance: dict = None, images: dict = None) -> dict:
        if instance is not None:
            self.instance = instance
        if images is not None:
            self.images = images
        self.version += 1
        return self.instance

    def _require_edit(self, action: str):
        if not self.editable:
            raise PermissionDenied(f"{action} is allowed for admins only")

    def _require_point(self, point_id: str):
        if not any(p["id"] == point_id for p in self.instance["points"]):
            raise NotFound(f"Point {point_id} not found")

    # ============================================================
    # ANSWERS
    # ============================================================
    def set_open_answer(self, sub_id: str, text: str) -> dict:
        return self._commit(answers.set_open_answer(self.instance, sub_id, text))

    def toggle_option(self, sub_id: str, option_id: str) -> dict:
        return self._commit(answers.toggle_option(self.instance, sub_id, option_id))

    def set_comment(self, point_id: str, text: str) -> dict:
        return self._commit(answers.set_comment(self.instance, point_id, text))

    def set_details(self, **fields) -> dict:
        return self._commit(answers.set_audit_details(self.instance, **fields))

    def score(self) -> dict:
        return score(self.instance)

    # ============================================================
    # STRUCTURE (admin)
    # ============================================================
    def update_point(self, point_id: str, **fields) -> dict:
        self._require_edit("Editing a point")
        return self._commit(answers.update_point(self.instance, point_id, **fields))

    def add_point(self, title: str = None) -> dict:
        self._require_edit("Adding a point")
        kwargs = {"title": title} if title is not None else {}
        return self._commit(answers.add_point(self.instance, self.ids, **kwargs))

    def remove_point(self, point_id: str) -> dict:
        self._require_edit("Removing a point")
        instance, images = answers.remove_point(self.instance, self.images, point_id)
        return self._commit(instance, images)

    def move_point(self, point_id: str, direction: int) -> dict:
        self._require_edit("Moving a point")
        return self._commit(answers.move_point(self.instance, point_id, direction))

    def add_sub_question(self, point_id: str, qtype: str) -> dict:
        self._require_edit("Adding a question")
        return self._commit(answers.add_sub_question(self.instance, point_id, qtype, self.ids))

    def update_sub_question(self, sub_id: str, text: str) -> dict:
        self._require_edit("Editing a question")
        return self._commit(answers.update_sub_question(self.instance, sub_id, text))

    def remove_sub_question(self, sub_id: str) -> dict:
        self._require_edit("Removing a question")
        return self._commit(answers.remove_sub_question(self.instance, sub_id))

    def move_sub_question(self, sub_id: str, direction: int) -> dict:
        self._require_edit("Moving a question")
        return self._commit(answers.move_sub_question(self.instance, sub_id, direction))

    def add_option(self, sub_id: str, label: str = None, score: float = 0) -> dict:
        self._require_edit("Adding an option")
        kwargs = {"label": label} if label is not None else {}
        return self._commit(answers.add_option(self.instance, sub_id, self.ids, score=score, **kwargs))

    def set_option_label(self, sub_id: str, option_id: str, label: str) -> dict:
        self._require_edit("Editing an option")
        return self._commit(answers.set_option_label(self.instance, sub_id, option_id, label))

    def set_option_score(self, sub_id: str, option_id: str, value) -> dict:
        self._require_edit("Editing an option score")
        return self._commit(answers.set_option_score(self.instance, sub_id, option_id, value))

    def remove_option(self, sub_id: str, option_id: str) -> dict:
        self._require_edit("Removing an option")
        return self._commit(answers.remove_option(self.instance, sub_id, option_id))

    # ============================================================
    # TEMPLATES
    # ============================================================
    def apply_template(self, template: dict) -> dict:
        """Replace the points with a fresh clone of `template`; images are dropped."""
        instance = derive_instance(template, self.ids, base=self.instance)
        self.template_id = template.get("id")
        return self._commit(instance, {})

    def open_template(self, template_id: str) -> dict:
        return self.apply_template(templates.get_template(template_id))

    def save_as_template(self, name: str) -> dict:
        self._require_edit("Saving a template")
        tpl = templates.save_template(None, self.instance["points"], name)
        self.template_id = tpl["id"]
        return tpl

    def save_template_changes(self) -> dict:
        self._require_edit("Saving a template")
        if not self.template_id:
            raise ValidationError("Select the template to update first")
        return templates.save_template(self.template_id, self.instance["points"])

    def delete_template(self) -> None:
        self._require_edit("Deleting a template")
        if not self.template_id:
            raise ValidationError("Select the template to delete first")
        templates.delete_template(self.template_id)
        self.template_id = None

    # ============================================================
    # IMAGES
    # ============================================================
    def attach_image(self, point_id: str, content: bytes, media_type: str) -> dict:
        self._require_point(point_id)
        url = imagelib.encode_image(content, media_type)
        self._commit(images=imagelib.append_images(self.images, point_id, [url]))
        return self.images

    async def attach_images(self, point_id: str, paths) -> dict:
        """Read image files concurrently. Each file is appended when its read
        finishes; a failed read does not discard the others. Files that finish
        after the point was removed are dropped."""
        self._require_point(point_id)

        async def load(path):
            try:
                url = await asyncio.to_thread(imagelib.read_image, path)
            except OSError as e:
                raise PersistenceUnavailable(f"Could not read image {path}: {e}")
            # the point may have been removed while the file was being read
            if any(p["id"] == point_id for p in self.instance["points"]):
                self._commit(images=imagelib.append_images(self.images, point_id, [url]))

        results = await asyncio.gather(*(load(p) for p in paths), return_exceptions=True)
        errors = [r for r in results if isinstance(r, Exception)]
        if errors:
            raise errors[0]
        return self.images

    def remove_image(self, point_id: str, index: int) -> dict:
        self._commit(images=imagelib.remove_image(self.images, point_id, index))
        return self.images

    # ============================================================
    # SNAPSHOTS
    # ============================================================
    def export_snapshot(self) -> str:
        return snapshots.dump_snapshot(self.instance, self.images)

    def save_snapshot(self, path):
        return snapshots.save_snapshot(path, self.instance, self.images)

    def import_snapshot(self, text) -> dict:
        """Load a draft. On MalformedSnapshot the current state is kept."""
        instance, images = snapshots.parse_snapshot(text)
        return self._commit(instance, dict(images))

    def open_snapshot(self, path) -> dict:
        instance, images = snapshots.load_snapshot(path)
        return self._commit(instance, dict(images))
