"""
AuditDesk — Image Attachments
Photos are kept inline as data URLs, keyed by point id:

    {pointId: ["data:image/jpeg;base64,...", ...]}

All helpers return a new map.
"""
import base64, mimetypes
from pathlib import Path

from auditdesk.errors import ValidationError

IMAGE_TYPES = {".jpg": "image/jpeg", ".jpeg": "image/jpeg", ".png": "image/png",
               ".webp": "image/webp", ".gif": "image/gif", ".heic": "image/heic"}


def media_type_for(filename: str) -> str:
    ext = Path(filename).suffix.lower()
    return IMAGE_TYPES.get(ext) or mimetypes.guess_type(filename)[0] or "application/octet-stream"


def encode_image(content: bytes, media_type: str) -> str:
    return f"data:{media_type};base64,{base64.b64encode(content).decode()}"


def read_image(path) -> str:
    """Read a file from disk into a data URL. Blocking; run it off the event loop."""
    path = Path(path)
    return encode_image(path.read_bytes(), media_type_for(path.name))


def append_images(images: dict, point_id: str, urls: list) -> dict:
    return {**images, point_id: list(images.get(point_id) or []) + list(urls)}


def remove_image(images: dict, point_id: str, index: int) -> dict:
    arr = list(images.get(point_id) or [])
    if index < 0 or index >= len(arr):
        raise ValidationError(f"Point {point_id} has no image #{index + 1}")
    arr.pop(index)
    return {**images, point_id: arr}


def image_count(images: dict) -> int:
    return sum(len(v) for v in images.values())
