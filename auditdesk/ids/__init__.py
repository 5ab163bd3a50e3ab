"""
AuditDesk — Identifier Generation

An id generator is any zero-argument callable returning a new string id.
Derivation and answer capture take one as a parameter so tests can swap in
SequentialIds and get predictable trees.
"""
import uuid


def new_id() -> str:
    """Collision-resistant id for a new structural node."""
    return uuid.uuid4().hex


class SequentialIds:
    """Deterministic generator: prefix1, prefix2, ..."""

    def __init__(self, prefix: str = "id"):
        self.prefix = prefix
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f"{self.prefix}{self.count}"
