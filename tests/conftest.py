import os, tempfile

# Point the store at a throwaway directory before auditdesk.config is imported
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="auditdesk-test-")
os.environ["PERSIST_DATA"] = "true"
os.environ["SEED_DEMO"] = "false"
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest

from auditdesk.db import reset_db
from auditdesk.ids import SequentialIds


@pytest.fixture(autouse=True)
def fresh_db():
    reset_db()
    yield


@pytest.fixture
def ids():
    return SequentialIds("n")


@pytest.fixture
def template():
    return {
        "id": "tpl-1", "name": "Supplier – Metal Works",
        "points": [
            {"id": "p1", "code": "1", "title": "Quality", "comment": "", "subQuestions": [
                {"id": "s1", "text": "Certified?", "type": "multi", "options": [
                    {"id": "o1", "label": "Yes", "score": 2},
                    {"id": "o2", "label": "Partly", "score": 1},
                ]},
                {"id": "s2", "text": "Contact person", "type": "open"},
            ]},
            {"id": "p2", "code": "2", "title": "Logistics", "comment": "", "subQuestions": [
                {"id": "s3", "text": "Delivery on time?", "type": "multi", "options": [
                    {"id": "o3", "label": "Always", "score": 1.5},
                    {"id": "o4", "label": "Mostly", "score": 0.5},
                    {"id": "o5", "label": "Rarely", "score": 0},
                ]},
            ]},
            {"id": "p3", "code": "3", "title": "Environment", "comment": "", "subQuestions": []},
        ],
    }
