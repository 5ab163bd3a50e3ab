"""
AuditDesk — Configuration & Constants
Environment variables, feature flags, auth settings and the role matrix.
"""
import os
from pathlib import Path

# ============================================================
# PATHS
# ============================================================
BASE_DIR = Path(__file__).parent.parent.parent
DATA_DIR = Path(os.environ.get("DATA_DIR", BASE_DIR / "data"))

DATA_DIR.mkdir(parents=True, exist_ok=True)

DB_PATH = DATA_DIR / "data.json"

# ============================================================
# FEATURE FLAGS
# ============================================================
PERSIST_DATA = os.environ.get("PERSIST_DATA", "true").lower() == "true"
SEED_DEMO = os.environ.get("SEED_DEMO", "false").lower() == "true"

# ============================================================
# SERVER
# ============================================================
PORT = int(os.environ.get("PORT", "4000"))
CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

# ============================================================
# AUTH
# ============================================================
JWT_SECRET = os.environ.get("JWT_SECRET", os.urandom(32).hex())
JWT_ALGORITHM = "HS256"
JWT_EXPIRY_HOURS = int(os.environ.get("JWT_EXPIRY_HOURS", "6"))

ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "admin123")

# ============================================================
# ROLE MATRIX
# ============================================================
ROLE_MATRIX = {
    "external": {"title": "External Reviewer", "level": 1},
    "auditor":  {"title": "Auditor",           "level": 2},
    "admin":    {"title": "Administrator",     "level": 3},
}
LEVEL_READ = 1
LEVEL_AUDIT = 2
LEVEL_ADMIN = 3

# ============================================================
# SUPPLIER AUDITS
# ============================================================
QUESTION_TYPES = ("open", "multi")
AUDIT_STATUSES = ("draft", "final")
DEFAULT_TEMPLATE_NAME = "New template"
DEFAULT_POINT_TITLE = "New point"
DEFAULT_QUESTION_TEXT = "New question"
DEFAULT_OPTION_LABEL = "New option"
SNAPSHOT_PREFIX = "supplier-audit-draft"

# ============================================================
# ISO INTERNAL AUDITS
# ============================================================
STANDARDS = ("9001", "14001", "45001")
SCHEMA_VERSION = "gpe-render"
ORG_NAME = os.environ.get("ORG_NAME", "(server)")

# ============================================================
# VERSION
# ============================================================
VERSION = "1.4.0"
