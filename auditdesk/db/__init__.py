"""
AuditDesk — Database Layer
File-based JSON store. One document, one collection per record type.
"""
import json, math

from auditdesk.config import DB_PATH, PERSIST_DATA
from auditdesk.errors import PersistenceUnavailable

# ============================================================
# EMPTY DB SCHEMA
# ============================================================
EMPTY_DB = {
    "users": [], "departments": [], "questions": [],
    "audits": [], "answers": [], "supplier_audit_templates": [],
}

def _fresh_db():
    """Return a fresh empty database."""
    return json.loads(json.dumps(EMPTY_DB))

# ============================================================
# FILE BACKEND
# ============================================================
_db_cache = None

def _file_load():
    global _db_cache
    if DB_PATH.exists():
        try:
            with open(DB_PATH) as f:
                db = json.load(f)
        except json.JSONDecodeError:
            print(f"[DB] {DB_PATH.name} is not valid JSON, starting from an empty store")
            db = _fresh_db()
        except OSError as e:
            print(f"[DB] Read failed: {e}")
            raise PersistenceUnavailable(f"Could not read {DB_PATH.name}: {e}")
        # Ensure all collections exist
        for k, v in EMPTY_DB.items():
            if k not in db:
                db[k] = type(v)()
        _db_cache = db
    else:
        _db_cache = _fresh_db()
    return _db_cache

def _file_save(db):
    """Write first, then adopt as cache: a failed write leaves the cache as it was."""
    global _db_cache
    if PERSIST_DATA:
        try:
            with open(DB_PATH, "w") as f:
                json.dump(db, f, indent=2, default=str)
        except OSError as e:
            print(f"[DB] Write failed: {e}")
            raise PersistenceUnavailable(f"Could not write {DB_PATH.name}: {e}")
    _db_cache = db

def _file_get():
    global _db_cache
    if _db_cache is None:
        return _file_load()
    return _db_cache

# ============================================================
# PUBLIC API
# ============================================================
load_db = _file_load
save_db = _file_save
get_db = _file_get

def save_collection(name: str, items: list) -> dict:
    """Persist a replacement for one collection without touching the cached
    document in place. Returns the new document."""
    db = {**get_db(), name: items}
    save_db(db)
    return db

def reset_db():
    """Replace the store with an empty one. Used in testing and by the seed script."""
    global _db_cache
    _db_cache = None
    save_db(_fresh_db())

# ============================================================
# UTILITIES
# ============================================================
def _n(val, default=0):
    """Safe numeric conversion: None/empty/non-numeric/non-finite → default."""
    if val is None or val == "" or isinstance(val, bool):
        return float(default)
    try:
        num = float(val)
    except (ValueError, TypeError):
        return float(default)
    return num if math.isfinite(num) else float(default)
