"""
AuditDesk — Authentication & RBAC
Password hashing, JWT tokens, user store, role-level checks.
"""
from datetime import datetime, timedelta, timezone
from fastapi import Request, HTTPException

from auditdesk.config import (
    JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRY_HOURS, ROLE_MATRIX, LEVEL_ADMIN
)

# ============================================================
# PASSWORD HASHING
# ============================================================
import bcrypt

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()

def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        return False

# ============================================================
# JWT
# ============================================================
import jwt as pyjwt

def create_jwt(user: dict) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user["id"]), "email": user["email"], "role": user["role"],
        "exp": now + timedelta(hours=JWT_EXPIRY_HOURS),
        "iat": now,
    }
    return pyjwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)

def decode_jwt(token: str) -> dict:
    try:
        return pyjwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except pyjwt.ExpiredSignatureError:
        raise HTTPException(401, "Token expired")
    except pyjwt.InvalidTokenError:
        raise HTTPException(401, "Invalid token")

# ============================================================
# USER STORE (stored in main DB for consistency with reset/export)
# ============================================================

def _get_users() -> list:
    from auditdesk.db import get_db
    return get_db().get("users", [])

def find_user(email: str):
    return next((u for u in _get_users() if u.get("email") == email), None)

def create_user(email: str, password: str, role: str) -> dict:
    """Insert a user unless the email is taken. Returns the stored record."""
    from auditdesk.db import save_collection
    if role not in ROLE_MATRIX:
        raise ValueError(f"Unknown role: {role}")
    existing = find_user(email)
    if existing:
        return existing
    users = _get_users()
    user = {"id": (users[-1]["id"] if users else 0) + 1, "email": email,
            "password_hash": hash_password(password), "role": role}
    save_collection("users", users + [user])
    print(f"[AUTH] Created {role} user {email}")
    return user

def authenticate(email: str, password: str) -> dict:
    """Return {token, role, email} or raise 401."""
    user = find_user(email or "")
    if not user or not verify_password(password or "", user["password_hash"]):
        raise HTTPException(401, "invalid credentials")
    return {"token": create_jwt(user), "role": user["role"], "email": user["email"]}

# ============================================================
# REQUEST HELPERS
# ============================================================

def _user_from_request(request: Request) -> dict:
    """Extract user from JWT in Authorization header. Returns empty dict if no auth."""
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return {}
    payload = decode_jwt(auth[7:])
    return {"id": payload["sub"], "email": payload["email"],
            "role": payload["role"], "authenticated": True}

async def get_current_user(request: Request) -> dict:
    """Dependency: require authenticated user."""
    user = _user_from_request(request)
    if user:
        return user
    raise HTTPException(401, "missing token")

def role_level(role: str) -> int:
    return ROLE_MATRIX.get(role, {}).get("level", 0)

def can_edit(role: str) -> bool:
    """Template structure and option scores are admin-only."""
    return role_level(role) >= LEVEL_ADMIN

# ============================================================
# RBAC DEPENDENCY
# ============================================================
def require_role(min_level: int):
    """Dependency: require minimum role level."""
    async def checker(request: Request):
        user = await get_current_user(request)
        if role_level(user["role"]) < min_level:
            raise HTTPException(403, f"Requires role level {min_level}+. Your role: {user['role']}")
        return user
    return checker
