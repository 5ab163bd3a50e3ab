"""
AuditDesk — Internal ISO & Supplier Audits
FastAPI routing layer over the JSON store. Business rules live in the
modules; routes only unpack requests and pick the role level.
"""
from fastapi import FastAPI, Body, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auditdesk.config import (
    VERSION, PORT, CORS_ORIGINS, SEED_DEMO, PERSIST_DATA, DB_PATH,
    LEVEL_READ, LEVEL_AUDIT, LEVEL_ADMIN,
)
from auditdesk.errors import AuditDeskError, ValidationError
from auditdesk.auth import authenticate, require_role
from auditdesk import iso, templates
from auditdesk.instances import derive_instance
from auditdesk.scoring import score
from auditdesk.snapshots import validate_snapshot, validate_instance

app = FastAPI(title="AuditDesk", version=VERSION)
app.add_middleware(CORSMiddleware, allow_origins=CORS_ORIGINS, allow_credentials=True,
                   allow_methods=["*"], allow_headers=["*"])

admin_only = Depends(require_role(LEVEL_ADMIN))
auditors = Depends(require_role(LEVEL_AUDIT))
any_role = Depends(require_role(LEVEL_READ))


@app.exception_handler(AuditDeskError)
async def audit_desk_error(request: Request, exc: AuditDeskError):
    if exc.status >= 500:
        print(f"[API] {request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status, content=exc.to_dict())


# ============================================================
# HEALTH & AUTH
# ============================================================
@app.get("/api/health")
async def health():
    return {"status": "ok", "product": "AuditDesk", "version": VERSION,
            "storage": str(DB_PATH) if PERSIST_DATA else "memory"}

@app.post("/auth/login")
async def login(body: dict = Body(...)):
    return authenticate(body.get("email"), body.get("password"))


# ============================================================
# ISO INTERNAL AUDITS
# ============================================================
@app.get("/api/schema")
async def get_schema():
    return iso.build_schema()

@app.get("/api/departments")
async def get_departments():
    return iso.list_departments()

@app.post("/api/departments", dependencies=[admin_only])
async def create_department(body: dict = Body(...)):
    return {"ok": True, "department": iso.create_department(body.get("id"), body.get("name"))}

@app.put("/api/departments/{did}", dependencies=[admin_only])
async def update_department(did: str, body: dict = Body(...)):
    return {"ok": True, "department": iso.update_department(did, body.get("name"))}

@app.delete("/api/departments/{did}", dependencies=[admin_only])
async def delete_department(did: str):
    iso.delete_department(did)
    return {"ok": True}

@app.post("/api/questions", dependencies=[admin_only])
async def create_question(body: dict = Body(...)):
    return {"ok": True, "question": iso.create_question(body)}

@app.put("/api/questions/{qid}", dependencies=[admin_only])
async def update_question(qid: str, body: dict = Body(...)):
    return {"ok": True, "question": iso.update_question(qid, body)}

@app.delete("/api/questions/{qid}", dependencies=[admin_only])
async def delete_question(qid: str):
    iso.delete_question(qid)
    return {"ok": True}

@app.post("/api/audits", dependencies=[auditors])
async def create_audit(body: dict = Body(...)):
    audit = iso.submit_audit(body)
    return {"ok": True, "audit_id": audit["id"]}

@app.get("/api/audits/{aid}", dependencies=[any_role])
async def get_audit(aid: int):
    return iso.get_audit(aid)


# ============================================================
# SUPPLIER AUDIT TEMPLATES
# ============================================================
@app.get("/api/supplier-audit-templates")
async def list_templates():
    return templates.list_templates()

@app.post("/api/supplier-audit-templates", status_code=201, dependencies=[admin_only])
async def create_template(body: dict = Body(...)):
    partial = {**body, "points": templates.normalize_points(body.get("points"))}
    return templates.create_template(partial)

@app.get("/api/supplier-audit-templates/{tid}")
async def get_template(tid: str):
    return templates.get_template(tid)

@app.put("/api/supplier-audit-templates/{tid}", dependencies=[admin_only])
async def update_template(tid: str, body: dict = Body(...)):
    fields = dict(body)
    if "points" in fields:
        fields["points"] = templates.normalize_points(fields["points"])
    return templates.update_template(tid, fields)

@app.delete("/api/supplier-audit-templates/{tid}", status_code=204, dependencies=[admin_only])
async def delete_template(tid: str):
    templates.delete_template(tid)

@app.post("/api/supplier-audit-templates/{tid}/derive", dependencies=[any_role])
async def derive_from_template(tid: str, body: dict = Body(default={})):
    """Fresh instance of a template. An `instance` in the body keeps its header."""
    base = body.get("instance")
    if base is not None and not isinstance(base, dict):
        raise ValidationError("instance must be an object")
    instance = derive_instance(templates.get_template(tid), base=base)
    return {"instance": instance, "imageMap": {}}


# ============================================================
# SUPPLIER AUDITS
# ============================================================
@app.post("/api/supplier-audits/score")
async def score_instance(body: dict = Body(...)):
    instance = body.get("instance", body)
    if not isinstance(instance, dict) or not isinstance(instance.get("points"), list):
        raise ValidationError("instance with points required")
    return score(validate_instance(instance))

@app.post("/api/supplier-audits/snapshot")
async def check_snapshot(body: dict = Body(...)):
    """Validate an exported draft before the client adopts it."""
    instance, images = validate_snapshot(body)
    return {"instance": instance, "imageMap": images, "score": score(instance)}


if SEED_DEMO:
    from auditdesk.seed import seed
    seed()

if __name__ == "__main__":
    import uvicorn
    print(f"Starting AuditDesk v{VERSION} on port {PORT}")
    print(f"Storage: {DB_PATH if PERSIST_DATA else 'in-memory only'}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
