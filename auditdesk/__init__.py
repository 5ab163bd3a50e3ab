"""
AuditDesk — Modular Backend Package (v1.4.0)

Architecture:
  auditdesk/
  ├── config/      — Paths, feature flags, JWT settings, role matrix
  ├── errors/      — Error kinds surfaced to callers and the API
  ├── ids/         — Identifier generation (injectable)
  ├── db/          — JSON file store
  ├── auth/        — bcrypt, JWT, role levels
  ├── templates/   — Supplier-audit template model, gateway, save
  ├── instances/   — Instance derivation (clone with fresh ids)
  ├── answers/     — Answer capture and structural edits
  ├── scoring/     — Achieved / maximum score
  ├── images/      — Inline image payloads per audit point
  ├── snapshots/   — Draft export / import bundles
  ├── session/     — Observable audit state for one interactive user
  ├── iso/         — Internal ISO audits: departments, questions, findings
  ├── seed.py      — Demo users and sample data
  └── server.py    — FastAPI routing layer

Each module is self-contained with clear imports and no circular dependencies.
"""
