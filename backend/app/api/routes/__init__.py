from . import admin, ai, audit, auth, clients, emergency, entries, health, public, reports, safety_link, shifts

__all__ = [
    "admin",
    "ai",
    "audit",
    "auth",
    "clients",
    "emergency",
    "entries",
    "health",
    "public",
    "reports",
    "safety_link",
    "shifts",
]
