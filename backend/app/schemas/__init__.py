from app.schemas import admin, ai, audit, auth, client, emergency, entry, invitation, safety, shift

__all__ = [
    "admin",
    "ai",
    "audit",
    "auth",
    "client",
    "emergency",
    "entry",
    "invitation",
    "safety",
    "shift",
]
