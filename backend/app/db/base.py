# noqa: F401 to ensure models are imported for metadata
from app.models.audit import AuditLog, AuthLog
from app.models.client import Client
from app.models.emergency import EmergencyLog
from app.models.entry import Entry
from app.models.invitation import Invitation
from app.models.password_reset import PasswordResetToken
from app.models.safety import ClientSafetyToken
from app.models.shift import Shift
from app.models.user import Profile, User

__all__ = [
    "AuditLog",
    "AuthLog",
    "Client",
    "ClientSafetyToken",
    "EmergencyLog",
    "Entry",
    "Invitation",
    "PasswordResetToken",
    "Profile",
    "Shift",
    "User",
]
