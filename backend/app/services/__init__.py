from app.services.accounts import AccountService
from app.services.admin import AdminService
from app.services.ai import AIService
from app.services.audit import AuditService
from app.services.auth import AuthService
from app.services.client import ClientService
from app.services.emergency import EmergencyService
from app.services.entry import EntryService
from app.services.invitation import InvitationService
from app.services.notification import NotificationService
from app.services.report import ReportService
from app.services.reporting import ReportingService
from app.services.safety_link import SafetyLinkService
from app.services.shift import ShiftService

__all__ = [
    "AccountService",
    "AdminService",
    "AIService",
    "AuditService",
    "AuthService",
    "ClientService",
    "EmergencyService",
    "EntryService",
    "InvitationService",
    "NotificationService",
    "ReportService",
    "ReportingService",
    "SafetyLinkService",
    "ShiftService",
]
