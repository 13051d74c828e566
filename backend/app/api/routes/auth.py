from fastapi import APIRouter, Depends, Query, Request, status
from sqlmodel import Session

from app.api.deps import get_current_profile, get_db, get_notification_service, require_roles
from app.core.errors import UnauthorizedError
from app.models.user import Profile, User, UserRole
from app.schemas.auth import (
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    PasswordResetResponse,
    ProfileRead,
    RefreshRequest,
    ResetPasswordRequest,
    Token,
)
from app.schemas.invitation import (
    InvitationCreate,
    InvitationCreated,
    InvitationVerifyResponse,
    SetupCredentialsRequest,
    SetupCredentialsResponse,
)
from app.services.audit import AuditService
from app.services.auth import AuthService
from app.services.invitation import InvitationService
from app.services.notification import NotificationService
from app.services.password_reset import PasswordResetService

router = APIRouter(prefix="/auth", tags=["auth"])


def _services(session: Session) -> tuple[AuthService, AuditService]:
    return AuthService(session), AuditService(session)


def _client_meta(request: Request) -> dict[str, str | None]:
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


@router.post("/login", response_model=Token)
def login(
    payload: LoginRequest,
    request: Request,
    session: Session = Depends(get_db),
) -> Token:
    auth_service, audit_service = _services(session)
    try:
        token = auth_service.authenticate(payload)
    except UnauthorizedError:
        audit_service.record_auth(user_id=None, event_type="login", success=False, **_client_meta(request))
        raise
    user = auth_service.accounts.get_user_by_email(payload.username)
    audit_service.record_auth(
        user_id=user.id if user else None,
        event_type="login",
        success=True,
        **_client_meta(request),
    )
    return token


@router.post("/refresh", response_model=Token)
def refresh(payload: RefreshRequest, session: Session = Depends(get_db)) -> Token:
    auth_service, _ = _services(session)
    return auth_service.refresh(payload)


@router.get("/me", response_model=ProfileRead)
def read_me(profile: Profile = Depends(get_current_profile)) -> ProfileRead:
    return ProfileRead.model_validate(profile)


@router.post("/invite", response_model=InvitationCreated, status_code=status.HTTP_201_CREATED)
def invite(
    payload: InvitationCreate,
    session: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
) -> InvitationCreated:
    service = InvitationService(session, notification_service=notifier, audit_service=AuditService(session))
    return service.create(payload.email, requested_by=current_user.id)


@router.get("/verify-invitation", response_model=InvitationVerifyResponse)
def verify_invitation(
    token: str = Query(default=""),
    session: Session = Depends(get_db),
) -> InvitationVerifyResponse:
    invitation = InvitationService(session).verify(token)
    return InvitationVerifyResponse(id=invitation.id, email=invitation.email)


@router.post("/setup-credentials", response_model=SetupCredentialsResponse, status_code=status.HTTP_201_CREATED)
def setup_credentials(
    payload: SetupCredentialsRequest,
    session: Session = Depends(get_db),
) -> SetupCredentialsResponse:
    service = InvitationService(session, audit_service=AuditService(session))
    return service.consume(
        payload.token,
        payload.full_name,
        payload.password,
        confirm_password=payload.confirm_password,
    )


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
def forgot_password(
    payload: ForgotPasswordRequest,
    session: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
) -> ForgotPasswordResponse:
    service = PasswordResetService(session, notification_service=notifier, audit_service=AuditService(session))
    service.request_reset(payload.email)
    # Same answer whether or not the address has an account
    return ForgotPasswordResponse()


@router.post("/reset-password", response_model=PasswordResetResponse)
def reset_password(
    payload: ResetPasswordRequest,
    request: Request,
    session: Session = Depends(get_db),
) -> PasswordResetResponse:
    audit_service = AuditService(session)
    result = PasswordResetService(session, audit_service=audit_service).reset_password(
        payload.token,
        payload.password,
        confirm_password=payload.confirm_password,
    )
    audit_service.record_auth(user_id=result.user_id, event_type="password_reset", success=True, **_client_meta(request))
    return result
