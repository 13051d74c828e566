from datetime import datetime

from sqlmodel import Session

from app.core.errors import UnauthorizedError
from app.models.user import User
from app.schemas.auth import LoginRequest, RefreshRequest, Token
from app.services.accounts import AccountService
from app.utils.security import (
    TokenType,
    create_access_token,
    create_refresh_token,
    decode_token,
)


class AuthService:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.accounts = AccountService(session)

    def authenticate(self, payload: LoginRequest) -> Token:
        user = self.accounts.check_credentials(payload.username, payload.password)

        user.last_login_at = datetime.utcnow()
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)

        return self._build_tokens(user)

    def refresh(self, payload: RefreshRequest) -> Token:
        try:
            token_data = decode_token(payload.refresh_token)
        except ValueError as exc:
            raise UnauthorizedError("Invalid token") from exc
        if token_data.get("token_type") != TokenType.REFRESH.value:
            raise UnauthorizedError("Invalid token type")

        try:
            user = self.accounts.get_user(str(token_data.get("sub")))
        except ValueError as exc:
            raise UnauthorizedError("Invalid token subject") from exc
        if not user or not user.is_active:
            raise UnauthorizedError("Invalid token")

        return self._build_tokens(user)

    def _build_tokens(self, user: User) -> Token:
        role = self.accounts.get_user_role(user.id)
        claims = {"role": role} if role else None
        return Token(
            access_token=create_access_token(str(user.id), claims),
            refresh_token=create_refresh_token(str(user.id), claims),
            role=role,
        )
