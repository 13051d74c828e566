from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Global CoachAlly settings.
    Values are read from the environment and from the .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Project
    project_name: str = "CoachAlly API"
    api_v1_str: str = "/api/v1"
    debug: bool = False

    # Security / JWT
    secret_key: str = "changeme"
    access_token_expire_minutes: int = 60
    refresh_token_expire_minutes: int = 10080
    algorithm: str = "HS256"
    min_password_length: int = 8

    # Database
    database_url: str = "sqlite:///./dev.db"

    # CORS
    allowed_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ]

    # Public URLs (invitation and safety links)
    public_base_url: str = "http://localhost:8000"
    public_app_url: str = "http://localhost:3000"

    # Invitations
    invitation_ttl_days: int = 7

    # Password recovery
    password_reset_ttl_minutes: int = 60

    # E-mail (SMTP)
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_sender: Optional[str] = None
    smtp_starttls: bool = True

    # Twilio (SMS alerts)
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_from_number: Optional[str] = None
    twilio_messaging_service_sid: Optional[str] = None
    sms_timeout_seconds: float = 8.0

    # Emergency alerts
    emergency_contact_1: Optional[str] = None
    emergency_contact_2: Optional[str] = None
    alert_timezone: str = "America/Los_Angeles"

    # OpenAI (transcription and note formatting)
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_transcription_model: str = "whisper-1"
    openai_timeout_seconds: float = 60.0

    # Reports
    report_vendor_default: str = "v-Enable Pathways"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = "log/server.log"

    def resolved_public_app_url(self) -> str:
        """Base URL used to build links sent to users (invitations, SOS links)."""
        base = (self.public_app_url or "").strip()
        if base:
            return base.rstrip("/")
        return (self.public_base_url or "").rstrip("/")

    def emergency_numbers(self) -> list[str]:
        numbers: list[str] = []
        for value in (self.emergency_contact_1, self.emergency_contact_2):
            cleaned = (value or "").strip()
            if cleaned:
                numbers.append(cleaned)
        return numbers

    def sms_configured(self) -> bool:
        return bool(
            self.twilio_account_sid
            and self.twilio_auth_token
            and (self.twilio_from_number or self.twilio_messaging_service_sid)
        )


@lru_cache
def get_settings() -> Settings:
    """Return the cached global settings instance."""
    return Settings()


settings = get_settings()
