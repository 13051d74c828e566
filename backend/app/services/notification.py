from __future__ import annotations

import smtplib
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from email.message import EmailMessage
from pathlib import Path
from typing import Iterable, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from app.core.errors import DeliveryFailedError, NoRecipientsConfiguredError
from app.core.logging_setup import logger


@dataclass
class EmailConfig:
    host: str
    port: int
    username: str | None
    password: str | None
    sender: str
    starttls: bool


@dataclass
class SMSConfig:
    account_sid: str
    auth_token: str
    from_number: str | None
    messaging_service_sid: str | None
    timeout_seconds: float = 8.0


@dataclass
class RecipientOutcome:
    phone_number: str
    success: bool
    message_id: str | None = None
    status: str | None = None
    error: str | None = None


@dataclass
class DispatchResult:
    outcomes: list[RecipientOutcome] = field(default_factory=list)

    @property
    def sent(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.success)

    @property
    def ok(self) -> bool:
        return self.sent > 0

    @property
    def errors(self) -> dict[str, str]:
        return {
            outcome.phone_number: outcome.error or "Unknown error"
            for outcome in self.outcomes
            if not outcome.success
        }

    def error_summary(self) -> str:
        return "; ".join(f"{phone}: {reason}" for phone, reason in self.errors.items())


def normalize_recipients(recipients: Iterable[str | None]) -> list[str]:
    """Strip blanks and duplicates, keeping the first occurrence order."""
    seen: set[str] = set()
    numbers: list[str] = []
    for value in recipients:
        cleaned = (value or "").strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            numbers.append(cleaned)
    return numbers


class NotificationService:
    def __init__(
        self,
        email_config: Optional[EmailConfig] = None,
        sms_config: Optional[SMSConfig] = None,
        template_root: Path | None = None,
    ) -> None:
        self.email_config = email_config
        self.sms_config = sms_config
        self.template_root = template_root or Path(__file__).resolve().parent.parent / "templates"
        self.template_env = Environment(
            loader=FileSystemLoader(self.template_root),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def apply_settings(self, settings) -> None:  # type: ignore[no-untyped-def]
        if settings.smtp_host and settings.smtp_sender:
            self.configure_email(
                host=settings.smtp_host,
                port=int(settings.smtp_port),
                sender=settings.smtp_sender,
                username=settings.smtp_username,
                password=settings.smtp_password,
                starttls=bool(settings.smtp_starttls),
            )
        if settings.sms_configured():
            self.configure_sms(
                account_sid=settings.twilio_account_sid,
                auth_token=settings.twilio_auth_token,
                from_number=settings.twilio_from_number,
                messaging_service_sid=settings.twilio_messaging_service_sid,
                timeout_seconds=settings.sms_timeout_seconds,
            )

    def configure_email(
        self,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        starttls: bool = True,
    ) -> None:
        self.email_config = EmailConfig(
            host=host,
            port=port,
            username=username,
            password=password,
            sender=sender,
            starttls=starttls,
        )

    def configure_sms(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str | None = None,
        messaging_service_sid: str | None = None,
        timeout_seconds: float = 8.0,
    ) -> None:
        self.sms_config = SMSConfig(
            account_sid=account_sid,
            auth_token=auth_token,
            from_number=from_number,
            messaging_service_sid=messaging_service_sid,
            timeout_seconds=timeout_seconds,
        )

    @property
    def sms_available(self) -> bool:
        return self.sms_config is not None and bool(
            self.sms_config.from_number or self.sms_config.messaging_service_sid
        )

    @property
    def email_available(self) -> bool:
        return self.email_config is not None

    # SMS ---------------------------------------------------------------
    def send_sms_bulk(self, message: str, recipients: Iterable[str | None]) -> DispatchResult:
        """Send ``message`` to every recipient in parallel.

        Each recipient is attempted independently; a failing number is recorded in the result
        and never stops the others. Raises ``NoRecipientsConfiguredError`` for an empty list and
        ``DeliveryFailedError`` when nothing could be delivered.
        """
        numbers = normalize_recipients(recipients)
        if not numbers:
            raise NoRecipientsConfiguredError()
        if not self.sms_available:
            raise DeliveryFailedError(
                "SMS sender not configured",
                details={"reason": "sms_config_missing"},
            )

        with ThreadPoolExecutor(max_workers=len(numbers), thread_name_prefix="sms") as pool:
            futures = [pool.submit(self._deliver_sms, message, number) for number in numbers]
            result = DispatchResult(outcomes=[future.result() for future in futures])

        logger.info("SMS dispatch finished: sent=%s failed=%s", result.sent, result.failed)
        if not result.ok:
            summary = result.error_summary()
            logger.error("All SMS sends failed. Errors: %s", summary)
            raise DeliveryFailedError(
                f"Failed to send SMS: {summary}",
                details={"errors": result.errors},
            )
        return result

    def _deliver_sms(self, message: str, phone_number: str) -> RecipientOutcome:
        config = self.sms_config
        if config is None:
            return RecipientOutcome(phone_number=phone_number, success=False, error="SMS sender not configured")
        message_kwargs = {"to": phone_number, "body": message}
        if config.messaging_service_sid:
            message_kwargs["messaging_service_sid"] = config.messaging_service_sid
        else:
            message_kwargs["from_"] = config.from_number
        try:
            client = Client(
                config.account_sid,
                config.auth_token,
                http_client=TwilioHttpClient(timeout=config.timeout_seconds),
            )
            sent = client.messages.create(**message_kwargs)
        except Exception as exc:  # one recipient's failure must not reach the others
            logger.warning("Failed to send SMS to %s: %s", phone_number, exc)
            return RecipientOutcome(phone_number=phone_number, success=False, error=str(exc) or type(exc).__name__)
        return RecipientOutcome(
            phone_number=phone_number,
            success=True,
            message_id=getattr(sent, "sid", None),
            status=getattr(sent, "status", None),
        )

    # E-mail ------------------------------------------------------------
    def _render_template(self, template_name: str, context: dict) -> str:
        template = self.template_env.get_template(template_name)
        return template.render(**context)

    def send_invitation_email(
        self,
        *,
        to: str,
        invitation_link: str,
        expires_at: datetime,
        invited_by_name: str | None = None,
    ) -> bool:
        if not self.email_available:
            logger.info("Invitation e-mail skipped for %s: sender not configured", to)
            return False

        expires_display = expires_at.strftime("%b %d, %Y")
        context = {
            "invitation_link": invitation_link,
            "invited_by_name": invited_by_name,
            "expires_display": expires_display,
        }
        html_body = self._render_template("email/invitation.html", context)
        lines = [
            "Hello,",
            "",
            f"{invited_by_name or 'An administrator'} invited you to join CoachAlly as a job coach.",
            "",
            "Set up your account:",
            invitation_link,
            "",
            f"This link expires on {expires_display} and can be used once.",
        ]
        try:
            self._send_email(
                to=to,
                subject="You're invited to CoachAlly",
                html_body=html_body,
                text_body="\n".join(lines),
            )
        except (smtplib.SMTPException, OSError, RuntimeError) as exc:
            logger.warning("Invitation e-mail to %s failed: %s", to, exc)
            return False
        return True

    def send_password_reset_email(
        self,
        *,
        to: str,
        reset_link: str,
        expires_at: datetime,
        full_name: str | None = None,
    ) -> bool:
        if not self.email_available:
            logger.info("Password reset e-mail skipped for %s: sender not configured", to)
            return False

        expires_display = expires_at.strftime("%b %d, %Y %H:%M UTC")
        context = {
            "reset_link": reset_link,
            "full_name": full_name,
            "expires_display": expires_display,
        }
        html_body = self._render_template("email/password_reset.html", context)
        lines = [
            f"Hello {full_name}," if full_name else "Hello,",
            "",
            "We received a request to reset your CoachAlly password.",
            "",
            "Choose a new password:",
            reset_link,
            "",
            f"This link expires on {expires_display} and can be used once.",
            "If you did not ask for a reset, you can ignore this message.",
        ]
        try:
            self._send_email(
                to=to,
                subject="Reset your CoachAlly password",
                html_body=html_body,
                text_body="\n".join(lines),
            )
        except (smtplib.SMTPException, OSError, RuntimeError) as exc:
            logger.warning("Password reset e-mail to %s failed: %s", to, exc)
            return False
        return True

    def _send_email(
        self,
        *,
        to: str,
        subject: str,
        html_body: str,
        text_body: str | None = None,
    ) -> None:
        if not self.email_config:
            raise RuntimeError("Email sender not configured")

        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.email_config.sender
        message["To"] = to

        message.set_content(text_body or "", subtype="plain", charset="utf-8")
        message.add_alternative(html_body, subtype="html", charset="utf-8")

        with smtplib.SMTP(self.email_config.host, self.email_config.port, timeout=30) as smtp:
            if self.email_config.starttls:
                smtp.starttls()
            if self.email_config.username and self.email_config.password:
                smtp.login(self.email_config.username, self.email_config.password)
            smtp.send_message(message)


def build_notification_service(settings) -> NotificationService:  # type: ignore[no-untyped-def]
    service = NotificationService()
    service.apply_settings(settings)
    return service
