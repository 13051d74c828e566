from __future__ import annotations

from functools import lru_cache

from email_validator import EmailNotValidError, validate_email

from app.core.errors import InvalidInputError


@lru_cache(maxsize=512)
def _validate_format_only(candidate: str) -> str:
    """Normalize addresses validating only syntax/IDNA information."""
    info = validate_email(candidate, check_deliverability=False)
    return info.normalized or info.email


def normalize_email(value: str | None) -> str:
    """Return a lower-cased, syntax-checked e-mail address."""
    candidate = (value or "").strip().lower()
    if not candidate:
        raise InvalidInputError("Email is required")
    try:
        return _validate_format_only(candidate).lower()
    except EmailNotValidError as exc:
        raise InvalidInputError(f"Invalid email address: {exc}") from exc
