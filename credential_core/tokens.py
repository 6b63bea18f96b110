"""
Token Issuer: signed account tokens for session auth and password reset.

Both purposes share one HS256 secret and differ only in the ``sub`` claim:

- session: ``sub`` is the account id as a JSON number.
- password reset: ``sub`` is the string ``"<account id>:password-reset"``.

Each validator accepts only its own subject shape, so a reset token can never
authenticate a session and a session token can never reset a password.
Tokens are stateless; there is no revocation.

Security Note:
    Never log tokens or the signing secret. Only log account ids and the
    reason a token was rejected.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, ClassVar, Optional, Union

import jwt

from .exceptions import (
    InvalidSubjectClaimError,
    InvalidTokenError,
    SecretNotConfiguredError,
    SubjectClaimMissingError,
)

logger = logging.getLogger("credential_core")

ALGORITHM = "HS256"
ISSUER = "spsyncpro_api"
TOKEN_TTL = timedelta(hours=24)
SUBJECT_DELIMITER = ":"
PASSWORD_RESET_MARKER = "password-reset"

_DECODE_OPTIONS = {
    "require": ["exp", "iat", "iss"],
    # session subjects are numeric; subject shape is checked per purpose
    "verify_sub": False,
}


def _require_secret(secret: Optional[str]) -> None:
    if not secret:
        raise SecretNotConfiguredError("jwt secret is not set")


def _check_account_id(account_id: int) -> int:
    if isinstance(account_id, bool) or not isinstance(account_id, int):
        raise ValueError("account id must be an integer")
    if account_id < 0:
        raise ValueError("account id must not be negative")
    return account_id


def _timestamp(value: Union[int, float, str]) -> datetime:
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError) as exc:
        raise InvalidTokenError("token timestamp out of range") from exc


# ---------------------------------------------------------------------------
# Claims
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AuthClaims(ABC):
    """Verified claims of an account token.

    Subclasses define how the account id is carried in ``sub``.
    """

    account_id: int
    issued_at: datetime
    expires_at: datetime
    issuer: str = ISSUER

    purpose: ClassVar[str] = ""

    @classmethod
    def new(
        cls,
        account_id: int,
        now: Optional[datetime] = None,
    ) -> "AuthClaims":
        """Build claims issued at ``now`` and expiring after ``TOKEN_TTL``."""
        issued_at = now or datetime.now(timezone.utc)
        return cls(
            account_id=_check_account_id(account_id),
            issued_at=issued_at,
            expires_at=issued_at + TOKEN_TTL,
        )

    @abstractmethod
    def subject(self) -> Any:
        """Value carried in the ``sub`` claim."""

    @classmethod
    @abstractmethod
    def parse_subject(cls, subject: Any) -> int:
        """Return the account id carried by ``subject``."""

    def to_payload(self) -> dict:
        return {
            "sub": self.subject(),
            "iss": self.issuer,
            "iat": self.issued_at,
            "exp": self.expires_at,
        }

    @classmethod
    def from_payload(cls, payload: dict) -> "AuthClaims":
        """Build typed claims from a verified payload.

        Raises:
            SubjectClaimMissingError: If ``sub`` is absent.
            InvalidSubjectClaimError: If ``sub`` has the wrong shape.
        """
        if "sub" not in payload:
            raise SubjectClaimMissingError("subject claim not found in token")
        return cls(
            account_id=cls.parse_subject(payload["sub"]),
            issued_at=_timestamp(payload["iat"]),
            expires_at=_timestamp(payload["exp"]),
            issuer=payload["iss"],
        )


@dataclass(frozen=True)
class SessionClaims(AuthClaims):
    """Claims of a session token; ``sub`` is the numeric account id."""

    purpose: ClassVar[str] = "session"

    def subject(self) -> int:
        return self.account_id

    @classmethod
    def parse_subject(cls, subject: Any) -> int:
        if isinstance(subject, bool):
            raise InvalidSubjectClaimError("invalid subject claim type")
        if isinstance(subject, float) and subject.is_integer():
            subject = int(subject)
        if not isinstance(subject, int) or subject < 0:
            raise InvalidSubjectClaimError("invalid subject claim type")
        return subject


@dataclass(frozen=True)
class PasswordResetClaims(AuthClaims):
    """Claims of a password-reset token; ``sub`` is ``"<id>:password-reset"``."""

    purpose: ClassVar[str] = PASSWORD_RESET_MARKER

    def subject(self) -> str:
        return f"{self.account_id}{SUBJECT_DELIMITER}{PASSWORD_RESET_MARKER}"

    @classmethod
    def parse_subject(cls, subject: Any) -> int:
        if not isinstance(subject, str):
            raise InvalidSubjectClaimError("invalid subject claim type")
        parts = subject.split(SUBJECT_DELIMITER)
        if len(parts) != 2 or parts[1] != PASSWORD_RESET_MARKER:
            raise InvalidSubjectClaimError("invalid subject claim")
        account_id, _ = parts
        if not (account_id.isascii() and account_id.isdigit()):
            raise InvalidSubjectClaimError("account id in subject is not numeric")
        return int(account_id)


Claims = Union[SessionClaims, PasswordResetClaims]


# ---------------------------------------------------------------------------
# Encoding / decoding
# ---------------------------------------------------------------------------

def _sign(claims: AuthClaims, secret: str) -> str:
    token = jwt.encode(claims.to_payload(), secret, algorithm=ALGORITHM)
    logger.debug(
        "Issued %s token for account %d", claims.purpose, claims.account_id,
    )
    return token


def _verify(token: str, secret: str) -> dict:
    _require_secret(secret)
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            issuer=ISSUER,
            options=_DECODE_OPTIONS,
        )
    except jwt.ExpiredSignatureError as exc:
        logger.info("Rejected token: expired")
        raise InvalidTokenError("token has expired") from exc
    except jwt.InvalidTokenError as exc:
        logger.info("Rejected token: %s", type(exc).__name__)
        raise InvalidTokenError("token could not be verified") from exc


def _validate(token: str, secret: str, claims_cls: type) -> AuthClaims:
    payload = _verify(token, secret)
    try:
        return claims_cls.from_payload(payload)
    except (SubjectClaimMissingError, InvalidSubjectClaimError) as exc:
        logger.info("Rejected %s token: %s", claims_cls.purpose, exc)
        raise


def decode_claims(token: str, secret: str) -> Claims:
    """Verify a token and return its claims typed by purpose.

    A string subject is read as a password-reset token, anything else as a
    session token; either way the subject shape is then fully validated.
    """
    payload = _verify(token, secret)
    if isinstance(payload.get("sub"), str):
        return PasswordResetClaims.from_payload(payload)
    return SessionClaims.from_payload(payload)


def issue_session_token(
    account_id: int,
    secret: str,
    *,
    now: Optional[datetime] = None,
) -> str:
    """Issue a session token valid for 24 hours.

    Raises:
        SecretNotConfiguredError: If ``secret`` is empty.
    """
    _require_secret(secret)
    return _sign(SessionClaims.new(account_id, now), secret)


def validate_session_token(token: str, secret: str) -> int:
    """Validate a session token and return its account id.

    Raises:
        SecretNotConfiguredError: If ``secret`` is empty.
        InvalidTokenError: On bad signature, expiry or malformed token.
        SubjectClaimMissingError: If the token has no subject.
        InvalidSubjectClaimError: If the subject is not a numeric account id.
    """
    return _validate(token, secret, SessionClaims).account_id


def issue_password_reset_token(
    account_id: int,
    secret: str,
    *,
    now: Optional[datetime] = None,
) -> str:
    """Issue a password-reset token valid for 24 hours."""
    _require_secret(secret)
    return _sign(PasswordResetClaims.new(account_id, now), secret)


def validate_password_reset_token(token: str, secret: str) -> int:
    """Validate a password-reset token and return its account id.

    Raises:
        SecretNotConfiguredError: If ``secret`` is empty.
        InvalidTokenError: On bad signature, expiry or malformed token.
        SubjectClaimMissingError: If the token has no subject.
        InvalidSubjectClaimError: If the subject is not
            ``"<account id>:password-reset"``.
    """
    return _validate(token, secret, PasswordResetClaims).account_id


class TokenIssuer:
    """Issues and validates account tokens with a fixed signing secret."""

    def __init__(self, secret: str):
        _require_secret(secret)
        self._secret = secret

    def issue_session_token(
        self, account_id: int, *, now: Optional[datetime] = None
    ) -> str:
        return issue_session_token(account_id, self._secret, now=now)

    def validate_session_token(self, token: str) -> int:
        return validate_session_token(token, self._secret)

    def issue_password_reset_token(
        self, account_id: int, *, now: Optional[datetime] = None
    ) -> str:
        return issue_password_reset_token(account_id, self._secret, now=now)

    def validate_password_reset_token(self, token: str) -> int:
        return validate_password_reset_token(token, self._secret)

    def decode_claims(self, token: str) -> Claims:
        return decode_claims(token, self._secret)

    def __repr__(self) -> str:
        return f"<TokenIssuer {ALGORITHM} iss={ISSUER}>"
