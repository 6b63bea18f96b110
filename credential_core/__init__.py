"""Credential Core: password hashes, account tokens and sealed secrets.

Security Note (Threat Model):
    Tokens are stateless and cannot be revoked before they expire.
    Sealed secrets carry no key identifier; changing ENCRYPTION_KEY makes
    previously sealed values unreadable. Both are accepted limitations.
"""
from .version import __version__
from .exceptions import (
    CredentialError,
    EmptyInputError,
    EmptyPasswordError,
    InvalidFormatError,
    InvalidHashFormatError,
    DecodeError,
    EncodeError,
    CiphertextTooShortError,
    InvalidKeySizeError,
    SecretNotConfiguredError,
    InvalidTokenError,
    SubjectClaimMissingError,
    InvalidSubjectClaimError,
    AuthenticationFailedError,
)
from .passwords import (
    Argon2Params,
    PasswordHasher,
    hash_password,
    verify_password,
    needs_rehash,
)
from .tokens import (
    SessionClaims,
    PasswordResetClaims,
    TokenIssuer,
    decode_claims,
    issue_session_token,
    validate_session_token,
    issue_password_reset_token,
    validate_password_reset_token,
)
from .crypto import Encryptor
from .config import CoreConfig, generate_encryption_key, generate_jwt_secret

__all__ = [
    "__version__",
    "CredentialError",
    "EmptyInputError",
    "EmptyPasswordError",
    "InvalidFormatError",
    "InvalidHashFormatError",
    "DecodeError",
    "EncodeError",
    "CiphertextTooShortError",
    "InvalidKeySizeError",
    "SecretNotConfiguredError",
    "InvalidTokenError",
    "SubjectClaimMissingError",
    "InvalidSubjectClaimError",
    "AuthenticationFailedError",
    "Argon2Params",
    "PasswordHasher",
    "hash_password",
    "verify_password",
    "needs_rehash",
    "SessionClaims",
    "PasswordResetClaims",
    "TokenIssuer",
    "decode_claims",
    "issue_session_token",
    "validate_session_token",
    "issue_password_reset_token",
    "validate_password_reset_token",
    "Encryptor",
    "CoreConfig",
    "generate_encryption_key",
    "generate_jwt_secret",
]
