"""
Credential Core Exceptions.

Every failure raised by the password hasher, the token issuer and the
secret encryptor derives from ``CredentialError``. Messages never carry
passwords, keys, tokens or plaintext.
"""


class CredentialError(Exception):
    """Base class for credential core failures."""


class EmptyInputError(CredentialError, ValueError):
    """A required input was empty."""


class EmptyPasswordError(EmptyInputError):
    """Password cannot be empty."""


class InvalidFormatError(CredentialError, ValueError):
    """An encoded value (hash, sealed secret, token) is malformed."""


class InvalidHashFormatError(InvalidFormatError):
    """Encoded password hash does not follow the argon2id format."""


class DecodeError(InvalidFormatError):
    """Sealed secret is not valid base64."""


class CiphertextTooShortError(InvalidFormatError):
    """Sealed secret is shorter than the nonce it must start with."""


class InvalidKeySizeError(CredentialError, ValueError):
    """Encryption key is not 16, 24 or 32 bytes long."""


class SecretNotConfiguredError(CredentialError, RuntimeError):
    """Token signing secret is empty or missing."""


class InvalidTokenError(CredentialError):
    """Token signature, expiry or structure could not be verified."""


class SubjectClaimMissingError(CredentialError):
    """Subject claim not found in token."""


class InvalidSubjectClaimError(CredentialError, ValueError):
    """Subject claim does not have the shape expected for the token purpose."""


class AuthenticationFailedError(CredentialError):
    """Sealed secret failed authentication (tampered data or wrong key)."""


class EncodeError(InvalidFormatError):
    """Plaintext cannot be encoded as UTF-8."""
