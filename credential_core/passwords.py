"""
Password Hasher: Argon2id derivation and verification.

Encoded hashes are self-describing:

    $argon2id$v=19$m=65536,t=1,p=4$<salt>$<hash>

salt and hash are standard base64 without padding. Verification always
re-derives with the parameters embedded in the stored hash, so hashes made
with older cost settings keep verifying after the defaults change.

Security Note:
    Never log passwords, salts or derived keys. Only log cost parameters.
"""
import os
import re
import hmac
import base64
import binascii
import logging
from dataclasses import dataclass

from argon2.low_level import ARGON2_VERSION, Type, hash_secret_raw
from argon2.exceptions import HashingError

from .exceptions import EmptyPasswordError, InvalidHashFormatError

logger = logging.getLogger("credential_core")

ALGORITHM = "argon2id"
SEPARATOR = "$"
SALT_SIZE = 16
KEY_LENGTH = 32

_UINT_RE = re.compile(r"[0-9]+")
_UINT32_MAX = 2**32 - 1


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii").rstrip("=")


def _b64decode(value: str) -> bytes:
    """Decode unpadded standard base64, rejecting padding and stray bytes."""
    if "=" in value:
        raise InvalidHashFormatError("hash fields must not carry base64 padding")
    try:
        return base64.b64decode(value + "=" * (-len(value) % 4), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidHashFormatError("invalid base64 in hash field") from exc


def _parse_uint(value: str, prefix: str) -> int:
    if not value.startswith(prefix):
        raise InvalidHashFormatError(f"expected '{prefix}' parameter")
    digits = value[len(prefix):]
    if not _UINT_RE.fullmatch(digits):
        raise InvalidHashFormatError(f"invalid '{prefix}' parameter")
    number = int(digits)
    if number > _UINT32_MAX:
        raise InvalidHashFormatError(f"'{prefix}' parameter out of range")
    return number


@dataclass(frozen=True)
class Argon2Params:
    """Argon2id cost parameters.

    Attributes:
        memory: Memory cost in KiB (65536 = 64 MiB).
        iterations: Number of passes over memory.
        parallelism: Degree of parallelism (lanes).
    """

    memory: int = 64 * 1024
    iterations: int = 1
    parallelism: int = 4

    def encode(self) -> str:
        """Render as ``m=<memory>,t=<iterations>,p=<parallelism>``."""
        return f"m={self.memory},t={self.iterations},p={self.parallelism}"

    @classmethod
    def decode(cls, value: str) -> "Argon2Params":
        """Parse the ``m=..,t=..,p=..`` field of an encoded hash.

        Raises:
            InvalidHashFormatError: If the field is not three unsigned
                integer parameters in ``m, t, p`` order.
        """
        fields = value.split(",")
        if len(fields) != 3:
            raise InvalidHashFormatError("expected three argon2 parameters")
        return cls(
            memory=_parse_uint(fields[0], "m="),
            iterations=_parse_uint(fields[1], "t="),
            parallelism=_parse_uint(fields[2], "p="),
        )


DEFAULT_PARAMS = Argon2Params()


def _derive(
    password: str,
    salt: bytes,
    params: Argon2Params,
    key_length: int,
    version: int = ARGON2_VERSION,
) -> bytes:
    return hash_secret_raw(
        password.encode("utf-8"),
        salt,
        time_cost=params.iterations,
        memory_cost=params.memory,
        parallelism=params.parallelism,
        hash_len=key_length,
        type=Type.ID,
        version=version,
    )


def hash_password(password: str, params: Argon2Params = DEFAULT_PARAMS) -> str:
    """Hash a password into the encoded argon2id format.

    Args:
        password: Plaintext password, must not be empty.
        params: Cost parameters; defaults to 64 MiB, 1 pass, 4 lanes.

    Returns:
        Encoded hash string with a fresh 16-byte salt.

    Raises:
        EmptyPasswordError: If password is empty.
    """
    if not password:
        raise EmptyPasswordError("password cannot be empty")
    salt = os.urandom(SALT_SIZE)
    key = _derive(password, salt, params, KEY_LENGTH)
    logger.debug("Hashed password with argon2id %s", params.encode())
    return SEPARATOR.join(
        [
            "",
            ALGORITHM,
            f"v={ARGON2_VERSION}",
            params.encode(),
            _b64encode(salt),
            _b64encode(key),
        ]
    )


def _split(encoded: str) -> tuple[int, Argon2Params, bytes, bytes]:
    parts = encoded.split(SEPARATOR)
    if len(parts) != 6 or parts[0] != "":
        raise InvalidHashFormatError("expected six '$'-delimited fields")
    if parts[1] != ALGORITHM:
        raise InvalidHashFormatError("unsupported hash algorithm")
    version = _parse_uint(parts[2], "v=")
    params = Argon2Params.decode(parts[3])
    salt = _b64decode(parts[4])
    key = _b64decode(parts[5])
    return version, params, salt, key


def verify_password(password: str, encoded: str) -> bool:
    """Check a password against an encoded argon2id hash.

    The key is re-derived using the version, cost parameters and salt
    embedded in ``encoded`` and compared in constant time.

    Raises:
        InvalidHashFormatError: If ``encoded`` cannot be parsed or its
            embedded parameters are rejected by argon2.
    """
    version, params, salt, expected = _split(encoded)
    try:
        computed = _derive(password, salt, params, len(expected), version)
    except HashingError as exc:
        raise InvalidHashFormatError("hash parameters rejected by argon2") from exc
    return hmac.compare_digest(computed, expected)


def needs_rehash(encoded: str, params: Argon2Params = DEFAULT_PARAMS) -> bool:
    """Return True if ``encoded`` was produced with parameters other than ``params``."""
    version, embedded, _, key = _split(encoded)
    return (
        version != ARGON2_VERSION
        or embedded != params
        or len(key) != KEY_LENGTH
    )


class PasswordHasher:
    """Argon2id hasher bound to a fixed set of cost parameters."""

    def __init__(self, params: Argon2Params = DEFAULT_PARAMS):
        self._params = params

    @property
    def params(self) -> Argon2Params:
        return self._params

    def hash(self, password: str) -> str:
        return hash_password(password, self._params)

    def verify(self, password: str, encoded: str) -> bool:
        return verify_password(password, encoded)

    def needs_rehash(self, encoded: str) -> bool:
        return needs_rehash(encoded, self._params)

    def __repr__(self) -> str:
        return f"<PasswordHasher {ALGORITHM} {self._params.encode()}>"
