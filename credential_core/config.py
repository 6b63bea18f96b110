"""
Credential Core Configuration: signing secret, encryption key and argon2 cost.

The hasher, token issuer and encryptor never read the environment
themselves. This module is the boundary that does, reading:

    JWT_SECRET = <token signing secret>
    ENCRYPTION_KEY = <raw 16, 24 or 32 character AES key>
    ARGON2_MEMORY / ARGON2_ITERATIONS / ARGON2_PARALLELISM = <integer>  (optional)

Security Note:
    Never log key material. Only log key sizes and cost parameters.
"""
import os
import base64
import secrets
import logging

from pydantic import BaseModel, Field, field_validator

from .crypto import KEY_SIZES, Encryptor
from .passwords import Argon2Params, DEFAULT_PARAMS, PasswordHasher
from .tokens import TokenIssuer

logger = logging.getLogger("credential_core")


def _require_env(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        raise RuntimeError(f"{name} environment variable is not set")
    return value


def generate_encryption_key(size: int = 32) -> str:
    """Generate a random AES key and return it as a base64 string.

    This is a utility for operators; load the result with
    ``Encryptor.from_base64``.

    Raises:
        ValueError: If ``size`` is not 16, 24 or 32.
    """
    if size not in KEY_SIZES:
        raise ValueError(f"Unsupported key size: {size}")
    return base64.b64encode(secrets.token_bytes(size)).decode("ascii")


def generate_jwt_secret() -> str:
    """Generate a random URL-safe token signing secret (256 bits)."""
    return secrets.token_urlsafe(32)


class CoreConfig(BaseModel):
    """Validated credential core configuration."""

    jwt_secret: str
    encryption_key: bytes
    argon2_memory: int = Field(default=DEFAULT_PARAMS.memory, ge=8)
    argon2_iterations: int = Field(default=DEFAULT_PARAMS.iterations, ge=1)
    argon2_parallelism: int = Field(default=DEFAULT_PARAMS.parallelism, ge=1, le=255)

    @field_validator("jwt_secret")
    @classmethod
    def validate_secret(cls, v: str) -> str:
        """Reject an empty signing secret."""
        if not v:
            raise ValueError("jwt_secret must not be empty")
        return v

    @field_validator("encryption_key")
    @classmethod
    def validate_key(cls, v: bytes) -> bytes:
        """Ensure the key selects AES-128, AES-192 or AES-256."""
        if len(v) not in KEY_SIZES:
            raise ValueError(
                f"encryption_key must be 16, 24 or 32 bytes, got {len(v)}"
            )
        return v

    def argon2_params(self) -> Argon2Params:
        return Argon2Params(
            memory=self.argon2_memory,
            iterations=self.argon2_iterations,
            parallelism=self.argon2_parallelism,
        )

    def password_hasher(self) -> PasswordHasher:
        return PasswordHasher(self.argon2_params())

    def token_issuer(self) -> TokenIssuer:
        return TokenIssuer(self.jwt_secret)

    def encryptor(self) -> Encryptor:
        return Encryptor(self.encryption_key)

    @classmethod
    def from_env(cls) -> "CoreConfig":
        """Create CoreConfig by loading values from environment.

        Raises:
            RuntimeError: If JWT_SECRET or ENCRYPTION_KEY is not set.
        """
        jwt_secret = _require_env("JWT_SECRET")
        encryption_key = _require_env("ENCRYPTION_KEY").encode("utf-8")
        argon2 = {}
        for field, env in (
            ("argon2_memory", "ARGON2_MEMORY"),
            ("argon2_iterations", "ARGON2_ITERATIONS"),
            ("argon2_parallelism", "ARGON2_PARALLELISM"),
        ):
            value = os.environ.get(env)
            if value is not None:
                argon2[field] = int(value)
        config = cls(
            jwt_secret=jwt_secret,
            encryption_key=encryption_key,
            **argon2,
        )
        logger.debug(
            "Loaded credential config: AES-%d key, argon2id %s",
            len(config.encryption_key) * 8,
            config.argon2_params().encode(),
        )
        return config
