"""
Secret Encryptor: AES-GCM sealing of tenant secrets stored at rest.

Format (before base64): [nonce 12B][encrypted_payload + GCM_tag 16B]

The key length selects AES-128, AES-192 or AES-256. A fresh random nonce is
drawn for every seal, and opening fails closed: tampered data or a different
key raises ``AuthenticationFailedError`` and no plaintext is returned.

Security Note:
    Never log plaintext, ciphertext or key material. Only log key sizes.
"""
import os
import base64
import binascii
import logging
from typing import Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .exceptions import (
    AuthenticationFailedError,
    CiphertextTooShortError,
    DecodeError,
    EncodeError,
    InvalidKeySizeError,
)

logger = logging.getLogger("credential_core")

NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16
KEY_SIZES = (16, 24, 32)


class Encryptor:
    """Authenticated encryption of secret strings with a fixed AES key."""

    def __init__(self, key: Union[bytes, bytearray, str]):
        """
        Args:
            key: Raw AES key. A ``str`` is taken as its UTF-8 bytes.

        Raises:
            InvalidKeySizeError: If the key is not 16, 24 or 32 bytes.
        """
        if isinstance(key, str):
            key = key.encode("utf-8")
        key = bytes(key)
        if len(key) not in KEY_SIZES:
            raise InvalidKeySizeError(
                "invalid key size: must be 16, 24, or 32 bytes"
            )
        self._key = key
        logger.debug("Encryptor ready with AES-%d key", len(key) * 8)

    @classmethod
    def from_base64(cls, value: str) -> "Encryptor":
        """Build an encryptor from a base64-encoded key.

        Raises:
            DecodeError: If ``value`` is not valid base64.
            InvalidKeySizeError: If the decoded key has the wrong length.
        """
        try:
            key = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DecodeError("encryption key is not valid base64") from exc
        return cls(key)

    @property
    def key_size(self) -> int:
        return len(self._key)

    def seal(self, plaintext: str) -> str:
        """Encrypt and authenticate ``plaintext``.

        Returns:
            Standard base64 of nonce followed by ciphertext and tag.

        Raises:
            EncodeError: If ``plaintext`` holds lone surrogates.
        """
        try:
            data = plaintext.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise EncodeError("plaintext is not valid UTF-8") from exc
        cipher = AESGCM(self._key)
        nonce = os.urandom(NONCE_SIZE)
        ct = cipher.encrypt(nonce, data, None)
        return base64.b64encode(nonce + ct).decode("ascii")

    def open(self, sealed: str) -> str:
        """Decrypt a value produced by ``seal`` and verify its tag.

        Raises:
            DecodeError: If ``sealed`` is not valid base64 or the
                authenticated plaintext is not UTF-8.
            CiphertextTooShortError: If it is shorter than a nonce.
            AuthenticationFailedError: If the tag does not verify.
        """
        try:
            data = base64.b64decode(sealed, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DecodeError("failed to decode base64") from exc
        if len(data) < NONCE_SIZE:
            raise CiphertextTooShortError(
                f"ciphertext too short: {len(data)} bytes "
                f"(minimum {NONCE_SIZE})"
            )
        cipher = AESGCM(self._key)
        nonce = data[:NONCE_SIZE]
        ct = data[NONCE_SIZE:]
        try:
            plaintext = cipher.decrypt(nonce, ct, None)
        except InvalidTag as exc:
            logger.warning("Sealed secret failed authentication")
            raise AuthenticationFailedError(
                "failed to decrypt or authenticate"
            ) from exc
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError("sealed secret is not valid UTF-8") from exc

    def __repr__(self) -> str:
        return f"<Encryptor AES-{self.key_size * 8}-GCM>"
