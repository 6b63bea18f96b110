"""
Tests for the AES-GCM secret encryptor.

Tests cover:
- Seal / open round trips for every AES key size
- Nonce freshness and sealed layout
- Fail-closed opening (tamper, wrong key, bad encoding, short input)
- Key validation
- Independence of encryptor instances sharing a key
"""
import base64

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from credential_core.config import generate_encryption_key
from credential_core.crypto import NONCE_SIZE, TAG_SIZE, Encryptor
from credential_core.exceptions import (
    AuthenticationFailedError,
    CiphertextTooShortError,
    DecodeError,
    EncodeError,
    InvalidFormatError,
    InvalidKeySizeError,
)
from credential_core.passwords import Argon2Params, hash_password, verify_password

KEY = b"myverystrongpasswordo32bitlength"


# --- Test Fixtures ---

@pytest.fixture
def encryptor():
    return Encryptor(KEY)


# --- Test Round Trip ---

class TestSealOpen:
    """Tests for sealing and opening secrets."""

    def test_encrypt_decrypt(self, encryptor):
        """Test that open returns the sealed plaintext."""
        sealed = encryptor.seal("Hello, World!")
        assert sealed != "Hello, World!"
        assert encryptor.open(sealed) == "Hello, World!"

    @pytest.mark.parametrize("size", [16, 24, 32])
    def test_all_key_sizes(self, size):
        """Test AES-128, AES-192 and AES-256 keys."""
        enc = Encryptor(bytes(range(size)))
        assert enc.key_size == size
        assert enc.open(enc.seal("client-secret")) == "client-secret"

    @pytest.mark.parametrize(
        "plaintext",
        ["", "a", "s3cr3t~value", "ünïcødé 密钥 🔑", "x" * 10_000],
    )
    def test_plaintexts(self, encryptor, plaintext):
        """Test empty, unicode and long plaintexts."""
        assert encryptor.open(encryptor.seal(plaintext)) == plaintext

    def test_fresh_nonce_per_seal(self, encryptor):
        """Test that sealing the same text twice gives different output."""
        first = encryptor.seal("Hello, World!")
        second = encryptor.seal("Hello, World!")
        assert first != second
        assert base64.b64decode(first)[:NONCE_SIZE] != base64.b64decode(second)[:NONCE_SIZE]
        assert encryptor.open(first) == encryptor.open(second) == "Hello, World!"

    def test_sealed_layout(self, encryptor):
        """Test that sealed output is padded base64 of nonce, ciphertext, tag."""
        plaintext = "Hello, World!"
        sealed = encryptor.seal(plaintext)
        data = base64.b64decode(sealed, validate=True)
        assert len(data) == NONCE_SIZE + len(plaintext) + TAG_SIZE
        assert len(sealed) % 4 == 0
        plain = AESGCM(KEY).decrypt(data[:NONCE_SIZE], data[NONCE_SIZE:], None)
        assert plain == plaintext.encode("utf-8")

    def test_str_key(self):
        """Test that a text key is used as its UTF-8 bytes."""
        enc = Encryptor(KEY.decode("ascii"))
        assert Encryptor(KEY).open(enc.seal("secret")) == "secret"


# --- Test Fail-Closed Opening ---

class TestOpenFailures:
    """Tests that open never releases unauthenticated plaintext."""

    def test_every_byte_flip_fails(self, encryptor):
        """Test that flipping any single byte fails authentication."""
        data = base64.b64decode(encryptor.seal("Hello, World!"))
        for index in range(len(data)):
            tampered = bytearray(data)
            tampered[index] ^= 0xFF
            sealed = base64.b64encode(bytes(tampered)).decode("ascii")
            with pytest.raises(AuthenticationFailedError):
                encryptor.open(sealed)

    def test_wrong_key(self, encryptor):
        """Test that another key cannot open the secret."""
        sealed = encryptor.seal("Hello, World!")
        other = Encryptor(b"another-32-byte-encryption-key!!")
        with pytest.raises(AuthenticationFailedError):
            other.open(sealed)

    def test_truncated_tag(self, encryptor):
        """Test that a missing tag byte fails authentication."""
        data = base64.b64decode(encryptor.seal("Hello, World!"))
        with pytest.raises(AuthenticationFailedError):
            encryptor.open(base64.b64encode(data[:-1]).decode("ascii"))

    @pytest.mark.parametrize("sealed", ["not base64!!", "abc", "ZZZ=ZZZ=", "пароль"])
    def test_invalid_base64(self, encryptor, sealed):
        """Test that bad encodings raise DecodeError."""
        with pytest.raises(DecodeError):
            encryptor.open(sealed)

    @pytest.mark.parametrize("length", [0, 1, NONCE_SIZE - 1])
    def test_ciphertext_too_short(self, encryptor, length):
        """Test inputs shorter than a nonce."""
        sealed = base64.b64encode(b"\x00" * length).decode("ascii")
        with pytest.raises(CiphertextTooShortError):
            encryptor.open(sealed)

    def test_nonce_only(self, encryptor):
        """Test that a bare nonce fails authentication."""
        sealed = base64.b64encode(b"\x00" * NONCE_SIZE).decode("ascii")
        with pytest.raises(AuthenticationFailedError):
            encryptor.open(sealed)

    def test_authenticated_non_utf8_plaintext(self, encryptor):
        """Test that authentic bytes which are not UTF-8 raise DecodeError."""
        nonce = b"\x01" * NONCE_SIZE
        ct = AESGCM(KEY).encrypt(nonce, b"\xff\xfe", None)
        sealed = base64.b64encode(nonce + ct).decode("ascii")
        with pytest.raises(DecodeError):
            encryptor.open(sealed)

    def test_format_errors_are_value_errors(self, encryptor):
        """Test that decode errors share the format error base."""
        with pytest.raises(InvalidFormatError):
            encryptor.open("!!")
        with pytest.raises(ValueError):
            encryptor.open("!!")

    def test_lone_surrogate_plaintext(self, encryptor):
        """Test that text with lone surrogates cannot be sealed."""
        with pytest.raises(EncodeError):
            encryptor.seal("\ud800")
        with pytest.raises(InvalidFormatError):
            encryptor.seal("secret-\udfff")


# --- Test Key Validation ---

class TestKeyValidation:
    """Tests for encryption key sizes."""

    @pytest.mark.parametrize("size", [0, 1, 10, 15, 17, 31, 33, 64])
    def test_invalid_key_size(self, size):
        """Test that only 16, 24 and 32 byte keys are accepted."""
        with pytest.raises(InvalidKeySizeError):
            Encryptor(b"k" * size)

    def test_from_base64(self):
        """Test building from a generated base64 key."""
        enc = Encryptor.from_base64(generate_encryption_key())
        assert enc.key_size == 32
        assert enc.open(enc.seal("secret")) == "secret"

    def test_from_base64_invalid(self):
        """Test bad base64 keys."""
        with pytest.raises(DecodeError):
            Encryptor.from_base64("not base64!!")
        with pytest.raises(InvalidKeySizeError):
            Encryptor.from_base64(base64.b64encode(b"short").decode("ascii"))

    def test_repr_hides_key(self, encryptor):
        """Test that repr never shows key material."""
        assert repr(encryptor) == "<Encryptor AES-256-GCM>"
        assert KEY.decode("ascii") not in repr(encryptor)


# --- Test Statelessness Across Instances ---

class TestAcrossInstances:
    """Tests that sealed secrets depend only on the key."""

    def test_open_with_new_instance(self):
        """Test that a second encryptor with the same key opens the first one's output."""
        first = Encryptor(KEY)
        sealed = first.seal("Hello, World!")
        assert first.open(sealed) == "Hello, World!"
        second = Encryptor(KEY)
        assert second.open(sealed) == "Hello, World!"

    def test_sealed_password_hash(self):
        """Test sealing a password hash and verifying it after reopening elsewhere."""
        params = Argon2Params(memory=256, iterations=1, parallelism=1)
        encoded = hash_password("Hello, World!", params)
        sealed = Encryptor(KEY).seal(encoded)
        reopened = Encryptor(bytearray(KEY)).open(sealed)
        assert reopened == encoded
        assert verify_password("Hello, World!", reopened)
