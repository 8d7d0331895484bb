"""
Field and key encryption helpers

- Symmetric AES-256-GCM envelopes for sensitive columns (email, phone,
  private keys at rest)
- RSA-OAEP encryption and RSA-SHA256 signatures for the security-question
  fallback
"""

import base64
import json
import logging
import os
from typing import Any, Optional, Tuple

from cryptography.exceptions import InvalidSignature, InvalidTag
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from identity_service.domain.entities import ErrorCode
from identity_service.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

ENVELOPE_SEPARATOR = ":"
IV_BYTES = 16
TAG_BYTES = 16
ASSOCIATED_DATA = b"identity-service"
KDF_SALT = b"identity-service-field-key"
MIN_RSA_BITS = 2048


def derive_field_key(secret: str) -> bytes:
    """Derive the 32-byte AES key from the configured secret (scrypt)"""
    kdf = Scrypt(salt=KDF_SALT, length=32, n=2**14, r=8, p=1)
    return kdf.derive(secret.encode())


class FieldCipher:
    """
    AES-256-GCM encryption for individual column values.

    Envelope format: "<iv hex>:<auth tag hex>:<ciphertext hex>".
    """

    def __init__(self, key: bytes):
        self._aead = AESGCM(key)

    @classmethod
    def from_secret(cls, secret: str) -> "FieldCipher":
        return cls(derive_field_key(secret))

    def encrypt_field(self, plaintext: Optional[str]) -> Optional[str]:
        """
        Encrypt a value into an envelope.

        Empty values are returned as-is. If encryption fails the plaintext is
        returned unchanged (degraded fallback, logged).
        """
        if not plaintext:
            return plaintext
        try:
            iv = os.urandom(IV_BYTES)
            sealed = self._aead.encrypt(iv, plaintext.encode(), ASSOCIATED_DATA)
            ciphertext, tag = sealed[:-TAG_BYTES], sealed[-TAG_BYTES:]
            return ENVELOPE_SEPARATOR.join((iv.hex(), tag.hex(), ciphertext.hex()))
        except (TypeError, ValueError, UnicodeError) as exc:
            logger.warning(f"Field encryption failed, storing plaintext: {type(exc).__name__}")
            return plaintext

    def decrypt_field(self, envelope: Optional[str]) -> Optional[str]:
        """
        Decrypt an envelope, failing open.

        Malformed or tampered envelopes are returned unchanged so legacy
        plaintext columns keep reading. Use decrypt_field_strict where
        tampered input must be rejected.
        """
        result = self.decrypt_field_strict(envelope)
        if result.is_err():
            if envelope and ENVELOPE_SEPARATOR in envelope:
                logger.warning("Field decryption failed, returning stored value unchanged")
            return envelope
        return result.value

    def decrypt_field_strict(self, envelope: Optional[str]) -> Result[str]:
        """Decrypt an envelope or fail with DECRYPTION_FAILED"""
        if not isinstance(envelope, str) or envelope.count(ENVELOPE_SEPARATOR) != 2:
            return Return.err(Error(ErrorCode.DECRYPTION_FAILED, "Malformed encrypted value"))

        iv_hex, tag_hex, ciphertext_hex = envelope.split(ENVELOPE_SEPARATOR)
        try:
            iv = bytes.fromhex(iv_hex)
            tag = bytes.fromhex(tag_hex)
            ciphertext = bytes.fromhex(ciphertext_hex)
            plaintext = self._aead.decrypt(iv, ciphertext + tag, ASSOCIATED_DATA)
            return Return.ok(plaintext.decode())
        except (InvalidTag, ValueError, UnicodeError):
            return Return.err(Error(ErrorCode.DECRYPTION_FAILED, "Unable to decrypt value"))


# ============================================================================
# Asymmetric helpers
# ============================================================================


def generate_key_pair(bits: int = MIN_RSA_BITS) -> Tuple[str, str]:
    """
    Generate an RSA key pair.

    Returns:
        (public key PEM, private key PEM) as strings
    """
    if bits < MIN_RSA_BITS:
        raise ValueError(f"RSA keys must be at least {MIN_RSA_BITS} bits")
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=bits)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return public_pem.decode(), private_pem.decode()


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


def asymmetric_encrypt(public_key_pem: str, plaintext: str) -> str:
    """RSA-OAEP encrypt, returning base64 ciphertext"""
    public_key = serialization.load_pem_public_key(public_key_pem.encode())
    ciphertext = public_key.encrypt(plaintext.encode(), _oaep())
    return base64.b64encode(ciphertext).decode()


def asymmetric_decrypt(private_key_pem: str, ciphertext_b64: str) -> str:
    """RSA-OAEP decrypt base64 ciphertext; raises ValueError on failure"""
    private_key = serialization.load_pem_private_key(private_key_pem.encode(), password=None)
    plaintext = private_key.decrypt(base64.b64decode(ciphertext_b64), _oaep())
    return plaintext.decode()


def _canonical_bytes(data: Any) -> bytes:
    return json.dumps(data, sort_keys=True, separators=(",", ":")).encode()


def sign_data(data: Any, private_key_pem: str) -> Result[str]:
    """
    Sign JSON-serializable data with RSA-SHA256 (PKCS#1 v1.5).

    Returns:
        Result with the hex signature, or INTERNAL_ERROR
    """
    try:
        private_key = serialization.load_pem_private_key(private_key_pem.encode(), password=None)
        signature = private_key.sign(_canonical_bytes(data), padding.PKCS1v15(), hashes.SHA256())
    except (TypeError, ValueError) as exc:
        logger.error(f"Digital signature failed: {type(exc).__name__}")
        return Return.err(Error(ErrorCode.INTERNAL_ERROR, "Unable to sign data"))
    return Return.ok(signature.hex())


def verify_signature(data: Any, signature_hex: str, public_key_pem: str) -> bool:
    """Verify an RSA-SHA256 signature produced by sign_data"""
    try:
        public_key = serialization.load_pem_public_key(public_key_pem.encode())
        public_key.verify(
            bytes.fromhex(signature_hex),
            _canonical_bytes(data),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
    except (InvalidSignature, TypeError, ValueError):
        return False
    return True
