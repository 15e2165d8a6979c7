"""
Symmetric encryption of configuration values.

Provides:
- Key generation (256-bit, base64 text)
- String encryption/decryption with AES-256-GCM

Ciphertext format (text): base64(nonce) "!" base64(ciphertext || tag)

GCM authenticates every value, so decrypting with the wrong key fails with
CipherError instead of returning garbage.
"""

import base64
import binascii
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from botconfig.exceptions import CipherError

__all__ = ["generate_key", "encrypt", "decrypt", "KEY_SIZE", "NONCE_SIZE"]

KEY_SIZE = 32      # 256 bits
NONCE_SIZE = 12    # 96 bits (GCM standard)
TAG_SIZE = 16
SEPARATOR = "!"


def generate_key() -> str:
    """Generate a random 256-bit key, base64 encoded."""
    return base64.b64encode(AESGCM.generate_key(bit_length=KEY_SIZE * 8)).decode("ascii")


def _key_bytes(secret: str) -> bytes:
    if not secret:
        raise CipherError("Encryption key is empty")
    try:
        key = base64.b64decode(secret, validate=True)
    except (binascii.Error, ValueError):
        raise CipherError("Encryption key is not valid base64")
    if len(key) != KEY_SIZE:
        raise CipherError(f"Key must be {KEY_SIZE} bytes, got {len(key)}")
    return key


def encrypt(plain_text: str | None, secret: str) -> str | None:
    """
    Encrypt a string with the given key.

    Empty values are returned unchanged so optional fields stay empty on disk.

    Args:
        plain_text: Value to encrypt
        secret: Base64 key from generate_key()

    Returns:
        Ciphertext text, or the input if it was empty

    Raises:
        CipherError: If the key is malformed
    """
    if not plain_text:
        return plain_text

    aesgcm = AESGCM(_key_bytes(secret))
    nonce = secrets.token_bytes(NONCE_SIZE)
    ciphertext = aesgcm.encrypt(nonce, plain_text.encode("utf-8"), None)
    return (
        base64.b64encode(nonce).decode("ascii")
        + SEPARATOR
        + base64.b64encode(ciphertext).decode("ascii")
    )


def decrypt(cipher_text: str | None, secret: str) -> str | None:
    """
    Decrypt a value produced by encrypt().

    Raises:
        CipherError: If the key is malformed or wrong, or the value is corrupt
    """
    if not cipher_text:
        return cipher_text

    key = _key_bytes(secret)
    parts = cipher_text.split(SEPARATOR)
    if len(parts) != 2:
        raise CipherError("The encrypted value is not a valid format")

    try:
        nonce = base64.b64decode(parts[0], validate=True)
        ciphertext = base64.b64decode(parts[1], validate=True)
    except (binascii.Error, ValueError):
        raise CipherError("The encrypted value is not valid base64")

    if len(nonce) != NONCE_SIZE or len(ciphertext) < TAG_SIZE:
        raise CipherError("The encrypted value is truncated")

    try:
        plain = AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag:
        raise CipherError("Decryption failed: authentication tag mismatch")

    try:
        return plain.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CipherError(f"Decrypted value is not UTF-8: {e}")
