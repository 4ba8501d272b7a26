"""
AES-256-GCM encryption of key material at rest.

Record layout, base64-encoded as one string:

    salt (32 bytes) || iv (16 bytes) || auth tag (16 bytes) || ciphertext

The AES key is derived per record with PBKDF2-HMAC-SHA256 (100,000 iterations) from
the master secret and the record's random salt.
"""

import base64
import os

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

KEY_LENGTH = 32  # 256 bits
IV_LENGTH = 16
AUTH_TAG_LENGTH = 16
SALT_LENGTH = 32
PBKDF2_ITERATIONS = 100_000

HEADER_LENGTH = SALT_LENGTH + IV_LENGTH + AUTH_TAG_LENGTH


def derive_key(master_key: str, salt: bytes) -> bytes:
    """Derive a 256-bit AES key from the master secret and a salt."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(master_key.encode("utf-8"))


def encrypt_data(plaintext: bytes, master_key: str) -> str:
    """
    Encrypt bytes with a fresh salt and IV.

    Args:
        plaintext: Data to protect
        master_key: Master secret

    Returns:
        Base64 record (salt || iv || tag || ciphertext)
    """
    salt = os.urandom(SALT_LENGTH)
    iv = os.urandom(IV_LENGTH)
    key = derive_key(master_key, salt)

    # AESGCM appends the tag to the ciphertext; the record stores it up front
    sealed = AESGCM(key).encrypt(iv, bytes(plaintext), None)
    ciphertext, auth_tag = sealed[:-AUTH_TAG_LENGTH], sealed[-AUTH_TAG_LENGTH:]

    return base64.b64encode(salt + iv + auth_tag + ciphertext).decode("ascii")


def decrypt_data(encrypted_data: str, master_key: str) -> bytes:
    """
    Decrypt a record produced by encrypt_data.

    Raises:
        ValueError: If the record is malformed
        cryptography.exceptions.InvalidTag: If the secret is wrong or the record was altered
    """
    data = base64.b64decode(encrypted_data.strip(), validate=True)
    if len(data) < HEADER_LENGTH:
        raise ValueError("Encrypted record too short")

    salt = data[:SALT_LENGTH]
    iv = data[SALT_LENGTH:SALT_LENGTH + IV_LENGTH]
    auth_tag = data[SALT_LENGTH + IV_LENGTH:HEADER_LENGTH]
    ciphertext = data[HEADER_LENGTH:]

    key = derive_key(master_key, salt)
    return AESGCM(key).decrypt(iv, ciphertext + auth_tag, None)
