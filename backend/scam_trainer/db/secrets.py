"""Secrets encryption utilities.

Uses Fernet symmetric encryption so the stored API credential is never kept
in plaintext. The encryption key is loaded from the SECRETS_KEY environment
variable.
"""

import base64
import hashlib
import os
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken


class SecretsError(Exception):
    """Error related to secrets management."""

    pass


def _fernet_for(key_material: str) -> Fernet:
    # Derive a valid Fernet key (32 bytes, base64-encoded)
    key_hash = hashlib.sha256(key_material.encode()).digest()
    return Fernet(base64.urlsafe_b64encode(key_hash))


@lru_cache(maxsize=1)
def _get_fernet() -> Fernet:
    """Get or create the Fernet cipher.

    The key is derived from SECRETS_KEY. If not set, a deterministic key based
    on DATABASE_PATH is used for development.
    """
    key_material = os.environ.get("SECRETS_KEY")

    if not key_material:
        # NOT SECURE FOR PRODUCTION - should always set SECRETS_KEY
        db_path = os.environ.get("DATABASE_PATH", "./data/trainer.db")
        key_material = f"dev-secrets-key-{db_path}"

    return _fernet_for(key_material)


def encrypt_secret(value: str) -> str:
    """Encrypt a secret value, returning a base64 token."""
    encrypted = _get_fernet().encrypt(value.encode("utf-8"))
    return encrypted.decode("utf-8")


def decrypt_secret(encrypted_value: str) -> str:
    """Decrypt a secret value.

    Raises:
        SecretsError: If decryption fails (wrong key or corrupted value).
    """
    try:
        decrypted = _get_fernet().decrypt(encrypted_value.encode("utf-8"))
    except InvalidToken as e:
        raise SecretsError("Failed to decrypt secret: invalid token or key") from e
    return decrypted.decode("utf-8")


def reset_cipher() -> None:
    """Forget the cached cipher (after SECRETS_KEY changes)."""
    _get_fernet.cache_clear()
