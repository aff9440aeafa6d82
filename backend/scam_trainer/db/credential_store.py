"""Persistence of the generation API credential.

The credential is the only datum the trainer persists. It is stored
encrypted in the settings table; when nothing is stored, the
GEMINI_API_KEY / GOOGLE_API_KEY environment variables are used instead.
"""

import logging
import os

from scam_trainer.db.database import get_db
from scam_trainer.db.secrets import SecretsError, decrypt_secret, encrypt_secret

logger = logging.getLogger(__name__)

CREDENTIAL_KEY = "gemini_api_key"
ENV_FALLBACKS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")


def _env_credential() -> str | None:
    for name in ENV_FALLBACKS:
        value = os.getenv(name)
        if value:
            return value
    return None


async def get_stored_credential() -> str | None:
    """Credential saved through the API, or None.

    A value that no longer decrypts (e.g. SECRETS_KEY changed) is treated as
    absent.
    """
    db = await get_db()
    cursor = await db.execute("SELECT value FROM settings WHERE key = ?", (CREDENTIAL_KEY,))
    row = await cursor.fetchone()
    if not row:
        return None
    try:
        return decrypt_secret(row["value"])
    except SecretsError as e:
        logger.warning(f"Ignoring stored credential: {e}")
        return None


async def get_credential() -> tuple[str | None, str | None]:
    """Return ``(credential, source)`` where source is 'stored' or 'environment'."""
    stored = await get_stored_credential()
    if stored:
        return stored, "stored"
    env_value = _env_credential()
    if env_value:
        return env_value, "environment"
    return None, None


async def set_credential(value: str) -> None:
    """Store (or replace) the credential.

    Raises:
        ValueError: If the value is blank.
    """
    value = value.strip()
    if not value:
        raise ValueError("API key must not be empty")

    db = await get_db()
    await db.execute(
        """
        INSERT INTO settings (key, value, updated_at) VALUES (?, ?, datetime('now'))
        ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """,
        (CREDENTIAL_KEY, encrypt_secret(value)),
    )
    await db.commit()
    logger.info("Stored API credential")


async def clear_credential() -> bool:
    """Delete the stored credential. Returns True if one existed."""
    db = await get_db()
    cursor = await db.execute("DELETE FROM settings WHERE key = ?", (CREDENTIAL_KEY,))
    await db.commit()
    deleted = cursor.rowcount > 0
    if deleted:
        logger.info("Cleared stored API credential")
    return deleted
