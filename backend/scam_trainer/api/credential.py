"""API routes for the stored generation API credential."""

import logging

from fastapi import APIRouter, HTTPException

from scam_trainer.db import credential_store
from scam_trainer.llm.chat.manager import get_session_manager
from scam_trainer.models.credential import CredentialStatus, CredentialUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/credential")
async def get_credential_status() -> CredentialStatus:
    """Report whether an API key is available. The key itself is never returned."""
    credential, source = await credential_store.get_credential()
    return CredentialStatus(configured=credential is not None, source=source)


@router.put("/credential")
async def save_credential(request: CredentialUpdate) -> CredentialStatus:
    """Store the API key used for new sessions."""
    try:
        await credential_store.set_credential(request.api_key)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return CredentialStatus(configured=True, source="stored")


@router.delete("/credential")
async def clear_credential() -> dict[str, str | int]:
    """Forget the stored API key and end every live session."""
    await credential_store.clear_credential()
    closed = await get_session_manager().close_all()
    logger.info(f"Credential cleared; closed {closed} session(s)")
    return {"status": "cleared", "closed_sessions": closed}
