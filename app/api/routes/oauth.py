"""
OAuth Callback Route

Slack redirects here after the user approves the app. The authorization code
is exchanged for a user token, the token is stored in the vault and the Slack
account is linked to an internal user. The optional signed "state" carries the
internal user id when the flow was started from /link-slack.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import RedirectResponse
import logging

from app.config import Settings, get_settings
from app.core.errors import SlackOverloadError, UserInputError
from app.services.factory import get_trigger_service
from app.services.trigger_service import TriggerService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/oauth")
async def oauth_callback(
    code: str = Query("", description="Authorization grant from Slack"),
    state: str = Query("", description="Signed internal user id from /link-slack"),
    error: str = Query("", description="Set by Slack when the user cancels"),
    service: TriggerService = Depends(get_trigger_service),
    settings: Settings = Depends(get_settings),
):
    """Complete the linking flow and send the user to the QuickStart page."""
    if error:
        logger.info(f"OAuth flow cancelled: {error}")
        raise HTTPException(status_code=400, detail=f"Slack authorization failed: {error}")

    try:
        user_id = await service.complete_oauth(code, state)
    except UserInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SlackOverloadError as e:
        logger.error(f"OAuth callback failed: {e}")
        raise HTTPException(status_code=500, detail="Could not link your Slack account, please try again.")

    logger.info(f"Linked Slack account to user {user_id}")
    return RedirectResponse(settings.quickstart_url, status_code=302)
