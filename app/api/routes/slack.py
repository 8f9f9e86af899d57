"""
Slack Slash Command Routes

Every command is a form-encoded POST signed with the app's signing secret.
Handled errors are returned as HTTP 200 with an ephemeral message so Slack
shows them to the user; only bad signatures and unparseable bodies get a
non-200 status.

    POST /slack/trigger          <name>
    POST /slack/create-trigger   <definition>
    POST /slack/delete-trigger   <name>
    POST /slack/list-triggers
    POST /slack/clear-status
    POST /slack/link-slack
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from typing import Awaitable
import logging

from app.config import Settings, get_settings
from app.integrations.slack.models import SlackPayload
from app.integrations.slack.parser import parse_slash_command, verify_signature
from app.models.api_responses import SlackMessageResponse
from app.services.factory import get_trigger_service
from app.services.trigger_service import TriggerService, error_response

logger = logging.getLogger(__name__)
router = APIRouter()


async def slash_command(
    request: Request, settings: Settings = Depends(get_settings)
) -> SlackPayload:
    """Verify the Slack signature and parse the slash command body."""
    body = await request.body()

    if not verify_signature(body, request.headers, settings.slack_signing_secret):
        logger.warning(f"Rejected unsigned or badly signed request to {request.url.path}")
        raise HTTPException(
            status_code=401, detail="Unauthorized message sent to SlackOverload. Rejected."
        )

    try:
        return parse_slash_command(body)
    except (ValueError, UnicodeDecodeError) as e:
        logger.error(f"Could not parse slash command: {e}")
        raise HTTPException(
            status_code=400,
            detail="SlackOverload and Slack are not talking the same language right now. "
            "We will have to try again later. Sorry!",
        )


async def _respond(
    command: Awaitable[SlackMessageResponse], settings: Settings
) -> SlackMessageResponse:
    try:
        response = await command
    except Exception as e:
        return error_response(e, settings.quickstart_url)

    if settings.debug:
        logger.debug(f"Replying: {response.text}")
    return response


@router.post("/trigger", response_model=SlackMessageResponse, response_model_exclude_none=True)
async def trigger(
    payload: SlackPayload = Depends(slash_command),
    service: TriggerService = Depends(get_trigger_service),
    settings: Settings = Depends(get_settings),
):
    """Apply a stored trigger to all linked Slack accounts."""
    return await _respond(service.trigger(payload, payload.text), settings)


@router.post("/create-trigger", response_model=SlackMessageResponse, response_model_exclude_none=True)
async def create_trigger(
    payload: SlackPayload = Depends(slash_command),
    service: TriggerService = Depends(get_trigger_service),
    settings: Settings = Depends(get_settings),
):
    """Example: /create-trigger vacation = I'm on a boat! (:boat:) DND for 1w"""
    return await _respond(service.create_trigger(payload, payload.text), settings)


@router.post("/delete-trigger", response_model=SlackMessageResponse, response_model_exclude_none=True)
async def delete_trigger(
    payload: SlackPayload = Depends(slash_command),
    service: TriggerService = Depends(get_trigger_service),
    settings: Settings = Depends(get_settings),
):
    return await _respond(service.delete_trigger(payload, payload.text), settings)


@router.post("/list-triggers", response_model=SlackMessageResponse, response_model_exclude_none=True)
async def list_triggers(
    payload: SlackPayload = Depends(slash_command),
    service: TriggerService = Depends(get_trigger_service),
    settings: Settings = Depends(get_settings),
):
    return await _respond(service.list_triggers(payload), settings)


@router.post("/clear-status", response_model=SlackMessageResponse, response_model_exclude_none=True)
async def clear_status(
    payload: SlackPayload = Depends(slash_command),
    service: TriggerService = Depends(get_trigger_service),
    settings: Settings = Depends(get_settings),
):
    return await _respond(service.clear_status(payload), settings)


@router.post("/link-slack", response_model=SlackMessageResponse, response_model_exclude_none=True)
async def link_slack(
    payload: SlackPayload = Depends(slash_command),
    service: TriggerService = Depends(get_trigger_service),
    settings: Settings = Depends(get_settings),
):
    return await _respond(service.link_slack(payload), settings)
