import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/slack/events", response_class=PlainTextResponse)
async def receive_slack_event(request: Request):
    """
    Webhook for the Slack Events API.

    Always answers 200 with a plain-text body: the verification challenge,
    "OK", or "NG" when answering the message failed.
    """
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Ignoring Slack request with an unreadable JSON body")
        return "OK"

    if not isinstance(payload, dict):
        logger.warning(f"Ignoring Slack request with a {type(payload).__name__} body")
        return "OK"

    relay = request.app.state.relay
    logger.debug(f"Received Slack payload of type {payload.get('type')}")
    # The relay pass blocks on Slack and provider calls
    return await run_in_threadpool(relay.handle, payload)
