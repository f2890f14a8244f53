"""Inbound webhook endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from spritehooks import api_state as state
from spritehooks.adapters import InboundRequest
from spritehooks.api_errors import internal_error, responses
from spritehooks.config import get_settings

router = APIRouter()


def _webhook_rate_limit() -> str:
    return get_settings().webhook_rate_limit


@router.post("/webhook/{source}", responses=responses(400, 401, 429, 500))
@state.limiter.limit(_webhook_rate_limit)
async def receive_webhook(source: str, request: Request) -> JSONResponse:
    """Validate a webhook from ``source`` and run every automation it triggers.

    The body is read once, as raw bytes, because signatures are computed
    over the exact bytes the sender transmitted.
    """
    if state.dispatcher is None:
        raise internal_error("Dispatcher not initialized")

    body = await request.body()
    inbound = InboundRequest(headers=dict(request.headers), body=body)
    outcome = await state.dispatcher.dispatch(source, inbound)
    return JSONResponse(status_code=outcome.status_code, content=outcome.body)
