from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Dict

from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse

from raindrops.events import ChangeBus
from raindrops.server.state import ApplicationState, get_app_state

logger = logging.getLogger(__name__)

router = APIRouter(tags=["events"])

UPDATE_FRAME: Dict[str, str] = {"data": "update"}


async def change_frames(bus: ChangeBus) -> AsyncIterator[Dict[str, str]]:
    """
    One `data: update` frame per change signal.

    EventSourceResponse cancels this generator when the client goes away or
    a write fails; leaving it for any reason unsubscribes from the bus.
    """
    subscription = bus.subscribe()
    try:
        async for _ in subscription:
            yield dict(UPDATE_FRAME)
    except asyncio.CancelledError:
        logger.debug("[Events] Client disconnected")
        raise
    finally:
        await subscription.aclose()


@router.get("/events")
async def events(state: ApplicationState = Depends(get_app_state)):
    """
    Server-Sent Events stream of change notifications.

    Frames are exactly `data: update\\n\\n`; clients re-query /list on each.
    """
    return EventSourceResponse(change_frames(state.bus), sep="\n")
