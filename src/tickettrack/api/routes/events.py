"""Server-Sent Events (SSE) endpoint."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from tickettrack.api.dependencies import EventManagerDep  # noqa: TC001

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from tickettrack.tracker import EventManager, Subscriber

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def _frames(em: EventManager, subscriber: Subscriber) -> AsyncIterator[str]:
    """SSE frames for one subscriber until the client goes away."""
    try:
        yield em.create_heartbeat_event().to_sse()
        while True:
            try:
                event = await asyncio.wait_for(
                    subscriber.queue.get(), timeout=em._heartbeat_interval
                )
            except TimeoutError:
                yield em.create_heartbeat_event().to_sse()
            else:
                yield event.to_sse()
    except asyncio.CancelledError:
        pass  # client disconnected
    finally:
        em.unsubscribe(subscriber.id)
        logger.info("Event stream closed (%d open)", em.subscriber_count)


@router.get("/stream")
async def event_stream(event_manager: EventManagerDep) -> StreamingResponse:
    """Subscribe to the tracker's state as Server-Sent Events.

    Opens with a heartbeat, then sends a state_changed event carrying the
    full snapshot after every change, plus authentication_succeeded after a
    login. Idle connections get a heartbeat every 30 seconds.
    """
    subscriber = event_manager.subscribe()
    logger.info("Event stream opened (%d open)", event_manager.subscriber_count)
    return StreamingResponse(
        _frames(event_manager, subscriber),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
