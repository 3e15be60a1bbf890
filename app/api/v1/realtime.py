import asyncio

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect, status

from app.api.deps import resolve_session_context
from app.core.logger import logger
from app.core.redis import Subscription, redis_client
from app.db.session import async_session_maker

router = APIRouter()

async def forward_events(websocket: WebSocket, subscription: Subscription):
    async for event in subscription.events():
        await websocket.send_json(event)

@router.websocket("/ws")
async def realtime_feed(websocket: WebSocket, token: str):
    # The database is only needed to authenticate; do not hold a connection for the socket's lifetime
    async with async_session_maker() as session:
        try:
            ctx = await resolve_session_context(token, session)
        except HTTPException:
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

    # Subscribe before accepting so nothing published after the handshake is missed
    async with redis_client.subscribe(ctx.user_id) as subscription:
        await websocket.accept()
        logger.info(f"Realtime feed opened for user {ctx.user_id}")

        forwarder = asyncio.create_task(forward_events(websocket, subscription))
        try:
            # Client frames are ignored; receiving only detects the disconnect
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            pass
        finally:
            forwarder.cancel()
            try:
                await forwarder
            except (asyncio.CancelledError, WebSocketDisconnect):
                pass

    logger.info(f"Realtime feed closed for user {ctx.user_id}")
