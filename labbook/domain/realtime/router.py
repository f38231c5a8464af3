"""Realtime router - streams row-change events over WebSocket"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, WebSocket
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError

from ...auth import AuthSession, resolve_session
from ...database import SessionLocal
from .access import can_subscribe, is_visible
from .broker import broker
from .events import TABLES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/realtime", tags=["Realtime"])

# Application close codes sent right after the handshake is accepted
CLOSE_UNKNOWN_TABLE = 4404
CLOSE_UNAUTHENTICATED = 4401
CLOSE_FORBIDDEN = 4403
CLOSE_BACKEND_ERROR = 1011


async def _reject(websocket: WebSocket, code: int) -> None:
    # Accept first so the close code reaches the client instead of an HTTP 403
    await websocket.accept()
    await websocket.close(code=code)


def _authenticate(token: str) -> AuthSession:
    db = SessionLocal()
    try:
        return resolve_session(db, token)
    finally:
        db.close()


async def _forward(websocket: WebSocket, queue: asyncio.Queue, session: AuthSession) -> None:
    while True:
        event = await queue.get()
        if is_visible(event, session):
            await websocket.send_json(event.model_dump(mode="json"))


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/{table}")
async def stream_changes(websocket: WebSocket, table: str, token: Optional[str] = Query(None)):
    """
    Stream insert/update/delete events for one table.

    The access token travels as a query parameter since browsers cannot set
    headers on WebSocket requests. Messages are ChangeEvent JSON objects.
    """
    if table not in TABLES:
        await _reject(websocket, CLOSE_UNKNOWN_TABLE)
        return

    if not token:
        await _reject(websocket, CLOSE_UNAUTHENTICATED)
        return

    try:
        session = await run_in_threadpool(_authenticate, token)
    except HTTPException:
        await _reject(websocket, CLOSE_UNAUTHENTICATED)
        return
    except SQLAlchemyError as e:
        logger.error(f"❌ Realtime session lookup failed: {e}")
        await _reject(websocket, CLOSE_BACKEND_ERROR)
        return

    if not can_subscribe(table, session):
        logger.warning(f"⚠️ User {session.user_id} denied realtime access to {table}")
        await _reject(websocket, CLOSE_FORBIDDEN)
        return

    # Registered before the handshake completes
    queue = broker.subscribe(table)
    try:
        await websocket.accept()
        logger.info(f"📡 User {session.user_id} subscribed to {table}")

        tasks = [
            asyncio.create_task(_forward(websocket, queue, session)),
            asyncio.create_task(_wait_for_disconnect(websocket)),
        ]
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            error = task.exception()
            if error is not None:
                logger.debug(f"📡 Realtime stream for {session.user_id} ended: {error}")
    finally:
        broker.unsubscribe(table, queue)
        logger.info(f"📡 User {session.user_id} unsubscribed from {table}")
