"""WebSocket authentication for the task change feed."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import WebSocket, status

from .tokens import verify_token

logger = logging.getLogger(__name__)

# Seconds a client has to send its auth message
AUTH_TIMEOUT = 5.0


async def authenticate_websocket(websocket: WebSocket) -> dict | None:
    """Authenticate via ``token`` query param or a first ``{"type": "auth"}`` message.

    Returns the token payload if authenticated, None otherwise.
    """
    # Try token from query params first
    token = websocket.query_params.get("token")
    if token:
        payload = verify_token(token)
        if payload:
            return payload

    # If no token in query, wait for auth message
    try:
        message = await asyncio.wait_for(websocket.receive_json(), timeout=AUTH_TIMEOUT)
        if message.get("type") == "auth" and message.get("token"):
            return verify_token(message["token"])
    except asyncio.TimeoutError:
        logger.warning("WebSocket auth timeout")
    except Exception as e:
        logger.warning(f"WebSocket auth error: {e}")

    return None


class WebSocketSessionError(Exception):
    """Raised when WebSocket session setup fails."""
    pass


@asynccontextmanager
async def authenticated_websocket_session(websocket: WebSocket, endpoint_name: str):
    """Accept, authenticate and log a WebSocket session.

    Yields the token payload on success, raises WebSocketSessionError on failure.
    """
    await websocket.accept()
    logger.info(f"{endpoint_name} WebSocket connection accepted")

    payload = await authenticate_websocket(websocket)
    if not payload or not payload.get("sub"):
        try:
            await websocket.send_json({"type": "error", "message": "Authentication required"})
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        except Exception:
            pass  # Connection already closed
        raise WebSocketSessionError("Authentication failed")

    try:
        yield payload
    finally:
        logger.info(f"{endpoint_name} WebSocket session ended")
