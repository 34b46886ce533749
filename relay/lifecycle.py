"""
Per-connection receive loop binding open/message/close to the router
"""

from typing import Any
from fastapi import WebSocket, WebSocketDisconnect
from .frames import parse_frame
from .message_router import MessageRouter
from .logger import get_logger, log_security_event, log_websocket_event

logger = get_logger()

class ConnectionLifecycle:
    """Owns each connection's event stream from accept to cleanup"""

    def __init__(self, router: MessageRouter):
        self.router = router

    async def serve(self, websocket: WebSocket):
        """
        Run one connection to completion

        Registry cleanup runs exactly once, whether the client disconnects
        cleanly or the loop fails.

        Args:
            websocket: Incoming, not yet accepted, connection
        """
        connection_id = f"ws_{id(websocket)}"

        await websocket.accept()
        client_host = websocket.client.host if websocket.client else "unknown"
        log_websocket_event("connection_accepted", connection_id, f"client_ip={client_host}")

        session = await self.router.open(websocket)
        log_websocket_event("session_opened", connection_id, f"client={session.client_id}")

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    log_websocket_event("disconnect_received", connection_id, f"code={message.get('code')}")
                    break

                try:
                    await self._dispatch(session, message, connection_id)
                except Exception as e:
                    # Keep serving this connection; the frame is lost
                    logger.error(f"Frame handling error for {session.client_id}: {e}")
                    continue

        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected for {session.client_id}")

        except Exception as e:
            logger.error(f"WebSocket error for {session.client_id}: {e}")
            log_security_event("websocket_error", {
                "client_id": session.client_id,
                "client_ip": client_host,
                "error": str(e)
            })

        finally:
            await self.router.close(session)
            log_websocket_event("session_closed", connection_id, f"client={session.client_id}")

    async def _dispatch(self, session: Any, message: dict, connection_id: str):
        raw = message.get("text")
        if raw is None:
            raw = message.get("bytes")

        payload = parse_frame(raw)
        if payload is None:
            log_websocket_event("malformed_frame", connection_id, "dropped")
            return

        await self.router.handle_frame(session, payload)
