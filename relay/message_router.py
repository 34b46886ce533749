"""
Protocol state machine: interprets inbound frames, updates the registry and
fans outbound frames out to channel members
"""

import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Optional
from starlette.websockets import WebSocketState
from .channel_index import ChannelIndex
from .constants import NOTICES, TYPE_MINE, TYPE_OTHER
from .errors import DuplicateIdentifier, UnknownClient
from .frames import (
    inbound_client_id,
    init_frame,
    info_frame,
    headcount_frame,
    chat_frame
)
from .identity import generate_client_id
from .models import ClientRecord, ConnectionSession, ConnectionState
from .registry import ClientRegistry
from .validators import sanitize_text, sanitize_channel, sanitize_client_id, truncate_display_name
from .logger import get_logger, log_connection_event, log_message_event

logger = get_logger()

def is_open(websocket: Any) -> bool:
    """True when both sides of the connection are still connected"""
    return (
        getattr(websocket, "client_state", None) == WebSocketState.CONNECTED
        and getattr(websocket, "application_state", None) == WebSocketState.CONNECTED
    )

def _server_time() -> datetime:
    return datetime.now(timezone.utc)

class MessageRouter:
    """Drives each connection through Unjoined -> Joined -> Closed"""

    def __init__(self, registry: ClientRegistry, channel_index: Optional[ChannelIndex] = None,
                 id_generator: Callable[[], str] = generate_client_id,
                 clock: Callable[[], datetime] = _server_time):
        self.registry = registry
        self.channel_index = channel_index or ChannelIndex(registry)
        self._generate_id = id_generator
        self._clock = clock

    async def open(self, websocket: Any) -> ConnectionSession:
        """
        Register a newly accepted connection and send its identifier

        On an identifier collision the client is told to reconnect and the
        returned session is marked rejected; no retry is attempted.

        Args:
            websocket: Accepted connection

        Returns:
            Session tracking this connection's protocol state
        """
        client_id = self._generate_id()
        session = ConnectionSession(client_id=client_id)

        try:
            await self.registry.insert(client_id, websocket)
        except DuplicateIdentifier:
            session.state = ConnectionState.REJECTED
            log_connection_event(client_id, None, "rejected", "duplicate identifier")
            await self.send(websocket, info_frame(None, NOTICES["duplicate_id"]))
            return session

        session.registered = True
        await self.send(websocket, init_frame(client_id))
        log_connection_event(client_id, None, "opened")
        return session

    async def handle_frame(self, session: ConnectionSession, payload: Dict[str, Any]):
        """
        Dispatch one decoded inbound frame

        Args:
            session: Sender's session
            payload: Decoded JSON object
        """
        if session.state in (ConnectionState.REJECTED, ConnectionState.CLOSED):
            log_message_event(session.client_id, session.channel, "ignored", f"state={session.state.value}")
            return

        if payload.get("init"):
            if session.state == ConnectionState.UNJOINED:
                await self._handle_init(session, payload)
            else:
                log_message_event(session.client_id, session.channel, "ignored", "repeated init")
            return

        if session.state != ConnectionState.JOINED:
            log_message_event(session.client_id, None, "dropped", "chat before init")
            return

        await self._handle_chat(session, payload)

    async def close(self, session: ConnectionSession):
        """
        Tear down a connection; safe to call more than once

        Remaining channel members receive a logout notice and the
        headcount after this client's departure.

        Args:
            session: Closing session
        """
        if session.state == ConnectionState.CLOSED:
            return
        session.state = ConnectionState.CLOSED

        if not session.registered:
            return

        record = await self.registry.remove(session.client_id)
        log_connection_event(session.client_id, session.channel, "closed")

        if record is None or not record.joined:
            return

        members = await self.channel_index.members_of(record.channel)
        notice = NOTICES["logout"].format(name=record.display_name, client_id=record.client_id)
        await self.broadcast(members, info_frame(record.channel, notice))
        await self.broadcast(members, headcount_frame(record.channel, len(members)))

    async def _handle_init(self, session: ConnectionSession, payload: Dict[str, Any]):
        client_id = sanitize_client_id(inbound_client_id(payload))
        raw_channel = payload.get("channel")

        if client_id != session.client_id:
            log_message_event(session.client_id, None, "dropped", "init with mismatched identifier")
            return

        if not isinstance(raw_channel, str) or not sanitize_channel(raw_channel):
            log_message_event(session.client_id, None, "dropped", "init without channel")
            return

        try:
            record = await self.registry.set_membership(
                session.client_id, raw_channel, payload.get("name")
            )
        except UnknownClient:
            logger.debug(f"Init for client already removed: {session.client_id}")
            return

        session.state = ConnectionState.JOINED
        session.channel = record.channel

        members = await self.channel_index.members_of(record.channel)
        notice = NOTICES["login"].format(name=record.display_name, client_id=record.client_id)
        await self.broadcast(members, info_frame(record.channel, notice))
        await self.broadcast(members, headcount_frame(record.channel, len(members)))

    async def _handle_chat(self, session: ConnectionSession, payload: Dict[str, Any]):
        raw_message = payload.get("message")
        raw_channel = payload.get("channel")

        if not isinstance(raw_message, str) or not raw_message:
            log_message_event(session.client_id, session.channel, "dropped", "empty message")
            return

        if not isinstance(raw_channel, str) or not raw_channel:
            log_message_event(session.client_id, session.channel, "dropped", "missing channel")
            return

        message = sanitize_text(raw_message)
        if not message:
            log_message_event(session.client_id, session.channel, "dropped", "blank after sanitizing")
            return

        try:
            sender = await self.registry.get(session.client_id)
        except UnknownClient:
            logger.debug(f"Chat from client already removed: {session.client_id}")
            return

        # The recorded channel wins over whatever the frame claims
        recipients = await self.channel_index.members_of(sender.channel)
        sent_at = self._clock()
        name = truncate_display_name(sender.display_name or "")

        delivered = 0
        for recipient in recipients:
            kind = TYPE_MINE if recipient.websocket is sender.websocket else TYPE_OTHER
            frame = chat_frame(sender.client_id, sender.channel, name, message, kind, sent_at)
            if await self.send(recipient.websocket, frame):
                delivered += 1

        log_message_event(sender.client_id, sender.channel, "broadcast",
                          f"delivered={delivered}/{len(recipients)} length={len(message)}")

    async def broadcast(self, recipients: Iterable[ClientRecord], frame: Dict[str, Any]) -> int:
        """
        Send the same frame to every recipient

        Returns:
            Number of successful sends
        """
        successful_sends = 0
        for recipient in recipients:
            if await self.send(recipient.websocket, frame):
                successful_sends += 1
        return successful_sends

    async def send(self, websocket: Any, frame: Dict[str, Any]) -> bool:
        """
        Send a frame if the connection is open; closed connections are skipped

        Returns:
            True if the frame was handed to the transport
        """
        if not is_open(websocket):
            return False

        try:
            await websocket.send_text(json.dumps(frame, ensure_ascii=False))
            return True
        except Exception as e:
            # A failing recipient must not stop delivery to the others
            logger.error(f"Failed to send {frame.get('type') or 'init'} frame: {e}")
            return False
