"""
Concurrency-safe client registry
"""

import asyncio
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
from .models import ClientRecord
from .errors import DuplicateIdentifier, UnknownClient
from .validators import sanitize_channel, normalize_display_name
from .logger import get_logger, log_security_event, log_connection_event

logger = get_logger()

class ClientRegistry:
    """Identifier -> ClientRecord table shared by every connection handler"""

    def __init__(self):
        # client_id -> ClientRecord
        self._clients: Dict[str, ClientRecord] = {}
        self._lock = asyncio.Lock()

    async def insert(self, client_id: str, websocket) -> ClientRecord:
        """
        Register a freshly opened connection

        Args:
            client_id: Generated identifier
            websocket: Connection handle owned by the record

        Returns:
            The new record, with channel and display name unset

        Raises:
            DuplicateIdentifier: if the identifier is already registered
        """
        async with self._lock:
            if client_id in self._clients:
                log_security_event("duplicate_identifier", {"client_id": client_id})
                raise DuplicateIdentifier(client_id)

            record = ClientRecord(client_id=client_id, websocket=websocket)
            self._clients[client_id] = record

            log_connection_event(client_id, None, "registered")
            return record

    async def set_membership(self, client_id: str, channel: str, display_name: Optional[str]) -> ClientRecord:
        """
        Bind a registered client to a channel and display name

        Args:
            client_id: Registered identifier
            channel: Channel name (sanitized here)
            display_name: Display name (sanitized and truncated here)

        Returns:
            The updated record

        Raises:
            UnknownClient: if the identifier is not registered
        """
        clean_channel = sanitize_channel(channel)
        clean_name = normalize_display_name(display_name)

        async with self._lock:
            record = self._clients.get(client_id)
            if record is None:
                raise UnknownClient(client_id)

            record.channel = clean_channel
            record.display_name = clean_name

            log_connection_event(client_id, clean_channel, "joined", f"name={clean_name}")
            return record

    async def remove(self, client_id: str) -> Optional[ClientRecord]:
        """
        Delete a client's record

        Args:
            client_id: Identifier to remove

        Returns:
            The removed record, or None if it was already gone
        """
        async with self._lock:
            record = self._clients.pop(client_id, None)

        if record is None:
            logger.debug(f"Remove ignored, client already gone: {client_id}")
        else:
            connected_for = (datetime.now(timezone.utc) - record.connected_at).total_seconds()
            log_connection_event(client_id, record.channel, "removed", f"connected_for={connected_for:.1f}s")
        return record

    async def get(self, client_id: str) -> ClientRecord:
        """
        Look up a client's record

        Raises:
            UnknownClient: if the identifier is not registered
        """
        async with self._lock:
            record = self._clients.get(client_id)
            if record is None:
                raise UnknownClient(client_id)
            return record

    async def contains(self, client_id: str) -> bool:
        async with self._lock:
            return client_id in self._clients

    async def select(self, predicate: Callable[[ClientRecord], bool]) -> List[ClientRecord]:
        """
        Snapshot the records matching a predicate

        Args:
            predicate: Filter evaluated while the registry is locked

        Returns:
            List of matching records
        """
        async with self._lock:
            return [record for record in self._clients.values() if predicate(record)]

    async def get_connection_stats(self) -> Dict[str, int]:
        """
        Get overall connection statistics

        Returns:
            Dictionary with connection stats
        """
        async with self._lock:
            joined = [record for record in self._clients.values() if record.joined]
            return {
                "total_clients": len(self._clients),
                "joined_clients": len(joined),
                "total_channels": len({record.channel for record in joined})
            }
