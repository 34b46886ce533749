"""
Data models for the channel chat relay
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Any

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

@dataclass
class ClientRecord:
    """Registry entry for one live connection"""
    client_id: str
    websocket: Any = None  # WebSocket connection object
    channel: Optional[str] = None
    display_name: Optional[str] = None
    connected_at: datetime = field(default_factory=_utcnow)

    @property
    def joined(self) -> bool:
        """True once the init handshake has set a channel"""
        return bool(self.channel)

class ConnectionState(Enum):
    """Per-connection protocol state"""
    UNJOINED = "unjoined"
    JOINED = "joined"
    REJECTED = "rejected"
    CLOSED = "closed"

@dataclass
class ConnectionSession:
    """
    Router-side state for a single connection

    `registered` is False when the generated identifier collided with a live
    client; such a session never touches the registry again.
    """
    client_id: str
    state: ConnectionState = ConnectionState.UNJOINED
    registered: bool = False
    channel: Optional[str] = None
