"""
Wire frames: inbound JSON parsing and whitelisted outbound constructors
"""

import json
from datetime import datetime
from typing import Any, Dict, Optional, Union
from .constants import SYSTEM_DISPLAY_NAME, TYPE_INFO, TYPE_COUNT

def parse_frame(raw: Union[str, bytes, None]) -> Optional[Dict[str, Any]]:
    """
    Decode an inbound WebSocket payload

    Args:
        raw: Text or binary payload

    Returns:
        The decoded JSON object, or None when the payload is not a JSON object
    """
    if raw is None:
        return None

    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return None

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        return None

    if not isinstance(payload, dict):
        return None
    return payload

def inbound_client_id(payload: Dict[str, Any]) -> Any:
    """Identifier carried by an inbound frame (`uuid`, falling back to `id`)"""
    client_id = payload.get("uuid")
    if client_id is None:
        client_id = payload.get("id")
    return client_id

def init_frame(client_id: str) -> Dict[str, Any]:
    """Identifier assignment sent right after a connection opens"""
    return {
        "init": True,
        "uuid": client_id,
    }

def info_frame(channel: Optional[str], message: str) -> Dict[str, Any]:
    """System notice rendered by clients as an info bubble"""
    return {
        "init": False,
        "channel": channel,
        "name": SYSTEM_DISPLAY_NAME,
        "message": message,
        "type": TYPE_INFO,
        "time": None,
    }

def headcount_frame(channel: str, count: int) -> Dict[str, Any]:
    """Live member count of a channel"""
    return {
        "init": False,
        "channel": channel,
        "count": count,
        "type": TYPE_COUNT,
        "time": None,
    }

def chat_frame(client_id: str, channel: str, name: str, message: str,
               kind: str, time: datetime) -> Dict[str, Any]:
    """
    Chat message as delivered to one recipient

    Args:
        client_id: Sender identifier
        channel: Sender's recorded channel
        name: Sender display name
        message: Sanitized chat text
        kind: TYPE_MINE for the sender's own copy, TYPE_OTHER otherwise
        time: Server timestamp

    Returns:
        Outbound frame dictionary
    """
    return {
        "init": False,
        "uuid": client_id,
        "channel": channel,
        "name": name,
        "message": message,
        "type": kind,
        "time": time.isoformat(),
    }
