"""
Channel chat relay
Connection registry and broadcast routing for channel-based WebSocket chat
"""

from .models import ClientRecord, ConnectionSession, ConnectionState
from .errors import RelayError, DuplicateIdentifier, UnknownClient
from .identity import generate_client_id
from .validators import sanitize_text, sanitize_channel, truncate_display_name, normalize_display_name
from .registry import ClientRegistry
from .channel_index import ChannelIndex
from .message_router import MessageRouter
from .lifecycle import ConnectionLifecycle
from .constants import *
from .logger import (
    get_logger,
    log_security_event,
    log_connection_event,
    log_message_event,
    log_websocket_event,
    log_system_event
)

__all__ = [
    'ClientRecord',
    'ConnectionSession',
    'ConnectionState',
    'RelayError',
    'DuplicateIdentifier',
    'UnknownClient',
    'generate_client_id',
    'sanitize_text',
    'sanitize_channel',
    'truncate_display_name',
    'normalize_display_name',
    'ClientRegistry',
    'ChannelIndex',
    'MessageRouter',
    'ConnectionLifecycle',
    'get_logger',
    'log_security_event',
    'log_connection_event',
    'log_message_event',
    'log_websocket_event',
    'log_system_event'
]
