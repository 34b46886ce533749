"""
Logging configuration for the channel chat relay
"""

import logging
import sys
from typing import Optional
from .constants import LOG_LEVEL

def get_logger(name: str = "channel_relay") -> logging.Logger:
    """
    Get a logger instance with the relay's formatting

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)

        logger.addHandler(handler)
        logger.setLevel(LOG_LEVEL)

        # Prevent propagation to root logger
        logger.propagate = False

    return logger

def log_security_event(event_type: str, details: dict, logger: Optional[logging.Logger] = None):
    """
    Log security-related events with structured data

    Args:
        event_type: Type of security event
        details: Event details
        logger: Logger instance (optional)
    """
    if logger is None:
        logger = get_logger()

    logger.warning(f"SECURITY_EVENT: {event_type} | {details}")

def log_connection_event(client_id: str, channel: Optional[str], action: str, details: str = ""):
    """
    Log connection lifecycle events (open/join/leave/close)

    Args:
        client_id: Assigned client identifier
        channel: Joined channel, None before the handshake
        action: Lifecycle action
        details: Additional details
    """
    logger = get_logger()
    suffix = f" | {details}" if details else ""
    logger.info(f"CONNECTION_EVENT: {action} | client={client_id} | channel={channel}{suffix}")

def log_message_event(client_id: str, channel: Optional[str], action: str, details: str = ""):
    """
    Log routing decisions for inbound frames

    Args:
        client_id: Sender identifier
        channel: Sender's recorded channel
        action: Action (broadcast/dropped/ignored)
        details: Additional details
    """
    logger = get_logger()
    logger.info(f"MESSAGE_EVENT: {action} | client={client_id} | channel={channel} | {details}")

def log_websocket_event(event_type: str, connection_id: str, details: str = ""):
    """
    Log WebSocket transport events

    Args:
        event_type: Type of WebSocket event
        connection_id: Connection identifier
        details: Additional details
    """
    logger = get_logger()
    logger.debug(f"WEBSOCKET_EVENT: {event_type} | conn={connection_id} | {details}")

def log_system_event(event_type: str, details: str, level: str = "info"):
    """
    Log system-level events

    Args:
        event_type: Type of system event
        details: Event details
        level: Log level (info/warning/error)
    """
    logger = get_logger()
    log_message = f"SYSTEM_EVENT: {event_type} | {details}"

    if level == "warning":
        logger.warning(log_message)
    elif level == "error":
        logger.error(log_message)
    else:
        logger.info(log_message)
