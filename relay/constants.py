"""
Protocol and server constants for the channel chat relay
"""

import string

# Server settings
HOST = "0.0.0.0"
PORT = 8000
SERVER_IDENTIFICATION = "websocket-server"

# WebSocket settings
WS_PING_INTERVAL = 20
WS_PING_TIMEOUT = 10

# Client identifiers
CLIENT_ID_LENGTH = 10
CLIENT_ID_ALPHABET = string.ascii_letters + string.digits

# Display names
MAX_DISPLAY_NAME_LENGTH = 10
DEFAULT_DISPLAY_NAME = "名無し"
SYSTEM_DISPLAY_NAME = "システム"

# Outbound frame type markers
TYPE_MINE = "mine"
TYPE_OTHER = "other"
TYPE_INFO = "info"
TYPE_COUNT = "count"

# Control characters stripped from free text (tab, newline and CR are kept)
CONTROL_CHARACTER_PATTERN = r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]'

# An '&' already starting one of these is left alone by the sanitizer
CHARACTER_REFERENCE_PATTERN = r'&(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#[xX][0-9A-Fa-f]+);'

# Logging levels
LOG_LEVEL = "INFO"

# Security headers
CORS_ORIGINS = ["*"]
CORS_ALLOW_CREDENTIALS = False

# System notices
NOTICES = {
    "login": "{name}さん({client_id})が入室しました！",
    "logout": "{name}さん({client_id})が退室しました",
    "duplicate_id": "接続に失敗しました。ページを更新して再接続してください",
}
