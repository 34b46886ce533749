"""
Registry error taxonomy for the channel chat relay
"""


class RelayError(Exception):
    """Base class for relay errors"""


class DuplicateIdentifier(RelayError):
    """Raised when a generated client identifier is already registered"""

    def __init__(self, client_id: str):
        super().__init__(f"Client identifier already registered: {client_id}")
        self.client_id = client_id


class UnknownClient(RelayError):
    """Raised when an operation references an identifier not in the registry"""

    def __init__(self, client_id: str):
        super().__init__(f"Unknown client: {client_id}")
        self.client_id = client_id
