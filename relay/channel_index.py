"""
Channel membership derived from the client registry
"""

from typing import List, Optional
from .models import ClientRecord
from .registry import ClientRegistry

class ChannelIndex:
    """Resolves the live members of a channel on every call, never cached"""

    def __init__(self, registry: ClientRegistry):
        self._registry = registry

    async def members_of(self, channel: Optional[str]) -> List[ClientRecord]:
        """
        Get every registered client whose channel equals `channel`

        Args:
            channel: Channel name compared by exact equality

        Returns:
            Matching records; empty for an empty or unset channel
        """
        if not channel:
            return []

        return await self._registry.select(
            lambda record: record.joined and record.channel == channel
        )
