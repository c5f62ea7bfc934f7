"""Persistence Adapter Protocol.

Defines the interface every history store must follow.
"""

from typing import List, Protocol, runtime_checkable

from moodchat.persistence.models import ChatMessage, PairKey


@runtime_checkable
class PersistenceAdapter(Protocol):
    """Durable, append-only message history keyed by PairKey."""

    async def initialize(self) -> None:
        """Prepare the store. Raises StartupFailure if it is unreachable."""
        ...

    async def append(self, key: PairKey, message: ChatMessage) -> bool:
        """Append *message* to the history for *key*.

        Returns:
            True if stored, False if the write failed.
        """
        ...

    async def read(self, key: PairKey, limit: int) -> List[ChatMessage]:
        """Return at most *limit* most recent messages, oldest first."""
        ...

    async def contacts(self, owner: str) -> List[str]:
        """Peers *owner* has history with, sorted."""
        ...

    async def ping(self) -> bool:
        """Whether the store is currently reachable."""
        ...

    async def close(self) -> None:
        ...
