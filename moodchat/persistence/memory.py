"""In-memory history store for development and tests."""

import logging
from collections import defaultdict
from typing import Dict, List

from moodchat.persistence.models import ChatMessage, PairKey

logger = logging.getLogger(__name__)


class InMemoryHistoryStore:
    """Process-local PersistenceAdapter. History is lost on restart."""

    def __init__(self):
        self._records: Dict[PairKey, List[ChatMessage]] = defaultdict(list)

    async def initialize(self) -> None:
        logger.info("Using in-memory history store")

    async def append(self, key: PairKey, message: ChatMessage) -> bool:
        self._records[key].append(message)
        return True

    async def read(self, key: PairKey, limit: int) -> List[ChatMessage]:
        if limit <= 0:
            return []
        return list(self._records.get(key, [])[-limit:])

    async def contacts(self, owner: str) -> List[str]:
        return sorted(key.peer for key, records in self._records.items() if key.owner == owner and records)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None
