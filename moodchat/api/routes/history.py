"""History API Routes.

Request/response access to the durable per-pair message history and
the contact list derived from it.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from moodchat.api.dependencies import get_app_settings, get_store
from moodchat.api.models import HistoryEntry
from moodchat.errors import ValidationError
from moodchat.persistence.adapter import PersistenceAdapter
from moodchat.persistence.models import PairKey
from moodchat.settings import Settings

logger = logging.getLogger(__name__)
router = APIRouter(tags=["History"])


def _clamp_limit(limit: Optional[int], settings: Settings) -> int:
    if limit is None:
        return settings.history_default_limit
    return max(1, min(limit, settings.history_max_limit))


@router.get("/history", response_model=list[HistoryEntry])
async def get_history(
    user: Optional[str] = Query(default=None),
    peer: Optional[str] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    store: PersistenceAdapter = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> list[HistoryEntry]:
    """Most recent messages *user* exchanged with *peer*, oldest first.

    Unknown users and pairs without history yield an empty list.
    """
    if not user or not peer:
        raise ValidationError("Missing user or peer parameter")

    messages = await store.read(PairKey(user, peer), _clamp_limit(limit, settings))
    return [HistoryEntry(**m.to_dict()) for m in messages]


@router.get("/contacts", response_model=list[str])
async def get_contacts(
    user: Optional[str] = Query(default=None),
    store: PersistenceAdapter = Depends(get_store),
) -> list[str]:
    """Peers (users or groups) *user* has message history with."""
    if not user:
        raise ValidationError("Missing user parameter", field="user")
    return await store.contacts(user)
