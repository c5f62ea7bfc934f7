"""API Request/Response Models.

Pydantic schemas for the HTTP endpoints.
"""

from datetime import datetime

from pydantic import BaseModel

from moodchat.sentiment.mood import Mood


class HistoryEntry(BaseModel):
    """One message in a history response."""

    sender: str
    recipient: str
    message: str
    timestamp: datetime
    mood: Mood


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    timestamp: datetime
    activeConnections: int = 0
    database: str = "connected"
