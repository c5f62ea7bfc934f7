"""HTTP and websocket surface for the MoodChat service."""

from moodchat.api.app import create_app

__all__ = ["create_app"]
