"""FastAPI dependencies resolving the per-app services from ``app.state``."""

from fastapi import Request

from moodchat.persistence.adapter import PersistenceAdapter
from moodchat.presence.hub import ChatHub
from moodchat.settings import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_hub(request: Request) -> ChatHub:
    return request.app.state.hub


def get_store(request: Request) -> PersistenceAdapter:
    return request.app.state.store
