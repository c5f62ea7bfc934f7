"""API Configuration."""

from dataclasses import dataclass, field


@dataclass
class APIConfig:
    """Core API settings."""

    title: str = "MoodChat API"
    version: str = "1.0.0"
    description: str = "Real-time chat with presence and mood tagging"
    docs_url: str = "/docs"
    cors_methods: list[str] = field(default_factory=lambda: ["GET", "OPTIONS"])
    cors_headers: list[str] = field(default_factory=lambda: ["*"])


DEFAULT_API_CONFIG = APIConfig()
