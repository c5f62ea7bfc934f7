"""FastAPI Application Factory.

Creates and configures the MoodChat application: history store,
chat hub, middleware stack (request tracing, CORS), exception
handlers, HTTP routes and the chat websocket.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from moodchat.api.config import DEFAULT_API_CONFIG, APIConfig
from moodchat.api.dependencies import get_hub, get_store
from moodchat.api.models import HealthResponse
from moodchat.api.routes import chat_ws, history
from moodchat.errors import register_exception_handlers
from moodchat.logging_config import LoggingConfig, configure_logging
from moodchat.logging_config.middleware import RequestTracingMiddleware
from moodchat.persistence import HistoryWriter, PersistenceAdapter, create_store
from moodchat.presence import ChatHub, GroupDirectory, PresenceConfig
from moodchat.sentiment import SentimentClassifier
from moodchat.settings import Settings, get_settings

logger = logging.getLogger(__name__)


# ── Lifespan (startup / shutdown) ────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Bring the history store and engine tasks up and down with the app.

    A store that cannot be initialised raises StartupFailure here, which
    aborts startup: the service does not run without durable history.
    """
    state = app.state
    configure_logging(LoggingConfig.from_settings(state.settings))

    logger.info("MoodChat starting up (environment=%s)", state.settings.environment)
    await state.store.initialize()
    await state.hub.start()
    yield
    logger.info("MoodChat shutting down")
    await state.hub.stop()
    await state.store.close()


# ── App Factory ──────────────────────────────────────────────────────


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[PersistenceAdapter] = None,
    classifier: Optional[SentimentClassifier] = None,
    config: Optional[APIConfig] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Middleware stack (outermost → innermost):
        RequestTracing → CORS → App

    Args:
        settings: Service settings. Defaults to environment-derived settings.
        store: History store. Defaults to the backend named in settings.
        classifier: Sentiment classifier. Defaults to the lexicon classifier.
        config: API metadata.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or get_settings()
    config = config or DEFAULT_API_CONFIG
    store = store or create_store(settings)

    app = FastAPI(
        title=config.title,
        version=config.version,
        description=config.description,
        docs_url=config.docs_url,
        lifespan=lifespan,
    )

    writer = HistoryWriter(store)
    app.state.settings = settings
    app.state.store = store
    app.state.hub = ChatHub(
        config=PresenceConfig.from_settings(settings),
        groups=GroupDirectory.from_settings(settings),
        classifier=classifier,
        writer=writer,
    )

    # add_middleware prepends, so order here is innermost-first.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=config.cors_methods,
        allow_headers=config.cors_headers,
    )
    app.add_middleware(RequestTracingMiddleware)

    register_exception_handlers(app)

    # ── Health check ─────────────────────────────────────────────

    @app.get("/health", response_model=HealthResponse)
    async def health(
        store: PersistenceAdapter = Depends(get_store),
        hub: ChatHub = Depends(get_hub),
    ) -> HealthResponse:
        reachable = await store.ping()
        return HealthResponse(
            status="ok" if reachable else "degraded",
            timestamp=datetime.now(timezone.utc),
            activeConnections=len(hub.registry),
            database="connected" if reachable else "disconnected",
        )

    # ── Route modules ────────────────────────────────────────────

    app.include_router(history.router)
    app.include_router(chat_ws.router)

    return app
