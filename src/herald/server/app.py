# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Starlette ASGI application for the Herald gateway.

Routes:
- ``GET /``        service identity (no auth)
- ``GET /health``  connector status snapshot (no auth)
- ``GET /tools``   full tool catalog (bearer auth)
- ``GET /sse``     event stream with connection, catalog and heartbeat frames (bearer auth)
- ``POST /execute`` run one tool, ``{tool_name, parameters}`` (bearer auth)
"""

from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from types import FrameType

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from ..connectors.base import Connectors
from ..core.config import GatewaySettings, get_settings
from ..core.logging import configure_logging, request_scope
from ..tools.dispatcher import Dispatcher
from ..tools.registry import ToolRegistry, get_registry
from .auth import requires_bearer
from .errors import invalid_json_error, tool_result_response
from .sessions import EventStreamResponse, SessionManager
from .status import StatusReporter

logger = logging.getLogger(__name__)


async def info_endpoint(request: Request) -> JSONResponse:
    """Service identity (no auth required)."""
    return JSONResponse(request.app.state.status.info())


async def health_endpoint(request: Request) -> JSONResponse:
    """Health check endpoint (no auth required)."""
    return JSONResponse(request.app.state.status.health())


@requires_bearer
async def tools_endpoint(request: Request) -> JSONResponse:
    """Full tool descriptors."""
    return JSONResponse({"tools": request.app.state.registry.describe()})


@requires_bearer
async def sse_endpoint(request: Request) -> Response:
    """Open a stream session and hand it to the event-stream response."""
    client = request.client.host if request.client else "unknown"
    session = request.app.state.sessions.open_session()
    logger.info(f"Stream client connected from {client}", extra={"session_id": session.id})
    return EventStreamResponse(session)


@requires_bearer
async def execute_endpoint(request: Request) -> Response:
    """Execute one tool.

    Body: ``{"tool_name": str, "parameters": object}``. Outcomes are
    ``{"success": true, "result": ...}`` (200) or ``{"success": false,
    "error": "..."}`` (500). Only a body that is not JSON gets a 400.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return invalid_json_error()

    # A missing or non-string tool_name is reported as an unknown tool
    if not isinstance(body, dict):
        body = {}

    with request_scope():
        result = await request.app.state.dispatcher.execute(body.get("tool_name"), body.get("parameters"))

    return tool_result_response(result)


@asynccontextmanager
async def lifespan(app: Starlette):
    """Start connectors the app owns, and release everything on shutdown."""
    settings: GatewaySettings = app.state.settings
    connectors: Connectors = app.state.connectors
    owns_connectors: bool = app.state.owns_connectors
    discord_task: asyncio.Task[None] | None = None

    logger.info(f"Starting {settings.server_name} on {settings.host}:{settings.port}")
    if settings.public_url:
        logger.info(f"Public URL: {settings.public_url}")

    if owns_connectors:
        if settings.discord_enabled:
            from ..connectors.discord_platform import DiscordPlatform

            platform = DiscordPlatform()
            connectors.chat = platform
            discord_task = asyncio.create_task(platform.run(settings.discord_bot_token), name="discord-client")
        else:
            logger.warning("DISCORD_BOT_TOKEN not provided - Discord features will not work")

        if settings.supabase_enabled:
            from ..connectors.supabase_store import SupabaseStore

            try:
                connectors.datastore = await SupabaseStore.connect(
                    settings.supabase_url, settings.supabase_service_key
                )
            except Exception:  # Intentionally broad: optional connector startup
                logger.exception("Supabase client initialization failed - sync_to_supabase disabled")
        else:
            logger.info("Supabase not configured - sync_to_supabase disabled")

    yield

    logger.info("Shutting down gracefully...")
    app.state.sessions.close_all()

    if owns_connectors and connectors.chat is not None:
        await connectors.chat.close()
    if discord_task is not None:
        await discord_task


def create_app(
    settings: GatewaySettings | None = None,
    connectors: Connectors | None = None,
    registry: ToolRegistry | None = None,
) -> Starlette:
    """Create the Starlette ASGI application.

    Args:
        settings: Gateway settings. Defaults to ``get_settings()``.
        connectors: Pre-built connectors. When omitted the app creates the
            Discord and Supabase connectors itself at startup and closes them
            at shutdown.
        registry: Tool catalog. Defaults to the gateway tools.
    """
    settings = settings or get_settings()
    owns_connectors = connectors is None
    connectors = connectors if connectors is not None else Connectors()
    registry = registry or get_registry()

    sessions = SessionManager(
        connectors,
        registry,
        service_name=settings.server_name,
        heartbeat_interval=settings.heartbeat_interval,
    )

    routes = [
        Route("/", info_endpoint, methods=["GET"]),
        Route("/health", health_endpoint, methods=["GET"]),
        Route("/tools", tools_endpoint, methods=["GET"]),
        Route("/sse", sse_endpoint, methods=["GET"]),
        Route("/execute", execute_endpoint, methods=["POST"]),
    ]

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type"],
        ),
    ]

    app = Starlette(routes=routes, middleware=middleware, lifespan=lifespan)
    app.state.settings = settings
    app.state.connectors = connectors
    app.state.owns_connectors = owns_connectors
    app.state.registry = registry
    app.state.dispatcher = Dispatcher(connectors, registry)
    app.state.sessions = sessions
    app.state.status = StatusReporter(
        connectors,
        service_name=settings.server_name,
        version=settings.server_version,
        documentation_url=settings.documentation_url,
        active_sessions=lambda: sessions.active_count,
    )
    return app


class GatewayServer(uvicorn.Server):
    """uvicorn server that ends open event streams as soon as an exit signal arrives.

    uvicorn runs the lifespan shutdown only after every connection has closed,
    and an event stream stays open until one side ends it.
    """

    def __init__(self, config: uvicorn.Config, sessions: SessionManager):
        super().__init__(config)
        self.sessions = sessions

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.sessions.close_all()
        else:
            loop.call_soon_threadsafe(self.sessions.close_all)
        super().handle_exit(sig, frame)


def run(host: str | None = None, port: int | None = None) -> None:
    """Run the gateway using uvicorn.

    Ctrl-C (SIGINT) or SIGTERM ends every open stream, then the lifespan
    shutdown closes the Discord connection and the process exits 0.
    """
    settings = get_settings()
    configure_logging(settings)
    host = host or settings.host
    port = port or settings.port

    logger.info(f"Starting Herald gateway on {host}:{port}")

    app = create_app(settings)
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
        log_config=None,
    )
    GatewayServer(config, app.state.sessions).run()


if __name__ == "__main__":
    run()
