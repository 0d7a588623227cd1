"""FastAPI application entry point."""

import asyncio
import contextlib
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cartmate.api import auth, external, groups, items, lists, settings as user_settings, shares
from cartmate.api import websocket
from cartmate.config import get_settings
from cartmate.services.connections import ConnectionManager
from cartmate.services.hub import ListHub
from cartmate.services.presence import PresenceRegistry
from cartmate.services.realtime import Broadcaster, run_relay

settings = get_settings()

registry = PresenceRegistry()
connections = ConnectionManager()
broadcaster = Broadcaster(registry, connections)
hub = ListHub(registry, connections, broadcaster)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    relay_task = None
    if settings.realtime_relay_enabled:
        relay_task = asyncio.create_task(run_relay(broadcaster))
    yield
    if relay_task is not None:
        relay_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await relay_task


app = FastAPI(
    title="CartMate API",
    description="Shared grocery lists with live presence and item updates",
    version="0.1.0",
    lifespan=lifespan,
)
app.state.hub = hub
app.state.broadcaster = broadcaster

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Register routers
app.include_router(auth.router)
app.include_router(lists.router)
app.include_router(shares.router)
app.include_router(items.router)
app.include_router(groups.router)
app.include_router(user_settings.router)
app.include_router(external.router)
app.include_router(websocket.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
