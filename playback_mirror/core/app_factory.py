"""Application factory for creating and configuring the FastAPI app."""

from fastapi import FastAPI

from playback_mirror import __version__
from playback_mirror.config import Settings, get_settings
from playback_mirror.core.lifespan import lifespan
from playback_mirror.core.middleware import setup_middleware
from playback_mirror.middleware.error_handlers import register_error_handlers
from playback_mirror.routers import auth_router, health_router, playback_router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to run with; defaults to the environment-loaded singleton

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Playback Mirror API",
        description="""
        **Playback Mirror** - mirror and control your Spotify playback

        ## Login
        1. Visit `/auth/login?client_id=YOUR_CLIENT_ID` in your browser
        2. Approve access on Spotify
        3. Spotify redirects back to `/`, which completes the login

        ## Playback
        - `/api/playback/state` - mirrored track, progress and play state
        - `/api/playback/play`, `/pause`, `/next`, `/previous`, `/seek` - controls

        ## Health
        - `/health` - Basic health check
        - `/health/ready` - Readiness probe
        """,
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Configure middleware
    setup_middleware(app, settings)

    # Register exception handlers
    register_error_handlers(app)

    # Login routes, including the redirect landing at "/" - no prefix
    app.include_router(auth_router.router, tags=["auth"])

    # Health endpoints
    app.include_router(health_router.router, tags=["health"])

    # API routes
    app.include_router(playback_router.router, prefix="/api/playback", tags=["playback"])

    return app
