"""Main FastAPI application entry point."""

from pathlib import Path

from dotenv import load_dotenv
from fastapi.responses import Response

from playback_mirror.config import get_settings
from playback_mirror.core.app_factory import create_app
from playback_mirror.logging_config import setup_logging

# Load environment variables from .env file
load_dotenv(Path(__file__).parent.parent / ".env")

# Configure structured logging (JSON to file + console)
settings = get_settings()
setup_logging(settings.log_level, poll_log_level=settings.poll_log_level, log_dir=settings.log_dir)

# Create application
app = create_app(settings)


@app.get("/favicon.ico", include_in_schema=False)
async def favicon():
    """Return empty favicon to prevent 404 errors."""
    return Response(content=b"", media_type="image/x-icon")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "playback_mirror.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )
