"""Neo Attachments API entry point."""

import os

import uvicorn
from dotenv import load_dotenv

# Environment files must be loaded before logging reads LOG_* variables
load_dotenv(".env")
load_dotenv(".env.local", override=True)

from .config.logging_config import LoggingConfig

LoggingConfig.configure()

from .app import create_app
from .config.settings import get_settings

logger = LoggingConfig.get_logger(__name__)

app = create_app()


def main() -> None:
    """Run the application."""
    settings = get_settings()
    reload = os.getenv("RELOAD", "false").lower() == "true"

    logger.info(f"Starting Neo Attachments API on {settings.host}:{settings.port}")

    uvicorn.run(
        "neo_attachments.main:app",
        host=settings.host,
        port=settings.port,
        reload=reload,
        log_level="info",
        access_log=True,
    )


if __name__ == "__main__":
    main()
