"""Main entry point for the people-search Messenger bot."""

import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from peoplebot.api import create_fastapi_app
from peoplebot.app import Application
from peoplebot.config import load_settings
from peoplebot.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def main():
    """Run the webhook server."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    setup_logging()

    settings = load_settings()
    missing = settings.missing_credentials()
    if missing:
        logger.error("Missing config values: %s", ", ".join(missing))
        sys.exit(1)

    app = create_fastapi_app(Application(settings))
    host, port = settings.listen_address()

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
