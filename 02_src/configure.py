"""Apply the Messenger page settings (greeting, Get Started, menu) once."""

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

from peoplebot.config import load_settings
from peoplebot.logging_config import get_logger, setup_logging
from peoplebot.messenger import SendAPIClient, ThreadSettingsConfigurator

logger = get_logger(__name__)


async def run() -> bool:
    settings = load_settings()
    if not settings.page_access_token:
        logger.error('Missing config value "pageAccessToken"')
        return False

    client = SendAPIClient(
        settings.facebook_graph_url,
        settings.page_access_token,
        timeout=settings.send_timeout,
    )
    try:
        results = await ThreadSettingsConfigurator(client, settings).configure_all()
    finally:
        await client.close()
    return all(results.values())


def main():
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    setup_logging(console_format="text")
    sys.exit(0 if asyncio.run(run()) else 1)


if __name__ == "__main__":
    main()
