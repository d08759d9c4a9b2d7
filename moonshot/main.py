import asyncio
import logging

import uvicorn

from moonshot.config import settings
from moonshot.delivery.web.app import create_app
from moonshot.utils.logging import setup_logging

logger = logging.getLogger(__name__)


async def main() -> None:
    setup_logging()
    logger.info("Starting Moonshot Screener (default ids: %s)", ", ".join(settings.default_ids))

    app = create_app()
    config = uvicorn.Config(
        app,
        host=settings.web_host,
        port=settings.web_port,
        log_level=settings.log_level.lower(),
    )
    server = uvicorn.Server(config)
    await server.serve()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
