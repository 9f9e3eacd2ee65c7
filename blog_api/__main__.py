"""Run the Blog API: `python -m blog_api` (configured through DATABASE_URL / PORT)."""

import asyncio
import logging

from blog_api.main import setup_logging
from blog_api.server import close_server, run_server

logger = logging.getLogger("blog_api")


async def serve() -> None:
    server = await run_server()
    try:
        await server.wait_closed()
    finally:
        await close_server(server)


def main() -> None:
    setup_logging()
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")


if __name__ == "__main__":
    main()
