import asyncio
import logging
import sys
from typing import Optional

from aiohttp import web
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ella_rises.config import settings
from ella_rises.db import SessionLocal, init_db
from ella_rises.handlers import (
    events_routes,
    instances_routes,
    participants_routes,
    registrations_routes,
)
from ella_rises.handlers.errors import error_middleware
from ella_rises.middleware.db import db_session_middleware, session_pool_key

logger = logging.getLogger(__name__)


async def _root(request: web.Request) -> web.Response:
    raise web.HTTPFound("/instances")


def create_app(session_pool: Optional[async_sessionmaker[AsyncSession]] = None) -> web.Application:
    app = web.Application(middlewares=[error_middleware, db_session_middleware])
    app[session_pool_key] = session_pool or SessionLocal

    # Routes
    app.router.add_get("/", _root)
    app.add_routes(events_routes)
    app.add_routes(instances_routes)
    app.add_routes(registrations_routes)
    app.add_routes(participants_routes)
    return app


def configure_logging() -> None:
    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = settings.LOG_DIR / "ella_rises.log"

    # Console *and* file
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
        force=True,
    )
    logging.getLogger("aiohttp.access").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


async def main() -> None:
    configure_logging()
    logger.info("Ella Rises starting…")

    # Tables and migrations
    await init_db()

    app = create_app()
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host=settings.WEB_HOST, port=settings.WEB_PORT)
    await site.start()
    logger.info("Ella Rises running at http://%s:%d/", settings.WEB_HOST, settings.WEB_PORT)

    # Keep serving until the loop is cancelled
    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await runner.cleanup()


def run() -> None:
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass


if __name__ == "__main__":
    run()
