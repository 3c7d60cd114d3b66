from aiohttp import web
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

session_pool_key = web.AppKey("session_pool", async_sessionmaker)
session_key = web.RequestKey("session", AsyncSession)


@web.middleware
async def db_session_middleware(request: web.Request, handler):
    """Open one session per request and expose it as ``request[session_key]``."""
    async with request.app[session_pool_key]() as session:
        request[session_key] = session
        return await handler(request)
