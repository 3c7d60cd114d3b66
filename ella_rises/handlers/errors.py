import logging

from aiohttp import web
from pydantic import ValidationError

from ella_rises.errors import (
    CapacityExceeded,
    Conflict,
    DeadlinePassed,
    EllaRisesError,
    Forbidden,
    InvalidSchedule,
    NotFound,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[EllaRisesError], int] = {
    Forbidden: 403,
    NotFound: 404,
    Conflict: 409,
    DeadlinePassed: 409,
    CapacityExceeded: 409,
    InvalidSchedule: 400,
    StoreUnavailable: 503,
}


def error_response(status: int, code: str, message: str) -> web.Response:
    return web.json_response({"error": code, "message": message}, status=status)


def status_for(exc: EllaRisesError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 500


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Turn service errors into JSON responses the pages can show."""
    try:
        return await handler(request)
    except EllaRisesError as e:
        status = status_for(e)
        logger.warning("%s %s -> %s %s: %s", request.method, request.path, status, e.code, e.message)
        return error_response(status, e.code, e.message)
    except ValidationError as e:
        return error_response(400, "invalid_input", str(e))
    except web.HTTPException as e:
        if e.status < 400:
            raise
        return error_response(e.status, "http_error", e.reason)
    except Exception:
        logging.exception("Unhandled error on %s %s", request.method, request.path)
        return error_response(500, "internal_error", "Server error")
