from typing import Any, Iterable, Optional, Type, TypeVar

from aiohttp import web
from sqlmodel import SQLModel

from ella_rises.caller import Caller

ModelT = TypeVar("ModelT", bound=SQLModel)


def get_caller(request: web.Request) -> Optional[Caller]:
    # Login info travels in the query string: ?userId=<email>&level=<M|U>
    user_id = request.query.get("userId")
    level = request.query.get("level")
    if not user_id or not level:
        return None
    return Caller(user_id=user_id, level=level)


def require_caller(request: web.Request) -> Caller:
    caller = get_caller(request)
    if caller is None:
        raise web.HTTPUnauthorized(reason="Login required")
    return caller


def search_term(request: web.Request) -> Optional[str]:
    q = request.query.get("q", "").strip()
    return q or None


def int_param(request: web.Request, name: str) -> int:
    return int(request.match_info[name])


async def read_json(request: web.Request) -> dict:
    try:
        payload = await request.json()
    except ValueError:
        raise web.HTTPBadRequest(reason="Request body must be JSON")
    if not isinstance(payload, dict):
        raise web.HTTPBadRequest(reason="Request body must be a JSON object")
    return payload


async def read_model(request: web.Request, model: Type[ModelT]) -> ModelT:
    return model.model_validate(await read_json(request))


def dump(obj: Optional[SQLModel]) -> Optional[dict[str, Any]]:
    if obj is None:
        return None
    return obj.model_dump(mode="json")


def dump_all(objs: Iterable[SQLModel]) -> list[dict[str, Any]]:
    return [obj.model_dump(mode="json") for obj in objs]
