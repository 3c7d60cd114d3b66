from aiohttp import web

from ella_rises.handlers.common import dump, dump_all, read_model, require_caller, search_term
from ella_rises.middleware.db import session_key
from ella_rises.models import EventDefinitionCreate, EventDefinitionUpdate
from ella_rises.services import catalog

routes = web.RouteTableDef()


@routes.get("/events")
async def list_events(request: web.Request) -> web.Response:
    q = search_term(request)
    events = await catalog.list_events(request[session_key], q)
    return web.json_response({"events": dump_all(events), "search": q or ""})


@routes.post("/events")
async def add_event(request: web.Request) -> web.Response:
    caller = require_caller(request)
    definition = await read_model(request, EventDefinitionCreate)
    event_def = await catalog.create_event(request[session_key], caller, definition)
    return web.json_response(dump(event_def), status=201)


@routes.post("/events/{name}")
async def edit_event(request: web.Request) -> web.Response:
    caller = require_caller(request)
    fields = await read_model(request, EventDefinitionUpdate)
    event_def = await catalog.update_event(request[session_key], caller, request.match_info["name"], fields)
    return web.json_response(dump(event_def))


@routes.delete("/events/{name}")
async def delete_event(request: web.Request) -> web.Response:
    caller = require_caller(request)
    await catalog.delete_event(request[session_key], caller, request.match_info["name"])
    return web.json_response({"deleted": request.match_info["name"]})
