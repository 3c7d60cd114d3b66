from aiohttp import web

from ella_rises.handlers.common import dump, dump_all, read_model, require_caller, search_term
from ella_rises.middleware.db import session_key
from ella_rises.models import ParticipantCreate, ParticipantUpdate
from ella_rises.services import participants

routes = web.RouteTableDef()


@routes.get("/participants")
async def list_participants(request: web.Request) -> web.Response:
    q = search_term(request)
    found = await participants.list_participants(request[session_key], q)
    return web.json_response({"participants": dump_all(found), "search": q or ""})


@routes.get("/participants/{email}")
async def get_participant(request: web.Request) -> web.Response:
    participant = await participants.get_participant(request[session_key], request.match_info["email"])
    return web.json_response(dump(participant))


@routes.post("/participants")
async def add_participant(request: web.Request) -> web.Response:
    caller = require_caller(request)
    data = await read_model(request, ParticipantCreate)
    participant = await participants.create_participant(request[session_key], caller, data)
    return web.json_response(dump(participant), status=201)


@routes.post("/participants/{email}")
async def edit_participant(request: web.Request) -> web.Response:
    caller = require_caller(request)
    data = await read_model(request, ParticipantUpdate)
    participant = await participants.update_participant(
        request[session_key], caller, request.match_info["email"], data
    )
    return web.json_response(dump(participant))


@routes.delete("/participants/{email}")
async def delete_participant(request: web.Request) -> web.Response:
    caller = require_caller(request)
    await participants.delete_participant(request[session_key], caller, request.match_info["email"])
    return web.json_response({"deleted": request.match_info["email"]})
