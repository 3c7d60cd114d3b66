from aiohttp import web

from ella_rises.handlers.common import dump, dump_all, int_param, read_model, require_caller, search_term
from ella_rises.middleware.db import session_key
from ella_rises.models import SurveyResponse
from ella_rises.services import listings, registrations
from ella_rises.utils.time import utcnow

routes = web.RouteTableDef()


@routes.get("/registrations/mine")
async def my_registrations(request: web.Request) -> web.Response:
    caller = require_caller(request)
    scope = request.query.get("scope", "all")
    if scope not in ("all", "upcoming", "past"):
        raise web.HTTPBadRequest(reason="scope must be all, upcoming or past")
    now = None if scope == "all" else utcnow()
    found = await registrations.my_registrations(
        request[session_key], caller, now=now, upcoming=scope == "upcoming"
    )
    return web.json_response({"registrations": dump_all(found), "scope": scope})


@routes.post(r"/registrations/{registration_id:\d+}/cancel")
async def cancel(request: web.Request) -> web.Response:
    caller = require_caller(request)
    registration = await registrations.cancel_registration(
        request[session_key], caller, int_param(request, "registration_id")
    )
    return web.json_response(dump(registration))


@routes.post(r"/registrations/{registration_id:\d+}/check-in")
async def check_in(request: web.Request) -> web.Response:
    caller = require_caller(request)
    registration = await registrations.check_in(request[session_key], caller, int_param(request, "registration_id"))
    return web.json_response(dump(registration))


@routes.post(r"/registrations/{registration_id:\d+}/survey")
async def survey(request: web.Request) -> web.Response:
    caller = require_caller(request)
    response = await read_model(request, SurveyResponse)
    registration = await registrations.record_survey(
        request[session_key], caller, int_param(request, "registration_id"), response
    )
    return web.json_response(dump(registration))


@routes.get("/surveys")
async def surveys(request: web.Request) -> web.Response:
    q = search_term(request)
    found = await listings.list_surveys(request[session_key], q)
    return web.json_response({"surveys": dump_all(found), "search": q or ""})
