import os
import tempfile

from aiohttp import web

from ella_rises.handlers.common import (
    dump,
    dump_all,
    get_caller,
    int_param,
    read_json,
    read_model,
    require_caller,
    search_term,
)
from ella_rises.middleware.db import session_key, session_pool_key
from ella_rises.models import InstanceCreate, InstanceUpdate
from ella_rises.services import instances, listings, registrations
from ella_rises.utils.time import utcnow

routes = web.RouteTableDef()

XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@routes.get("/instances")
async def list_upcoming(request: web.Request) -> web.Response:
    """Upcoming instances; logged-in callers also get their own registration per row."""
    q = search_term(request)
    caller = get_caller(request)
    now = utcnow()
    if caller is None:
        upcoming = await instances.list_upcoming_instances(request[session_key], now, q)
        items = [{"instance": dump(i), "registration": None} for i in upcoming]
    else:
        pairs = await listings.upcoming_for_participant(request.app[session_pool_key], caller, now, q)
        items = [{"instance": dump(i), "registration": dump(r)} for i, r in pairs]
    return web.json_response({"instances": items, "search": q or ""})


@routes.get("/instances/all")
async def list_all(request: web.Request) -> web.Response:
    caller = require_caller(request)
    q = search_term(request)
    found = await instances.list_all_instances(request[session_key], caller, q)
    return web.json_response({"instances": dump_all(found), "search": q or ""})


@routes.post("/instances")
async def add_instance(request: web.Request) -> web.Response:
    caller = require_caller(request)
    payload = await read_json(request)
    event_name = payload.pop("event_name", None)
    if not event_name:
        raise web.HTTPBadRequest(reason="event_name is required")
    schedule = InstanceCreate.model_validate(payload)
    instance = await instances.create_instance(request[session_key], caller, event_name, schedule)
    return web.json_response(dump(instance), status=201)


@routes.post(r"/instances/{instance_id:\d+}")
async def edit_instance(request: web.Request) -> web.Response:
    caller = require_caller(request)
    schedule = await read_model(request, InstanceUpdate)
    instance = await instances.update_instance(
        request[session_key], caller, int_param(request, "instance_id"), schedule
    )
    return web.json_response(dump(instance))


@routes.delete(r"/instances/{instance_id:\d+}")
async def delete_instance(request: web.Request) -> web.Response:
    caller = require_caller(request)
    instance_id = int_param(request, "instance_id")
    await instances.delete_instance(request[session_key], caller, instance_id)
    return web.json_response({"deleted": instance_id})


@routes.post(r"/instances/{instance_id:\d+}/signup")
async def sign_up(request: web.Request) -> web.Response:
    caller = require_caller(request)
    registration = await registrations.sign_up(request[session_key], caller, int_param(request, "instance_id"))
    return web.json_response(dump(registration))


@routes.get(r"/instances/{instance_id:\d+}/roster")
async def roster(request: web.Request) -> web.Response:
    caller = require_caller(request)
    instance_id = int_param(request, "instance_id")
    fd, path = tempfile.mkstemp(suffix=".xlsx")
    os.close(fd)
    try:
        await listings.export_instance_roster(request[session_key], caller, instance_id, path)
        with open(path, "rb") as fh:
            body = fh.read()
    finally:
        os.unlink(path)
    return web.Response(
        body=body,
        content_type=XLSX_TYPE,
        headers={"Content-Disposition": f'attachment; filename="roster_{instance_id}.xlsx"'},
    )
