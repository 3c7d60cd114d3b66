from .events import routes as events_routes
from .instances import routes as instances_routes
from .participants import routes as participants_routes
from .registrations import routes as registrations_routes

__all__ = [
    "events_routes",
    "instances_routes",
    "participants_routes",
    "registrations_routes",
]
