import logging
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from ella_rises.caller import Caller, require_manager
from ella_rises.db import store_transaction
from ella_rises.errors import Conflict, NotFound
from ella_rises.models import EventDefinition, EventDefinitionCreate, EventDefinitionUpdate, EventInstance

logger = logging.getLogger(__name__)


async def get_event(session: AsyncSession, name: str) -> EventDefinition:
    event_def = await session.get(EventDefinition, name)
    if event_def is None:
        raise NotFound(f"Event '{name}' not found.")
    return event_def


async def list_events(session: AsyncSession, q: Optional[str] = None) -> List[EventDefinition]:
    query = select(EventDefinition)
    if q:
        query = query.where(
            or_(
                col(EventDefinition.name).icontains(q, autoescape=True),
                col(EventDefinition.description).icontains(q, autoescape=True),
            )
        )
    result = await session.execute(query.order_by(col(EventDefinition.name)))
    return list(result.scalars().all())


async def create_event(
    session: AsyncSession, caller: Caller, definition: EventDefinitionCreate
) -> EventDefinition:
    require_manager(caller, "add events")

    # Duplicate names are left to the primary key
    event_def = EventDefinition(**definition.model_dump())
    async with store_transaction(session):
        session.add(event_def)
        await session.commit()
    logger.info("event_created name=%r by=%s", event_def.name, caller.user_id)
    return event_def


async def update_event(
    session: AsyncSession, caller: Caller, name: str, fields: EventDefinitionUpdate
) -> EventDefinition:
    require_manager(caller, "edit events")
    event_def = await get_event(session, name)

    for key, value in fields.model_dump(exclude_unset=True).items():
        setattr(event_def, key, value)
    async with store_transaction(session):
        session.add(event_def)
        await session.commit()
    logger.info("event_updated name=%r by=%s", name, caller.user_id)
    return event_def


async def delete_event(session: AsyncSession, caller: Caller, name: str) -> None:
    """Delete a definition. Refused while any instance still points at it."""
    require_manager(caller, "delete events")
    event_def = await get_event(session, name)

    instances = await session.scalar(
        select(func.count()).select_from(EventInstance).where(EventInstance.event_name == name)
    )
    if instances:
        raise Conflict(f"Event '{name}' still has {instances} scheduled instance(s); delete them first.")

    async with store_transaction(session):
        await session.delete(event_def)
        await session.commit()
    logger.info("event_deleted name=%r by=%s", name, caller.user_id)
