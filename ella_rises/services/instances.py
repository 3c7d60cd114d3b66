import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from ella_rises.caller import Caller, require_manager
from ella_rises.db import store_transaction
from ella_rises.errors import InvalidSchedule, NotFound
from ella_rises.models import EventDefinition, EventInstance, InstanceCreate, InstanceUpdate
from ella_rises.services.catalog import get_event

logger = logging.getLogger(__name__)


def _check_schedule(start_time: Optional[datetime], end_time: Optional[datetime]) -> None:
    if start_time is None:
        raise InvalidSchedule("An instance needs a start time.")
    if end_time is not None and start_time >= end_time:
        raise InvalidSchedule("The start time must be before the end time.")


def _instances_query(q: Optional[str]):
    query = select(EventInstance).join(
        EventDefinition, col(EventDefinition.name) == col(EventInstance.event_name)
    )
    if q:
        query = query.where(
            or_(
                col(EventDefinition.name).icontains(q, autoescape=True),
                col(EventDefinition.type).icontains(q, autoescape=True),
                col(EventDefinition.description).icontains(q, autoescape=True),
                col(EventInstance.location).icontains(q, autoescape=True),
            )
        )
    return query.order_by(col(EventInstance.start_time), col(EventInstance.id))


async def get_instance(session: AsyncSession, instance_id: int) -> EventInstance:
    instance = await session.get(EventInstance, instance_id)
    if instance is None:
        raise NotFound(f"Event instance {instance_id} not found.")
    return instance


async def list_upcoming_instances(
    session: AsyncSession, now: datetime, q: Optional[str] = None
) -> List[EventInstance]:
    """Instances starting at or after *now*, earliest first."""
    query = _instances_query(q).where(col(EventInstance.start_time) >= now)
    result = await session.execute(query)
    return list(result.scalars().all())


async def list_all_instances(
    session: AsyncSession, caller: Caller, q: Optional[str] = None
) -> List[EventInstance]:
    require_manager(caller, "list past and future instances")
    result = await session.execute(_instances_query(q))
    return list(result.scalars().all())


async def create_instance(
    session: AsyncSession, caller: Caller, event_name: str, schedule: InstanceCreate
) -> EventInstance:
    require_manager(caller, "schedule events")
    event_def = await get_event(session, event_name)
    _check_schedule(schedule.start_time, schedule.end_time)

    values = schedule.model_dump()
    if "capacity" not in schedule.model_fields_set:
        values["capacity"] = event_def.default_capacity

    instance = EventInstance(event_name=event_def.name, **values)
    async with store_transaction(session):
        session.add(instance)
        await session.commit()
    await session.refresh(instance)
    logger.info(
        "instance_created id=%s event=%r start=%s by=%s",
        instance.id, event_name, instance.start_time, caller.user_id,
    )
    return instance


async def update_instance(
    session: AsyncSession, caller: Caller, instance_id: int, schedule: InstanceUpdate
) -> EventInstance:
    """Apply only the fields present in *schedule*; explicit nulls clear a field."""
    require_manager(caller, "edit scheduled events")
    instance = await get_instance(session, instance_id)

    changes = schedule.model_dump(exclude_unset=True)
    _check_schedule(
        changes.get("start_time", instance.start_time),
        changes.get("end_time", instance.end_time),
    )
    for key, value in changes.items():
        setattr(instance, key, value)

    async with store_transaction(session):
        session.add(instance)
        await session.commit()
    logger.info("instance_updated id=%s fields=%s by=%s", instance_id, sorted(changes), caller.user_id)
    return instance


async def delete_instance(session: AsyncSession, caller: Caller, instance_id: int) -> None:
    """Delete an instance; its registrations keep their snapshot and lose the link."""
    require_manager(caller, "delete scheduled events")
    instance = await get_instance(session, instance_id)
    async with store_transaction(session):
        await session.delete(instance)
        await session.commit()
    logger.info("instance_deleted id=%s by=%s", instance_id, caller.user_id)
