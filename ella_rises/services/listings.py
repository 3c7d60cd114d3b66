import asyncio
from datetime import datetime
from functools import partial
from typing import List, Optional, Tuple

import pandas as pd
from sqlalchemy import String, cast, or_
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import col, select

from ella_rises.caller import Caller, require_manager
from ella_rises.models import EventInstance, Participant, Registration
from ella_rises.services.instances import get_instance, list_upcoming_instances
from ella_rises.services.registrations import my_registrations

ROSTER_COLUMNS = ["Registration", "Email", "First name", "Last name", "Status", "Attended", "Check-in", "Registered at"]


async def upcoming_for_participant(
    session_pool: async_sessionmaker[AsyncSession],
    caller: Caller,
    now: datetime,
    q: Optional[str] = None,
) -> List[Tuple[EventInstance, Optional[Registration]]]:
    """Upcoming instances paired with the caller's registration for each one.

    Both queries run at the same time on separate sessions and are joined
    by instance id afterwards, keeping the instance ordering.
    """

    async def _instances() -> List[EventInstance]:
        async with session_pool() as session:
            return await list_upcoming_instances(session, now, q)

    async def _mine() -> List[Registration]:
        async with session_pool() as session:
            return await my_registrations(session, caller)

    instances, registrations = await asyncio.gather(_instances(), _mine())
    by_instance = {r.instance_id: r for r in registrations if r.instance_id is not None}
    return [(instance, by_instance.get(instance.id)) for instance in instances]


async def list_surveys(session: AsyncSession, q: Optional[str] = None) -> List[Registration]:
    """Registrations with a submitted survey, newest registration first."""
    query = select(Registration).where(col(Registration.survey_submitted_at).is_not(None))
    if q:
        query = query.where(
            or_(
                cast(col(Registration.id), String).icontains(q, autoescape=True),
                col(Registration.participant_email).icontains(q, autoescape=True),
                col(Registration.event_name).icontains(q, autoescape=True),
                col(Registration.survey_comments).icontains(q, autoescape=True),
            )
        )
    query = query.order_by(col(Registration.id).desc())
    return list((await session.execute(query)).scalars().all())


async def export_instance_roster(
    session: AsyncSession, caller: Caller, instance_id: int, file_path: str
) -> str:
    """Write the attendee list of one instance to an Excel file."""
    require_manager(caller, "export rosters")
    await get_instance(session, instance_id)

    rows = (
        await session.execute(
            select(Registration, Participant)
            .join(Participant, col(Participant.email) == col(Registration.participant_email), isouter=True)
            .where(Registration.instance_id == instance_id)
            .order_by(col(Registration.id))
        )
    ).all()

    records = [
        {
            "Registration": reg.id,
            "Email": reg.participant_email,
            "First name": getattr(person, "first_name", None),
            "Last name": getattr(person, "last_name", None),
            "Status": reg.status,
            "Attended": reg.attended,
            "Check-in": reg.check_in_time,
            "Registered at": reg.created_at,
        }
        for reg, person in rows
    ]
    frame = pd.DataFrame(records, columns=ROSTER_COLUMNS)
    # openpyxl writes synchronously
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, partial(frame.to_excel, file_path, index=False))
    return file_path
