import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from ella_rises.caller import Caller, require_manager
from ella_rises.db import store_transaction
from ella_rises.errors import Conflict, NotFound
from ella_rises.models import Participant, ParticipantCreate, ParticipantUpdate

logger = logging.getLogger(__name__)


async def get_participant(session: AsyncSession, email: str) -> Participant:
    participant = await session.get(Participant, email)
    if participant is None:
        raise NotFound(f"Participant {email} not found.")
    return participant


async def list_participants(session: AsyncSession, q: Optional[str] = None) -> List[Participant]:
    query = select(Participant)
    if q:
        query = query.where(
            or_(
                col(Participant.first_name).icontains(q, autoescape=True),
                col(Participant.last_name).icontains(q, autoescape=True),
                col(Participant.email).icontains(q, autoescape=True),
            )
        )
    query = query.order_by(col(Participant.last_name), col(Participant.first_name))
    return list((await session.execute(query)).scalars().all())


async def create_participant(
    session: AsyncSession, caller: Caller, data: ParticipantCreate
) -> Participant:
    require_manager(caller, "add participants")
    participant = Participant(**data.model_dump())
    async with store_transaction(session):
        session.add(participant)
        await session.commit()
    logger.info("participant_created email=%s by=%s", participant.email, caller.user_id)
    return participant


async def update_participant(
    session: AsyncSession, caller: Caller, email: str, data: ParticipantUpdate
) -> Participant:
    # The email is the key and is never edited
    require_manager(caller, "edit participants")
    participant = await get_participant(session, email)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(participant, key, value)
    async with store_transaction(session):
        session.add(participant)
        await session.commit()
    return participant


async def delete_participant(session: AsyncSession, caller: Caller, email: str) -> None:
    require_manager(caller, "delete participants")
    participant = await get_participant(session, email)
    try:
        async with store_transaction(session):
            await session.delete(participant)
            await session.commit()
    except Conflict as e:
        raise Conflict(f"Participant {email} still has registrations.") from e
    logger.info("participant_deleted email=%s by=%s", email, caller.user_id)
