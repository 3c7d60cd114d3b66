"""Participant sign-up and the registration state machine.

A registration moves ``Registered`` -> ``Attended`` or ``Registered`` ->
``Cancelled``; both targets are terminal. There is at most one row per
(participant, instance) pair, guaranteed by the ``unique_participant_instance``
constraint rather than by the look-up done before inserting.

Capacity is tracked in ``EventInstance.registered_count`` and only ever
changed through conditional UPDATE statements, so two sign-ups racing for
the last seat cannot both get it.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from ella_rises.caller import Caller, require_manager
from ella_rises.db import store_transaction
from ella_rises.errors import CapacityExceeded, Conflict, DeadlinePassed, Forbidden, InvalidTransition, NotFound
from ella_rises.models import EventInstance, Registration, SurveyResponse
from ella_rises.models.registration import STATUS_ATTENDED, STATUS_CANCELLED, STATUS_REGISTERED
from ella_rises.services.instances import get_instance
from ella_rises.services.participants import get_participant
from ella_rises.utils.time import utcnow

logger = logging.getLogger(__name__)


async def find_registration(
    session: AsyncSession, participant_email: str, instance_id: int
) -> Optional[Registration]:
    result = await session.execute(
        select(Registration).where(
            Registration.participant_email == participant_email,
            Registration.instance_id == instance_id,
        )
    )
    return result.scalars().first()


async def _reserve_seat(session: AsyncSession, instance_id: int) -> bool:
    """Take one seat on the instance; False when it is already full."""
    result = await session.execute(
        update(EventInstance)
        .where(col(EventInstance.id) == instance_id)
        .where(
            or_(
                col(EventInstance.capacity).is_(None),
                col(EventInstance.registered_count) < col(EventInstance.capacity),
            )
        )
        .values(registered_count=col(EventInstance.registered_count) + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def _release_seat(session: AsyncSession, instance_id: int) -> None:
    await session.execute(
        update(EventInstance)
        .where(col(EventInstance.id) == instance_id)
        .where(col(EventInstance.registered_count) > 0)
        .values(registered_count=col(EventInstance.registered_count) - 1)
        .execution_options(synchronize_session=False)
    )


async def sign_up(
    session: AsyncSession, caller: Caller, instance_id: int, now: Optional[datetime] = None
) -> Registration:
    """Register the calling participant for an instance.

    Signing up again for the same instance returns the registration that
    already exists instead of failing, whatever its status.

    Raises:
        Forbidden: the caller is a manager.
        NotFound: the instance or the participant does not exist.
        DeadlinePassed: *now* is after the registration deadline.
        CapacityExceeded: every seat is taken.
        StoreUnavailable: the database failed; nothing was written.
    """
    if caller.is_manager:
        raise Forbidden("Sign-up is for participants; managers cannot register.")
    now = now or utcnow()
    email = caller.user_id

    instance = await get_instance(session, instance_id)
    await get_participant(session, email)

    existing = await find_registration(session, email, instance_id)
    if existing is not None:
        logger.debug("signup_repeat instance=%s email=%s reg=%s", instance_id, email, existing.id)
        return existing

    if instance.registration_deadline is not None and now > instance.registration_deadline:
        logger.info("signup_rejected reason=deadline instance=%s email=%s", instance_id, email)
        raise DeadlinePassed(
            f"Registration closed on {instance.registration_deadline:%Y-%m-%d %H:%M}."
        )

    # Copied now; a rollback below expires the loaded instance
    event_name, event_start = instance.event_name, instance.start_time

    try:
        async with store_transaction(session):
            if not await _reserve_seat(session, instance_id):
                await session.rollback()
                registration = None
            else:
                registration = Registration(
                    participant_email=email,
                    instance_id=instance_id,
                    event_name=event_name,
                    event_start=event_start,
                    status=STATUS_REGISTERED,
                    attended=False,
                    check_in_time=None,
                    created_at=now,
                )
                session.add(registration)
                await session.commit()
    except Conflict:
        # A concurrent sign-up for the same pair committed first
        winner = await find_registration(session, email, instance_id)
        if winner is None:
            raise
        logger.debug("signup_race_lost instance=%s email=%s reg=%s", instance_id, email, winner.id)
        return winner

    if registration is None:
        winner = await find_registration(session, email, instance_id)
        if winner is not None:
            return winner
        logger.info("signup_rejected reason=capacity instance=%s email=%s", instance_id, email)
        raise CapacityExceeded(f"'{event_name}' is full.")

    logger.info("signup instance=%s email=%s reg=%s", instance_id, email, registration.id)
    return registration


async def my_registrations(
    session: AsyncSession,
    caller: Caller,
    now: Optional[datetime] = None,
    upcoming: bool = True,
) -> List[Registration]:
    """The caller's registrations by event start.

    With *now* given, only upcoming ones (or only past ones when
    ``upcoming=False``) are returned.
    """
    query = select(Registration).where(Registration.participant_email == caller.user_id)
    if now is not None:
        if upcoming:
            query = query.where(col(Registration.event_start) >= now)
        else:
            query = query.where(col(Registration.event_start) < now)
    query = query.order_by(col(Registration.event_start), col(Registration.id))
    return list((await session.execute(query)).scalars().all())


async def get_registration(session: AsyncSession, caller: Caller, registration_id: int) -> Registration:
    registration = await session.get(Registration, registration_id)
    if registration is None:
        raise NotFound(f"Registration {registration_id} not found.")
    if not caller.is_manager and registration.participant_email != caller.user_id:
        raise Forbidden("You can only access your own registrations.")
    return registration


async def _move(session: AsyncSession, registration: Registration, to_status: str, **values) -> bool:
    """Move a ``Registered`` row to *to_status*; False if it already left that state."""
    result = await session.execute(
        update(Registration)
        .where(col(Registration.id) == registration.id)
        .where(col(Registration.status) == STATUS_REGISTERED)
        .values(status=to_status, **values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def check_in(
    session: AsyncSession, caller: Caller, registration_id: int, now: Optional[datetime] = None
) -> Registration:
    require_manager(caller, "check participants in")
    registration = await get_registration(session, caller, registration_id)
    now = now or utcnow()

    async with store_transaction(session):
        if not await _move(session, registration, STATUS_ATTENDED, attended=True, check_in_time=now):
            await session.rollback()
            raise InvalidTransition(f"Registration {registration_id} is not open for check-in.")
        await session.commit()
    await session.refresh(registration)
    logger.info("check_in reg=%s by=%s", registration_id, caller.user_id)
    return registration


async def cancel_registration(session: AsyncSession, caller: Caller, registration_id: int) -> Registration:
    """Cancel a registration and give its seat back to the instance."""
    registration = await get_registration(session, caller, registration_id)
    instance_id = registration.instance_id

    async with store_transaction(session):
        if not await _move(session, registration, STATUS_CANCELLED):
            await session.rollback()
            raise InvalidTransition(f"Registration {registration_id} cannot be cancelled.")
        if instance_id is not None:
            await _release_seat(session, instance_id)
        await session.commit()
    await session.refresh(registration)
    logger.info("cancelled reg=%s instance=%s by=%s", registration_id, instance_id, caller.user_id)
    return registration


async def record_survey(
    session: AsyncSession,
    caller: Caller,
    registration_id: int,
    survey: SurveyResponse,
    now: Optional[datetime] = None,
) -> Registration:
    registration = await get_registration(session, caller, registration_id)
    if registration.participant_email != caller.user_id:
        raise Forbidden("Only the participant can submit this survey.")
    if registration.status == STATUS_CANCELLED:
        raise InvalidTransition("Cancelled registrations do not take surveys.")

    for key, value in survey.model_dump(exclude_unset=True).items():
        setattr(registration, f"survey_{key}", value)
    registration.survey_submitted_at = now or utcnow()

    async with store_transaction(session):
        session.add(registration)
        await session.commit()
    logger.info("survey_recorded reg=%s", registration_id)
    return registration
