"""
Tests for the participant directory
"""
import pytest

from ella_rises.errors import Conflict, Forbidden, NotFound
from ella_rises.models import ParticipantCreate, ParticipantUpdate
from ella_rises.services import participants
from ella_rises.services.registrations import sign_up


class TestParticipants:
    """Tests for participant CRUD and search"""

    async def test_create_and_search(self, db_session, manager):
        await participants.create_participant(
            db_session, manager, ParticipantCreate(email='maria@example.org', first_name='Maria', last_name='Lopez')
        )
        await participants.create_participant(
            db_session, manager, ParticipantCreate(email='ana@example.org', first_name='Ana', last_name='Garcia')
        )

        everyone = await participants.list_participants(db_session)
        assert [p.email for p in everyone] == ['ana@example.org', 'maria@example.org']
        assert [p.email for p in await participants.list_participants(db_session, 'LOPEZ')] == ['maria@example.org']
        assert [p.email for p in await participants.list_participants(db_session, 'ana@')] == ['ana@example.org']

    async def test_duplicate_email(self, session_pool, manager):
        async with session_pool() as session:
            await participants.create_participant(session, manager, ParticipantCreate(email='maria@example.org'))
        async with session_pool() as session:
            with pytest.raises(Conflict):
                await participants.create_participant(session, manager, ParticipantCreate(email='maria@example.org'))

    async def test_participant_cannot_create(self, db_session, make_participant):
        kid = await make_participant()
        with pytest.raises(Forbidden):
            await participants.create_participant(db_session, kid, ParticipantCreate(email='x@example.org'))

    async def test_update(self, db_session, manager, make_participant):
        kid = await make_participant('kid@example.org')
        updated = await participants.update_participant(
            db_session, manager, kid.user_id, ParticipantUpdate(school='Lincoln High')
        )
        assert updated.school == 'Lincoln High'
        assert updated.first_name is not None

    async def test_get_missing(self, db_session):
        with pytest.raises(NotFound):
            await participants.get_participant(db_session, 'nobody@example.org')

    async def test_delete_refused_with_registrations(self, session_pool, manager, make_participant, make_instance, now):
        kid = await make_participant()
        instance_id = await make_instance()
        async with session_pool() as session:
            await sign_up(session, kid, instance_id, now=now)

        async with session_pool() as session:
            with pytest.raises(Conflict):
                await participants.delete_participant(session, manager, kid.user_id)

    async def test_delete(self, session_pool, manager, make_participant):
        kid = await make_participant()
        async with session_pool() as session:
            await participants.delete_participant(session, manager, kid.user_id)
        async with session_pool() as session:
            with pytest.raises(NotFound):
                await participants.get_participant(session, kid.user_id)
