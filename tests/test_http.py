"""
Tests for the JSON HTTP surface
"""
from datetime import timedelta

import pytest
from aiohttp import test_utils

from ella_rises.app import create_app
from ella_rises.utils.time import utcnow

MANAGER = {'userId': 'director@ellarises.org', 'level': 'M'}
ALICE = {'userId': 'alice@example.org', 'level': 'U'}


@pytest.fixture
async def client(session_pool):
    async with test_utils.TestClient(test_utils.TestServer(create_app(session_pool))) as test_client:
        yield test_client


@pytest.fixture
async def scheduled(client, make_participant):
    """A definition, one upcoming instance and a participant, created over HTTP"""
    await make_participant(ALICE['userId'])
    resp = await client.post('/events', params=MANAGER, json={
        'name': 'Mentor Night', 'type': 'Mentoring', 'default_capacity': 2,
    })
    assert resp.status == 201
    start = utcnow() + timedelta(days=2)
    resp = await client.post('/instances', params=MANAGER, json={
        'event_name': 'Mentor Night',
        'start_time': start.isoformat(),
        'end_time': (start + timedelta(hours=2)).isoformat(),
        'location': 'Library',
    })
    assert resp.status == 201
    return (await resp.json())['id']


class TestEventsApi:
    """Tests for /events"""

    async def test_requires_login(self, client):
        resp = await client.post('/events', json={'name': 'Gala'})
        assert resp.status == 401

    async def test_participant_forbidden(self, client):
        resp = await client.post('/events', params=ALICE, json={'name': 'Gala'})
        assert resp.status == 403
        assert (await resp.json())['error'] == 'forbidden'

    async def test_create_list_and_duplicate(self, client):
        resp = await client.post('/events', params=MANAGER, json={'name': 'Gala', 'description': 'Annual'})
        assert resp.status == 201

        resp = await client.post('/events', params=MANAGER, json={'name': 'Gala'})
        assert resp.status == 409

        resp = await client.get('/events', params={'q': 'annual'})
        body = await resp.json()
        assert [e['name'] for e in body['events']] == ['Gala']
        assert body['search'] == 'annual'

    async def test_invalid_body(self, client):
        resp = await client.post('/events', params=MANAGER, data='not json')
        assert resp.status == 400

        resp = await client.post('/events', params=MANAGER, json={'name': 'Gala', 'default_capacity': -1})
        assert resp.status == 400
        assert (await resp.json())['error'] == 'invalid_input'


class TestSignUpApi:
    """Tests for sign-up and registration routes"""

    async def test_sign_up_is_idempotent(self, client, scheduled):
        resp = await client.post(f'/instances/{scheduled}/signup', params=ALICE)
        assert resp.status == 200
        first = await resp.json()
        assert first['status'] == 'Registered'
        assert first['event_name'] == 'Mentor Night'

        resp = await client.post(f'/instances/{scheduled}/signup', params=ALICE)
        assert (await resp.json())['id'] == first['id']

    async def test_manager_sign_up_forbidden(self, client, scheduled):
        resp = await client.post(f'/instances/{scheduled}/signup', params=MANAGER)
        assert resp.status == 403

    async def test_unknown_instance(self, client, scheduled):
        resp = await client.post('/instances/9999/signup', params=ALICE)
        assert resp.status == 404
        assert (await resp.json())['error'] == 'not_found'

    async def test_capacity_error_code(self, client, scheduled):
        resp = await client.post(f'/instances/{scheduled}', params=MANAGER, json={'capacity': 0})
        assert resp.status == 200
        assert (await resp.json())['location'] == 'Library'

        resp = await client.post(f'/instances/{scheduled}/signup', params=ALICE)
        assert resp.status == 409
        assert (await resp.json())['error'] == 'capacity_exceeded'

    async def test_upcoming_listing_shows_own_registration(self, client, scheduled):
        await client.post(f'/instances/{scheduled}/signup', params=ALICE)

        resp = await client.get('/instances', params=ALICE)
        items = (await resp.json())['instances']
        assert [item['instance']['id'] for item in items] == [scheduled]
        assert items[0]['registration']['participant_email'] == ALICE['userId']

        resp = await client.get('/instances')
        assert (await resp.json())['instances'][0]['registration'] is None

    async def test_all_instances_manager_only(self, client, scheduled):
        resp = await client.get('/instances/all', params=ALICE)
        assert resp.status == 403
        resp = await client.get('/instances/all', params=MANAGER)
        assert [i['id'] for i in (await resp.json())['instances']] == [scheduled]

    async def test_mine_cancel_and_survey(self, client, scheduled):
        registration = await (await client.post(f'/instances/{scheduled}/signup', params=ALICE)).json()

        resp = await client.get('/registrations/mine', params={**ALICE, 'scope': 'upcoming'})
        assert [r['id'] for r in (await resp.json())['registrations']] == [registration['id']]

        resp = await client.post(f"/registrations/{registration['id']}/survey", params=ALICE,
                                 json={'overall_score': 4, 'comments': 'Fun'})
        assert (await resp.json())['survey_overall_score'] == 4

        resp = await client.get('/surveys', params={'q': 'fun'})
        assert [s['id'] for s in (await resp.json())['surveys']] == [registration['id']]

        resp = await client.post(f"/registrations/{registration['id']}/cancel", params=ALICE)
        assert (await resp.json())['status'] == 'Cancelled'

        resp = await client.post(f"/registrations/{registration['id']}/check-in", params=MANAGER)
        assert resp.status == 409

    async def test_bad_scope(self, client):
        resp = await client.get('/registrations/mine', params={**ALICE, 'scope': 'someday'})
        assert resp.status == 400

    async def test_roster_download(self, client, scheduled):
        await client.post(f'/instances/{scheduled}/signup', params=ALICE)
        resp = await client.get(f'/instances/{scheduled}/roster', params=MANAGER)
        assert resp.status == 200
        assert resp.headers['Content-Type'].startswith('application/vnd.openxmlformats')
        assert len(await resp.read()) > 0
