"""
Message Thread Flow Integration Tests

Runs the wired MessageCacheService from the app's service registry
against the SQLite test database and fakeredis:

1. Outbound save then read back through the cache
2. Inbound replies: status transitions and idempotent redelivery
3. Orphan inbound messages leave no trace
4. Disabled cache behaves exactly like reading the database
5. Bulk campaign reads seed per-contact cache entries
"""

from unittest.mock import patch

import pytest

from crm_database import CampaignContact, Message
from extensions import db
from services.enums import SaveOutcome
from services.message_models import ContactSnapshot, ThreadMessage, ThreadRef
from tests.fixtures.factories import CampaignContactFactory, MessageFactory
from utils.datetime_utils import ensure_utc, utc_now


def snapshot(row):
    return ContactSnapshot(
        id=row.id,
        campaign_id=row.campaign_id,
        assignment_id=row.assignment_id,
        message_status=row.message_status,
        timezone_offset=row.timezone_offset,
        cell=row.cell,
        messageservice_sid=row.messageservice_sid,
    )


def outbound(row, service_id='SMout1', text='Hi! Can we count on your vote?'):
    return ThreadMessage(
        contact_number=row.cell,
        text=text,
        is_from_contact=False,
        campaign_contact_id=row.id,
        assignment_id=row.assignment_id,
        user_id=row.assignment.user_id,
        service='twilio',
        messageservice_sid=row.messageservice_sid,
        service_id=service_id,
        service_response='{"status": "queued"}',
    )


def inbound(cell='+15551234567', service_id='SMreply1', text='Yes, absolutely'):
    return ThreadMessage(
        contact_number=cell,
        text=text,
        is_from_contact=True,
        service='twilio',
        messageservice_sid='MG123',
        service_id=service_id,
        service_response='{"Body": "Yes"}',
    )


def stored_status(campaign_contact_id):
    db.session.expire_all()
    return db.session.get(CampaignContact, campaign_contact_id).message_status


class TestOutboundFlow:
    """Texter sends the first message"""

    def test_save_then_query_reads_cached_thread(self, message_cache, active_contact_row):
        start = utc_now()

        result = message_cache.save(outbound(active_contact_row), snapshot(active_contact_row))

        assert result
        with patch.object(message_cache.message_repository, 'find_thread') as find_thread:
            thread = message_cache.query(ThreadRef(campaign_contact_id=active_contact_row.id))
        find_thread.assert_not_called()

        assert len(thread) == 1
        assert thread[0].text == 'Hi! Can we count on your vote?'
        assert thread[0].created_at >= start
        assert thread[0].service_response is None

    def test_save_persists_and_updates_status(self, message_cache, active_contact_row):
        result = message_cache.save(outbound(active_contact_row), snapshot(active_contact_row))

        assert result.data.contact.message_status == 'messaged'
        assert stored_status(active_contact_row.id) == 'messaged'
        stored = db.session.get(Message, result.data.message.id)
        assert stored.service_response == '{"status": "queued"}'

    def test_cache_entry_expires_in_24_hours(self, message_cache, redis_client, active_contact_row):
        message_cache.save(outbound(active_contact_row), snapshot(active_contact_row))

        ttl = redis_client.ttl(f'test:messages-{active_contact_row.id}')

        assert 86400 - 5 <= ttl <= 86400

    def test_send_releases_in_flight_slot(self, app, message_cache, active_contact_row):
        in_flight = app.services.get('in_flight')
        in_flight.add_in_flight(active_contact_row.campaign_id, active_contact_row.id)

        message_cache.save(outbound(active_contact_row), snapshot(active_contact_row))

        assert in_flight.count_in_flight(active_contact_row.campaign_id) == 0

    def test_database_rejects_resent_provider_id(self, message_cache, redis_client, active_contact_row):
        message_cache.save(outbound(active_contact_row), snapshot(active_contact_row))

        result = message_cache.save(outbound(active_contact_row, text='resent'), snapshot(active_contact_row))

        assert result.code == SaveOutcome.DUPLICATE
        assert result.metadata['detected_by'] == 'database'
        assert Message.query.count() == 1
        assert redis_client.exists(f'test:messages-{active_contact_row.id}') == 0
        assert stored_status(active_contact_row.id) == 'messaged'

    def test_resent_provider_id_keeps_conversation_status(self, message_cache, redis_client, active_contact_row):
        message_cache.save(outbound(active_contact_row), snapshot(active_contact_row))
        message_cache.save(inbound())
        assert stored_status(active_contact_row.id) == 'needsResponse'

        result = message_cache.save(outbound(active_contact_row, text='resent'), snapshot(active_contact_row))

        assert result.code == SaveOutcome.DUPLICATE
        assert stored_status(active_contact_row.id) == 'needsResponse'
        assert redis_client.hget('test:cell-+15551234567-MG123', 'message_status') == 'needsResponse'


class TestInboundFlow:
    """Contact replies"""

    def test_reply_needs_response_then_texter_reply_is_convo(self, message_cache, active_contact_row):
        message_cache.save(outbound(active_contact_row), snapshot(active_contact_row))

        reply = message_cache.save(inbound())
        assert reply.data.contact.id == active_contact_row.id
        assert reply.data.contact.message_status == 'needsResponse'
        assert stored_status(active_contact_row.id) == 'needsResponse'

        answer = message_cache.save(outbound(active_contact_row, service_id='SMout2'),
                                    ContactSnapshot(id=active_contact_row.id, message_status='needsResponse'))
        assert answer.data.contact.message_status == 'convo'
        assert stored_status(active_contact_row.id) == 'convo'

        thread = message_cache.query(ThreadRef(campaign_contact_id=active_contact_row.id))
        assert [m.service_id for m in thread] == ['SMout1', 'SMreply1', 'SMout2']

    def test_redelivered_reply_is_saved_once(self, message_cache, active_contact_row):
        first = message_cache.save(inbound())
        second = message_cache.save(inbound())

        assert first
        assert not second
        assert second.code == SaveOutcome.DUPLICATE
        assert Message.query.filter_by(service_id='SMreply1').count() == 1

        thread = message_cache.query(ThreadRef(campaign_contact_id=active_contact_row.id))
        assert [m.service_id for m in thread] == ['SMreply1']

    def test_reply_is_routed_by_cell_after_first_save(self, message_cache, active_contact_row):
        message_cache.save(inbound())

        thread = message_cache.query(ThreadRef(cell='+15551234567', service='twilio', messageservice_sid='MG123'))

        assert [m.campaign_contact_id for m in thread] == [active_contact_row.id]

    def test_orphan_reply_changes_nothing(self, message_cache, redis_client, active_contact_row):
        result = message_cache.save(inbound(cell='+15550000000'))

        assert not result
        assert result.code == SaveOutcome.ORPHAN
        assert Message.query.count() == 0
        assert redis_client.keys('test:messages-*') == []
        assert stored_status(active_contact_row.id) == 'needsMessage'

    def test_clear_forces_rebuild_from_database(self, message_cache, redis_client, active_contact_row):
        message_cache.save(inbound())

        message_cache.clear_query(ThreadRef(cell='+15551234567', messageservice_sid='MG123'))

        assert redis_client.exists(f'test:messages-{active_contact_row.id}') == 0
        thread = message_cache.query(ThreadRef(campaign_contact_id=active_contact_row.id))
        assert [m.service_id for m in thread] == ['SMreply1']
        assert redis_client.exists(f'test:messages-{active_contact_row.id}') == 1


class TestCacheDisabled:
    """No redis: every read comes from the database"""

    @pytest.fixture
    def uncached_message_cache(self, uncached_app):
        return uncached_app.services.get('message_cache')

    def test_query_matches_database_read(self, uncached_app, uncached_message_cache):
        row = CampaignContactFactory(cell='+15551234567', messageservice_sid='MG123')
        MessageFactory.create_batch(2, campaign_contact=row)
        uncached_message_cache.save(outbound(row, service_id='SMlatest'), snapshot(row))

        thread = uncached_message_cache.query(ThreadRef(campaign_contact_id=row.id))
        rows = uncached_message_cache.message_repository.find_thread(campaign_contact_id=row.id)

        assert [m.id for m in thread] == [r.id for r in rows]
        assert [m.created_at for m in thread] == [ensure_utc(r.created_at) for r in rows]
        assert thread[-1].service_id == 'SMlatest'

    def test_redelivered_reply_caught_by_latest_inbound(self, uncached_app, uncached_message_cache):
        CampaignContactFactory(cell='+15551234567', messageservice_sid='MG123')

        assert uncached_message_cache.save(inbound())
        second = uncached_message_cache.save(inbound())

        assert second.code == SaveOutcome.DUPLICATE
        assert second.metadata['detected_by'] == 'last_message'
        assert Message.query.count() == 1

    def test_clear_is_a_noop(self, uncached_app, uncached_message_cache):
        uncached_message_cache.clear_query(ThreadRef(campaign_contact_id=1))


class TestBulkSeeding:
    """A campaign-wide read warms every contact's cache entry"""

    def test_campaign_read_seeds_each_contact(self, message_cache, redis_client, active_contact_row):
        contacts = [active_contact_row] + [
            CampaignContactFactory(campaign=active_contact_row.campaign, assignment=active_contact_row.assignment)
            for _ in range(2)
        ]
        for contact in contacts:
            MessageFactory.create_batch(2, campaign_contact=contact)

        everything = message_cache.query(ThreadRef(campaign_id=active_contact_row.campaign_id))

        assert len(everything) == 6
        for contact in contacts:
            assert redis_client.llen(f'test:messages-{contact.id}') == 2

        repository = message_cache.message_repository
        with patch.object(repository, 'find_thread', wraps=repository.find_thread) as find_thread:
            thread = message_cache.query(ThreadRef(campaign_contact_id=contacts[1].id))
        find_thread.assert_not_called()

        expected = [m.id for m in everything if m.campaign_contact_id == contacts[1].id]
        assert [m.id for m in thread] == expected
