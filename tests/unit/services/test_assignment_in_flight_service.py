"""
Tests for AssignmentInFlightService
"""

import fakeredis
import pytest

from config import CacheSettings
from services.assignment_in_flight_service import AssignmentInFlightService


class TestAssignmentInFlightService:

    @pytest.fixture
    def redis_client(self):
        return fakeredis.FakeRedis(decode_responses=True)

    @pytest.fixture
    def service(self, redis_client):
        return AssignmentInFlightService(redis_client, CacheSettings(key_prefix='t:', redis_url='redis://fake'))

    def test_add_and_count(self, service):
        service.add_in_flight(4, 11)
        service.add_in_flight(4, 12)

        assert service.count_in_flight(4) == 2
        assert service.count_in_flight(5) == 0

    def test_pop_removes_contact(self, service):
        service.add_in_flight(4, 11)

        service.pop_in_flight(4, 11)

        assert service.count_in_flight(4) == 0

    def test_pop_with_texter_records_activity(self, service, redis_client):
        service.add_in_flight(4, 11)

        service.pop_in_flight(4, 11, texter_user_id=77)

        assert redis_client.zrange('t:texterlast-4', 0, -1) == ['77']
        assert redis_client.ttl('t:texterlast-4') > 0

    def test_pop_without_texter_leaves_activity_alone(self, service, redis_client):
        service.pop_in_flight(4, 11)

        assert redis_client.exists('t:texterlast-4') == 0

    def test_pop_of_unknown_contact_is_harmless(self, service):
        service.pop_in_flight(4, 999)

        assert service.count_in_flight(4) == 0

    def test_without_redis_everything_is_a_noop(self):
        service = AssignmentInFlightService()

        service.add_in_flight(4, 11)
        service.pop_in_flight(4, 11, 77)

        assert service.count_in_flight(4) == 0
