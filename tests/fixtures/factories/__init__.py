"""
Test Data Factories

Usage:
    from tests.fixtures.factories import CampaignContactFactory, MessageFactory

    contact = CampaignContactFactory(cell='+15551234567')
    MessageFactory.create_batch(3, campaign_contact=contact)
    MessageFactory(campaign_contact=contact, inbound=True)
"""

from .base import BaseFactory, PhoneProvider, fake, thread_time
from .campaign_factory import AssignmentFactory, CampaignContactFactory, CampaignFactory
from .message_factory import MessageFactory

__all__ = [
    'BaseFactory',
    'PhoneProvider',
    'fake',
    'thread_time',
    'CampaignFactory',
    'AssignmentFactory',
    'CampaignContactFactory',
    'MessageFactory',
]
