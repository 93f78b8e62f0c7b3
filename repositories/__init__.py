"""
Repository Layer - Data Access Abstraction
Implements the Repository Pattern for database isolation
"""

from .base_repository import BaseRepository
from .campaign_contact_repository import CampaignContactRepository
from .message_repository import DuplicateMessageError, MessageRepository

__all__ = [
    'BaseRepository',
    'CampaignContactRepository',
    'DuplicateMessageError',
    'MessageRepository'
]
