"""
Service layer enums
These enums are used by services and should match the values stored in
the database, but allow services to work without importing database models
"""

from enum import Enum


class MessageStatus(str, Enum):
    """
    Conversation statuses written by the message save path.

    The full vocabulary is owned elsewhere; these are the values this
    package reads and computes.
    """
    NEEDS_MESSAGE = 'needsMessage'
    NEEDS_RESPONSE = 'needsResponse'
    CONVO = 'convo'
    MESSAGED = 'messaged'
    CLOSED = 'closed'


class SaveOutcome(str, Enum):
    """Observable results of saving a message"""
    SAVED = 'saved'
    DUPLICATE = 'duplicate'
    ORPHAN = 'orphan'
