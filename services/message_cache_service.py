"""
MessageCacheService - reads and writes campaign contact message threads

Reads are served from the thread cache when possible and rebuild it from
the database on a miss. Saves:

0. resolve the conversation for inbound messages and drop duplicates
1. stamp created_at
2. release the contact's in-flight send slot
3. append to the cached thread
4. update the conversation status
5. persist the message

The steps are not one transaction. The database is the system of record
and the final dedup authority (unique service/service_id); if the
durable write fails after the cache append, the cached thread is dropped
so the next read rebuilds it.
"""

from dataclasses import replace
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from logging_config import get_logger, message_event_logger
from repositories.message_repository import DuplicateMessageError
from services.common.result import Result
from services.enums import MessageStatus, SaveOutcome
from services.identity_resolver import MissingIdentityError
from services.message_models import ActiveContact, ContactSnapshot, SaveReceipt, ThreadMessage, ThreadRef
from utils.datetime_utils import utc_now

logger = get_logger(__name__)


def next_message_status(prior_status: Optional[str], is_from_contact: bool) -> str:
    """Conversation status after a message in the given direction."""
    if is_from_contact:
        return MessageStatus.NEEDS_RESPONSE.value
    if prior_status == MessageStatus.NEEDS_RESPONSE:
        return MessageStatus.CONVO.value
    return MessageStatus.MESSAGED.value


class MessageCacheService:
    """Cache-backed message thread access and the message save path"""

    def __init__(self,
                 message_repository,
                 thread_store,
                 identity_resolver,
                 campaign_contact_cache,
                 in_flight_service,
                 event_logger=None):
        """
        Initialize service with injected dependencies.

        Args:
            message_repository: Repository for durable message reads/writes
            thread_store: ThreadStore (redis-backed or disabled)
            identity_resolver: ContactIdentityResolver
            campaign_contact_cache: Identity cache; receives status updates
            in_flight_service: In-flight send tracker
            event_logger: Structured logger for orphan/duplicate events
        """
        self.message_repository = message_repository
        self.thread_store = thread_store
        self.identity_resolver = identity_resolver
        self.campaign_contact_cache = campaign_contact_cache
        self.in_flight_service = in_flight_service
        self.event_logger = event_logger or message_event_logger

    # READ

    def query(self, ref: ThreadRef) -> List[ThreadMessage]:
        """
        Get a message thread, oldest first.

        Args:
            ref: campaign_contact_id, a cell triple, or campaign_id for every
                thread of a campaign

        Returns:
            Messages ordered by created_at; empty when a cell triple matches
            no active conversation

        Raises:
            MissingIdentityError: ref identifies nothing
        """
        campaign_contact_id = self._resolve_for_read(ref)

        if campaign_contact_id:
            exists, messages = self.thread_store.read(campaign_contact_id)
            if exists:
                return messages
            rows = self.message_repository.find_thread(campaign_contact_id=campaign_contact_id)
        elif ref.campaign_id:
            rows = self.message_repository.find_thread(campaign_id=ref.campaign_id)
        else:
            return []

        messages = [ThreadMessage.from_model(row) for row in rows]
        seeded = self.thread_store.seed(messages)
        if seeded:
            self.event_logger.log_thread_seeded(len(seeded), len(messages))
        return messages

    def clear_query(self, ref: ThreadRef) -> None:
        """Drop the cached thread for a conversation."""
        if not self.thread_store.enabled:
            return
        campaign_contact_id = self.identity_resolver.resolve_active(ref)
        if campaign_contact_id:
            self.thread_store.clear(campaign_contact_id)

    def _resolve_for_read(self, ref: ThreadRef) -> Optional[int]:
        if ref.campaign_contact_id or ref.has_cell_identity:
            return self.identity_resolver.resolve_active(ref)
        if not ref.campaign_id:
            raise MissingIdentityError('campaign_contact_id, cell-messageservice_sid or campaign_id required')
        return None

    # WRITE

    def save(self, message: ThreadMessage,
             contact: Optional[ContactSnapshot] = None) -> Result[SaveReceipt]:
        """
        Save a message and update its conversation.

        Args:
            message: Message to save; inbound messages may arrive with only
                contact_number/service/messageservice_sid
            contact: What the caller already knows about the conversation;
                its values win over looked-up ones

        Returns:
            Result.success(SaveReceipt) or a falsy Result.failure with code
            SaveOutcome.ORPHAN or SaveOutcome.DUPLICATE (nothing changed)

        Raises:
            MissingIdentityError: outbound message without conversation identity
            SQLAlchemyError / RedisError: backend failures, not retried
        """
        contact = contact or ContactSnapshot()

        if message.is_from_contact:
            active = self.identity_resolver.find_active_contact(
                message.contact_number, message.service, message.messageservice_sid)

            if active is None:
                self.event_logger.log_orphan_message(
                    message.contact_number, message.service,
                    message.messageservice_sid, message.service_id)
                return Result.failure(
                    "No active conversation for inbound message",
                    code=SaveOutcome.ORPHAN,
                    metadata={'outcome': SaveOutcome.ORPHAN.value}
                )

            detected_by = self._find_duplicate(message, active)
            if detected_by:
                self.event_logger.log_duplicate_message(
                    active.campaign_contact_id, message.service_id, detected_by)
                return self._duplicate(active.campaign_contact_id, detected_by)

            contact = contact.backfill(active, message)
            message = replace(
                message,
                campaign_contact_id=message.campaign_contact_id or active.campaign_contact_id,
                assignment_id=message.assignment_id or active.assignment_id,
            )

        if not contact.id or not (message.id or message.campaign_contact_id):
            raise MissingIdentityError('message needs a campaign contact before it can be saved')

        # The provider's timestamp is not trusted for thread ordering
        message = replace(message, created_at=utc_now())

        if contact.campaign_id:
            self.in_flight_service.pop_in_flight(
                contact.campaign_id, contact.id,
                None if message.is_from_contact else message.user_id)

        self.thread_store.write(contact.id, [message])

        new_status = next_message_status(contact.message_status, message.is_from_contact)
        self.campaign_contact_cache.update_status(contact, new_status)

        try:
            saved = self.message_repository.persist(message, is_update=bool(message.id))
        except DuplicateMessageError as e:
            self.thread_store.clear(contact.id)
            # The earlier save of this message already released the in-flight
            # slot, so only the status needs putting back
            if contact.message_status:
                self.campaign_contact_cache.update_status(contact, contact.message_status)
            self.event_logger.log_duplicate_message(contact.id, e.service_id, 'database')
            return self._duplicate(contact.id, 'database')
        except SQLAlchemyError as e:
            self.thread_store.clear(contact.id)
            self.event_logger.log_thread_rebuild(contact.id, str(e))
            raise

        message = replace(message, id=message.id or saved.id)
        logger.debug("Message saved", campaign_contact_id=contact.id,
                     message_id=message.id, message_status=new_status)

        return Result.success(
            SaveReceipt(contact=contact.with_status(new_status), message=message),
            metadata={'outcome': SaveOutcome.SAVED.value, 'message_status': new_status}
        )

    def _find_duplicate(self, message: ThreadMessage, active: ActiveContact) -> Optional[str]:
        """
        Check an inbound message against what is already recorded.

        Database lookups carry the latest inbound service_id and are
        compared directly; cache lookups don't, so the thread is scanned.
        Messages without a service_id never match.

        Returns:
            Where the duplicate was detected, or None
        """
        if active.service_id:
            return 'last_message' if message.service_id == active.service_id else None

        thread = self.query(ThreadRef(campaign_contact_id=active.campaign_contact_id))
        if any(m.service_id and m.service_id == message.service_id for m in thread):
            return 'thread'
        return None

    @staticmethod
    def _duplicate(campaign_contact_id: int, detected_by: str) -> Result[SaveReceipt]:
        return Result.failure(
            "Duplicate inbound message",
            code=SaveOutcome.DUPLICATE,
            metadata={'outcome': SaveOutcome.DUPLICATE.value,
                      'campaign_contact_id': campaign_contact_id,
                      'detected_by': detected_by}
        )
