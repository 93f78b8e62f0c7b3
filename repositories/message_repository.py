"""
MessageRepository - Data access layer for Message model
"""

import logging
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import load_only

from crm_database import Assignment, Message
from repositories.base_repository import BaseRepository
from services.message_models import SERVICE_RESPONSE_FIELD, ThreadMessage

logger = logging.getLogger(__name__)


class DuplicateMessageError(Exception):
    """A message with the same provider message id is already stored"""

    def __init__(self, service: Optional[str], service_id: str):
        super().__init__(f"Message {service_id} from {service or 'unknown service'} already exists")
        self.service = service
        self.service_id = service_id


class MessageRepository(BaseRepository[Message]):
    """Repository for Message data access"""

    def __init__(self, session):
        """Initialize repository with database session"""
        super().__init__(session, Message)

    @staticmethod
    def thread_columns() -> List[str]:
        """Every message column except the raw provider payload."""
        return [column.key for column in Message.__table__.columns
                if column.key != SERVICE_RESPONSE_FIELD]

    def find_thread(self, campaign_contact_id: Optional[int] = None,
                    campaign_id: Optional[int] = None) -> List[Message]:
        """
        Find messages for one campaign contact, or for a whole campaign.

        Args:
            campaign_contact_id: Thread owner; takes precedence when both are given
            campaign_id: Campaign to read every thread of (joined through assignment)

        Returns:
            Messages ordered by created_at ascending, service_response not loaded
        """
        columns = [getattr(Message, name) for name in self.thread_columns()]
        query = self.session.query(Message).options(load_only(*columns))

        if campaign_contact_id:
            query = query.filter(Message.campaign_contact_id == campaign_contact_id)
        elif campaign_id:
            query = query.join(Assignment, Message.assignment_id == Assignment.id)\
                .filter(Assignment.campaign_id == campaign_id)
        else:
            logger.warning("find_thread called without campaign_contact_id or campaign_id")
            return []

        return query.order_by(Message.created_at, Message.id).all()

    def latest_inbound_service_id(self, campaign_contact_id: int) -> Optional[str]:
        """
        Provider message id of the contact's most recent inbound message.

        Args:
            campaign_contact_id: Thread owner

        Returns:
            service_id or None when the contact never replied
        """
        row = self.session.query(Message.service_id)\
            .filter(Message.campaign_contact_id == campaign_contact_id,
                    Message.is_from_contact.is_(True))\
            .order_by(desc(Message.created_at), desc(Message.id))\
            .first()
        return row[0] if row else None

    def persist(self, message: ThreadMessage, is_update: bool = False) -> Message:
        """
        Write a single message.

        Args:
            message: Message to store
            is_update: Upsert on message.id instead of inserting a new row

        Returns:
            The stored Message row

        Raises:
            DuplicateMessageError: Insert collided on (service, service_id)
            SQLAlchemyError: Any other database failure
        """
        record = message.to_record()
        try:
            if is_update:
                entity = self.session.merge(Message(**record))
            else:
                record.pop('id', None)
                entity = Message(**record)
                self.session.add(entity)
            self.session.flush()
            self.session.commit()
            logger.debug(f"Persisted message {entity.id} for contact {entity.campaign_contact_id}")
            return entity
        except IntegrityError as e:
            self.session.rollback()
            if not is_update and message.service_id:
                raise DuplicateMessageError(message.service, message.service_id) from e
            logger.error(f"Error persisting message: {e}")
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error persisting message: {e}")
            self.session.rollback()
            raise
