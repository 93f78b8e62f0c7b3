"""
CampaignContactRepository - Data access layer for CampaignContact model
"""

from typing import Optional

from sqlalchemy import desc

from crm_database import Campaign, CampaignContact
from repositories.base_repository import BaseRepository
from utils.datetime_utils import utc_now


class CampaignContactRepository(BaseRepository[CampaignContact]):
    """Repository for CampaignContact data access"""

    def __init__(self, session):
        """Initialize repository with database session"""
        super().__init__(session, CampaignContact)

    def find_active_by_cell(self, cell: str,
                            messageservice_sid: Optional[str] = None) -> Optional[CampaignContact]:
        """
        Find the live conversation for a cell number.

        Only contacts in started, non-archived campaigns count. When several
        match, the most recently updated one wins.

        Args:
            cell: Contact phone number
            messageservice_sid: Provider messaging service the contact was texted from

        Returns:
            CampaignContact or None
        """
        query = self.session.query(CampaignContact)\
            .join(Campaign, CampaignContact.campaign_id == Campaign.id)\
            .filter(CampaignContact.cell == cell,
                    Campaign.is_started.is_(True),
                    Campaign.is_archived.is_(False))

        if messageservice_sid:
            query = query.filter(CampaignContact.messageservice_sid == messageservice_sid)

        return query.order_by(desc(CampaignContact.updated_at), desc(CampaignContact.id)).first()

    def update_status(self, campaign_contact_id: int, message_status: str) -> Optional[CampaignContact]:
        """
        Set a contact's message status.

        Returns:
            Updated CampaignContact or None if not found
        """
        return self.update_by_id(
            campaign_contact_id,
            message_status=message_status,
            updated_at=utc_now()
        )
