"""
ContactIdentityResolver - turns a ThreadRef into a campaign contact id
"""

from typing import Optional

from services.message_models import ActiveContact, ThreadRef


class MissingIdentityError(ValueError):
    """Neither a campaign contact id nor a complete cell triple was supplied"""
    pass


class ContactIdentityResolver:
    """
    Resolves conversation identity through the campaign contact cache.

    resolve() only ever reads the cache; resolve_active() and
    find_active_contact() may fall back to the database.
    """

    def __init__(self, campaign_contact_cache):
        self.campaign_contact_cache = campaign_contact_cache

    def resolve(self, ref: ThreadRef) -> Optional[int]:
        """
        Cache-only resolution.

        Returns None when the cache is disabled or has no entry; that is a
        valid "unknown" answer, not an error.

        Raises:
            MissingIdentityError: no campaign contact id and an incomplete
                assignment/cell/messageservice_sid set
        """
        if ref.campaign_contact_id:
            return ref.campaign_contact_id

        if not ref.assignment_id or not ref.cell or not ref.messageservice_sid:
            raise MissingIdentityError(
                'campaign_contact_id required or assignment_id-cell-service-messageservice_sid required'
            )

        active = self.campaign_contact_cache.lookup_by_cell(
            ref.cell, ref.service or '', ref.messageservice_sid, cache_only=True)
        return active.campaign_contact_id if active else None

    def resolve_active(self, ref: ThreadRef) -> Optional[int]:
        """Resolution that may consult the database."""
        if ref.campaign_contact_id:
            return ref.campaign_contact_id

        if not ref.cell or not ref.messageservice_sid:
            raise MissingIdentityError('campaign_contact_id or cell-messageservice_sid required')

        active = self.find_active_contact(ref.cell, ref.service, ref.messageservice_sid)
        return active.campaign_contact_id if active else None

    def find_active_contact(self, cell: str, service: Optional[str],
                            messageservice_sid: Optional[str]) -> Optional[ActiveContact]:
        """Inbound lookup for the save path."""
        return self.campaign_contact_cache.lookup_by_cell(cell, service or '', messageservice_sid)
