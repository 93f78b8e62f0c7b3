"""
Value types passed between the message cache, the identity resolver and
the save path. All are frozen; steps build new values with
dataclasses.replace rather than mutating what the caller handed in.
"""

from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Any, Dict, Optional

from utils.datetime_utils import ensure_utc, from_iso, to_iso

# Column never written to the cache and never selected for thread reads
SERVICE_RESPONSE_FIELD = 'service_response'


@dataclass(frozen=True)
class ThreadMessage:
    """One inbound or outbound message in a campaign contact's thread."""
    contact_number: Optional[str] = None
    text: Optional[str] = None
    is_from_contact: bool = False
    id: Optional[int] = None
    campaign_contact_id: Optional[int] = None
    assignment_id: Optional[int] = None
    user_id: Optional[int] = None
    service: Optional[str] = None
    messageservice_sid: Optional[str] = None
    service_id: Optional[str] = None
    service_response: Optional[str] = None
    send_status: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_cache_dict(self) -> Dict[str, Any]:
        """JSON-ready snapshot without the raw provider payload."""
        data = {f.name: getattr(self, f.name) for f in fields(self)
                if f.name != SERVICE_RESPONSE_FIELD}
        data['created_at'] = to_iso(self.created_at)
        return data

    @classmethod
    def from_cache_dict(cls, data: Dict[str, Any]) -> 'ThreadMessage':
        known = {f.name for f in fields(cls)} - {SERVICE_RESPONSE_FIELD}
        values = {key: value for key, value in data.items() if key in known}
        values['created_at'] = from_iso(values.get('created_at'))
        return cls(**values)

    @classmethod
    def from_model(cls, message) -> 'ThreadMessage':
        """
        Build from a Message row.

        service_response is deferred on thread reads, so it is never
        touched here; reading it would issue a query per row.
        """
        values = {f.name: getattr(message, f.name) for f in fields(cls)
                  if f.name != SERVICE_RESPONSE_FIELD}
        values['is_from_contact'] = bool(values['is_from_contact'])
        values['created_at'] = ensure_utc(values['created_at'])
        return cls(**values)

    def to_record(self) -> Dict[str, Any]:
        """Column values for persisting this message."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class ActiveContact:
    """
    Identity cache lookup result for a cell number.

    service_id is only set when the record came from the database, where
    it carries the provider id of the contact's latest inbound message.
    """
    campaign_contact_id: int
    assignment_id: Optional[int] = None
    campaign_id: Optional[int] = None
    message_status: Optional[str] = None
    timezone_offset: Optional[str] = None
    service_id: Optional[str] = None


@dataclass(frozen=True)
class ContactSnapshot:
    """The conversation view returned by a save."""
    id: Optional[int] = None
    campaign_id: Optional[int] = None
    assignment_id: Optional[int] = None
    message_status: Optional[str] = None
    timezone_offset: Optional[str] = None
    cell: Optional[str] = None
    messageservice_sid: Optional[str] = None

    def backfill(self, active: ActiveContact, message: ThreadMessage) -> 'ContactSnapshot':
        """Fill fields this snapshot lacks; values already present win."""
        return replace(
            self,
            id=self.id or active.campaign_contact_id,
            assignment_id=self.assignment_id or active.assignment_id,
            message_status=self.message_status or active.message_status,
            timezone_offset=self.timezone_offset or active.timezone_offset,
            cell=self.cell or message.contact_number,
            messageservice_sid=self.messageservice_sid or message.messageservice_sid,
        )

    def with_status(self, message_status: str) -> 'ContactSnapshot':
        return replace(self, message_status=message_status)


@dataclass(frozen=True)
class ThreadRef:
    """
    Reference to a thread: a direct campaign contact id, a
    (cell, service, messageservice_sid) triple, or a campaign id for
    bulk reads.
    """
    campaign_contact_id: Optional[int] = None
    campaign_id: Optional[int] = None
    assignment_id: Optional[int] = None
    cell: Optional[str] = None
    service: Optional[str] = None
    messageservice_sid: Optional[str] = None

    @property
    def has_cell_identity(self) -> bool:
        return bool(self.cell and self.messageservice_sid)


@dataclass(frozen=True)
class SaveReceipt:
    """What a successful save hands back: the updated view and the stored message."""
    contact: ContactSnapshot
    message: ThreadMessage
