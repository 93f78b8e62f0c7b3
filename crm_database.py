# crm_database.py

from extensions import db
from utils.datetime_utils import utc_now


# --- Campaign Model ---
class Campaign(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False, default='')
    is_started = db.Column(db.Boolean, default=False, nullable=False)
    is_archived = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utc_now)

    assignments = db.relationship('Assignment', backref='campaign', lazy=True)
    contacts = db.relationship('CampaignContact', backref='campaign', lazy=True)


# --- Assignment Model: a texter's slice of a campaign ---
class Assignment(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    campaign_id = db.Column(db.Integer, db.ForeignKey('campaign.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utc_now)


# --- CampaignContact Model: the addressable conversation thread ---
class CampaignContact(db.Model):
    __table_args__ = (
        db.Index('ix_campaign_contact_cell_sid', 'cell', 'messageservice_sid'),
    )

    id = db.Column(db.Integer, primary_key=True)
    campaign_id = db.Column(db.Integer, db.ForeignKey('campaign.id'), nullable=False, index=True)
    assignment_id = db.Column(db.Integer, db.ForeignKey('assignment.id'), nullable=True, index=True)
    cell = db.Column(db.String(20), nullable=False)
    messageservice_sid = db.Column(db.String(100), nullable=True)

    # needsMessage, needsResponse, convo, messaged, closed, ...
    message_status = db.Column(db.String(32), nullable=False, default='needsMessage')
    timezone_offset = db.Column(db.String(16), nullable=True)

    updated_at = db.Column(db.DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    assignment = db.relationship('Assignment', backref='contacts', lazy=True)


# --- Message Model ---
class Message(db.Model):
    # Provider message ids are the final dedup authority; NULLs never collide
    __table_args__ = (
        db.UniqueConstraint('service', 'service_id', name='uq_message_service_service_id'),
    )

    id = db.Column(db.Integer, primary_key=True)
    campaign_contact_id = db.Column(db.Integer, db.ForeignKey('campaign_contact.id'), nullable=True, index=True)
    assignment_id = db.Column(db.Integer, db.ForeignKey('assignment.id'), nullable=True, index=True)
    user_id = db.Column(db.Integer, nullable=True)

    # Participants
    contact_number = db.Column(db.String(20), nullable=False)
    is_from_contact = db.Column(db.Boolean, nullable=False, default=False)

    # Content
    text = db.Column(db.Text, nullable=True, default='')

    # Provider fields
    service = db.Column(db.String(50), nullable=True)
    messageservice_sid = db.Column(db.String(100), nullable=True)
    service_id = db.Column(db.String(100), nullable=True)
    service_response = db.Column(db.Text, nullable=True)  # raw provider payload, never cached
    send_status = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), default=utc_now, index=True)

    campaign_contact = db.relationship('CampaignContact', backref=db.backref('messages', lazy='dynamic'))
