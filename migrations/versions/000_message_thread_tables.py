"""Create campaign, assignment, campaign_contact and message tables

Revision ID: 000_message_thread_tables
Revises:
Create Date: 2026-10-17

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '000_message_thread_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('campaign',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('is_started', sa.Boolean(), nullable=False),
        sa.Column('is_archived', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('assignment',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('campaign_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['campaign_id'], ['campaign.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_assignment_campaign_id', 'assignment', ['campaign_id'])

    op.create_table('campaign_contact',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('campaign_id', sa.Integer(), nullable=False),
        sa.Column('assignment_id', sa.Integer(), nullable=True),
        sa.Column('cell', sa.String(length=20), nullable=False),
        sa.Column('messageservice_sid', sa.String(length=100), nullable=True),
        sa.Column('message_status', sa.String(length=32), nullable=False),
        sa.Column('timezone_offset', sa.String(length=16), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['campaign_id'], ['campaign.id']),
        sa.ForeignKeyConstraint(['assignment_id'], ['assignment.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_campaign_contact_campaign_id', 'campaign_contact', ['campaign_id'])
    op.create_index('ix_campaign_contact_assignment_id', 'campaign_contact', ['assignment_id'])
    op.create_index('ix_campaign_contact_cell_sid', 'campaign_contact', ['cell', 'messageservice_sid'])

    op.create_table('message',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('campaign_contact_id', sa.Integer(), nullable=True),
        sa.Column('assignment_id', sa.Integer(), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('contact_number', sa.String(length=20), nullable=False),
        sa.Column('is_from_contact', sa.Boolean(), nullable=False),
        sa.Column('text', sa.Text(), nullable=True),
        sa.Column('service', sa.String(length=50), nullable=True),
        sa.Column('messageservice_sid', sa.String(length=100), nullable=True),
        sa.Column('service_id', sa.String(length=100), nullable=True),
        sa.Column('service_response', sa.Text(), nullable=True),
        sa.Column('send_status', sa.String(length=32), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['campaign_contact_id'], ['campaign_contact.id']),
        sa.ForeignKeyConstraint(['assignment_id'], ['assignment.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('service', 'service_id', name='uq_message_service_service_id')
    )
    op.create_index('ix_message_campaign_contact_id', 'message', ['campaign_contact_id'])
    op.create_index('ix_message_assignment_id', 'message', ['assignment_id'])
    op.create_index('ix_message_created_at', 'message', ['created_at'])


def downgrade():
    op.drop_index('ix_message_created_at', table_name='message')
    op.drop_index('ix_message_assignment_id', table_name='message')
    op.drop_index('ix_message_campaign_contact_id', table_name='message')
    op.drop_table('message')
    op.drop_index('ix_campaign_contact_cell_sid', table_name='campaign_contact')
    op.drop_index('ix_campaign_contact_assignment_id', table_name='campaign_contact')
    op.drop_index('ix_campaign_contact_campaign_id', table_name='campaign_contact')
    op.drop_table('campaign_contact')
    op.drop_index('ix_assignment_campaign_id', table_name='assignment')
    op.drop_table('assignment')
    op.drop_table('campaign')
