# alembic/versions/001_initial.py

"""Initial schema: media assets, campaigns, campaign asset bookings

Revision ID: 001
Revises: 
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('media_asset',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('media_asset_code', sa.String(length=64), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('area', sa.String(length=100), nullable=True),
        sa.Column('media_type', sa.String(length=50), nullable=True),
        sa.Column('card_rate', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('base_rate', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('total_sqft', sa.Numeric(precision=10, scale=2), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=30), nullable=False, server_default='Available'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_media_asset_media_asset_code', 'media_asset', ['media_asset_code'])
    op.create_index('ix_media_asset_city', 'media_asset', ['city'])
    op.create_index('ix_media_asset_media_type', 'media_asset', ['media_type'])

    op.create_table('campaign',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('campaign_name', sa.String(length=200), nullable=True),
        sa.Column('client_name', sa.String(length=200), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=30), nullable=False, server_default='Draft'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_campaign_status', 'campaign', ['status'])

    op.create_table('campaign_asset',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('campaign_id', sa.String(length=64), nullable=False),
        sa.Column('asset_id', sa.String(length=64), nullable=False),
        sa.Column('booking_start_date', sa.Date(), nullable=True),
        sa.Column('booking_end_date', sa.Date(), nullable=True),
        sa.Column('card_rate', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('negotiated_rate', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('printing_charges', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('mounting_charges', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.ForeignKeyConstraint(['campaign_id'], ['campaign.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['asset_id'], ['media_asset.id']),
        sa.CheckConstraint(
            'booking_start_date IS NULL OR booking_end_date IS NULL '
            'OR booking_start_date <= booking_end_date',
            name='ck_campaign_asset_dates'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'idx_campaign_asset_asset_dates',
        'campaign_asset',
        ['asset_id', 'booking_start_date', 'booking_end_date']
    )


def downgrade():
    op.drop_index('idx_campaign_asset_asset_dates', table_name='campaign_asset')
    op.drop_table('campaign_asset')
    op.drop_index('ix_campaign_status', table_name='campaign')
    op.drop_table('campaign')
    op.drop_index('ix_media_asset_media_type', table_name='media_asset')
    op.drop_index('ix_media_asset_city', table_name='media_asset')
    op.drop_index('ix_media_asset_media_asset_code', table_name='media_asset')
    op.drop_table('media_asset')
