from alembic import op
import sqlalchemy as sa

revision = '0002_shipment_events'
down_revision = '0001_init'
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'shipment_events',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('shipment_id', sa.String(36), sa.ForeignKey('shipments.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('event_type', sa.String(50), nullable=False, index=True),
        sa.Column('data', sa.JSON, nullable=False),
        sa.Column('blockchain_tx_hash', sa.String(66)),
        sa.Column('created_at', sa.DateTime, nullable=False, index=True)
    )
    op.create_table(
        'shipment_documents',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('shipment_id', sa.String(36), sa.ForeignKey('shipments.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('document_type', sa.String(100), nullable=False, index=True),
        sa.Column('document_hash', sa.String(255), nullable=False),
        sa.Column('is_verified', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('blockchain_tx_hash', sa.String(66)),
        sa.Column('created_by', sa.String(36)),
        sa.Column('created_at', sa.DateTime, nullable=False)
    )

def downgrade():
    op.drop_table('shipment_documents')
    op.drop_table('shipment_events')
