from alembic import op
import sqlalchemy as sa

revision = '0003_shipment_distance'
down_revision = '0002_shipment_events'
branch_labels = None
depends_on = None

def upgrade():
    op.add_column('shipments', sa.Column('distance_km', sa.Float, nullable=True))

def downgrade():
    op.drop_column('shipments', 'distance_km')
