from alembic import op
import sqlalchemy as sa

revision = '0001_init'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False)
    )
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('full_name', sa.String(200), nullable=False),
        sa.Column('company', sa.String(200)),
        sa.Column('avatar_url', sa.String(500)),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False)
    )
    op.create_table(
        'user_roles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True, index=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='customer'),
        sa.Column('created_at', sa.DateTime, nullable=False)
    )
    op.create_table(
        'shipments',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('tracking_id', sa.String(20), nullable=False, unique=True, index=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('origin', sa.String(255), nullable=False),
        sa.Column('destination', sa.String(255), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='processing', index=True),
        sa.Column('transport_type', sa.String(20), nullable=False),
        sa.Column('product_type', sa.String(100), nullable=False),
        sa.Column('quantity', sa.Integer, nullable=False),
        sa.Column('weight', sa.Float),
        sa.Column('carbon_footprint', sa.Float, nullable=False, server_default='0'),
        sa.Column('customer_id', sa.String(36), nullable=False, index=True),
        sa.Column('assigned_driver_id', sa.String(36), index=True),
        sa.Column('planned_departure_date', sa.DateTime),
        sa.Column('estimated_arrival_date', sa.DateTime),
        sa.Column('actual_arrival_date', sa.DateTime),
        sa.Column('blockchain_tx_hash', sa.String(66)),
        sa.Column('created_at', sa.DateTime, nullable=False, index=True),
        sa.Column('updated_at', sa.DateTime, nullable=False)
    )
    op.create_table(
        'sensor_data',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('shipment_id', sa.String(36), sa.ForeignKey('shipments.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('timestamp', sa.DateTime, nullable=False),
        sa.Column('temperature', sa.Float),
        sa.Column('humidity', sa.Float),
        sa.Column('shock_detected', sa.Boolean, server_default=sa.false()),
        sa.Column('latitude', sa.Float),
        sa.Column('longitude', sa.Float),
        sa.Column('battery_level', sa.Float),
        sa.Column('blockchain_tx_hash', sa.String(66))
    )
    op.create_table(
        'reviews',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('shipment_id', sa.String(36), sa.ForeignKey('shipments.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', sa.String(36), nullable=False, index=True),
        sa.Column('rating', sa.Integer, nullable=False),
        sa.Column('comment', sa.Text),
        sa.Column('approved', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('blockchain_tx_hash', sa.String(66)),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.UniqueConstraint('shipment_id', 'user_id', name='uq_reviews_shipment_user'),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_reviews_rating_range')
    )
    op.create_table(
        'ai_suggestions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('carbon_savings', sa.Float),
        sa.Column('cost_savings', sa.Float),
        sa.Column('implemented', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('shipment_id', sa.String(36), sa.ForeignKey('shipments.id', ondelete='SET NULL'), index=True),
        sa.Column('user_id', sa.String(36)),
        sa.Column('created_at', sa.DateTime, nullable=False, index=True)
    )

def downgrade():
    op.drop_table('ai_suggestions')
    op.drop_table('reviews')
    op.drop_table('sensor_data')
    op.drop_table('shipments')
    op.drop_table('user_roles')
    op.drop_table('profiles')
    op.drop_table('users')
