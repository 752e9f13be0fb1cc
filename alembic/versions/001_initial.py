"""Initial migration

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create tenants table
    op.create_table(
        'tenants',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('contact_email', sa.String(255), unique=True),
        sa.Column('timezone', sa.String(50), default='Europe/Paris'),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create profiles table
    op.create_table(
        'profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id'), unique=True, nullable=False),
        sa.Column('display_name', sa.String(255)),
        sa.Column('minutes_balance', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('auto_recharge_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('auto_recharge_threshold', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('preferred_pack_type', sa.String(10)),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint('minutes_balance >= 0', name='ck_profiles_minutes_balance'),
    )

    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id')),
        sa.Column('email', sa.String(255), unique=True, nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255)),
        sa.Column(
            'role',
            sa.Enum('SUPER_ADMIN', 'RESTAURANT_ADMIN', 'STAFF_VIEWER', name='userrole'),
            default='STAFF_VIEWER',
        ),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('refresh_token', sa.String(500)),
        sa.Column('last_login', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create reservations table
    op.create_table(
        'reservations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('client_name', sa.String(255), nullable=False),
        sa.Column('client_phone', sa.String(30)),
        sa.Column('reservation_date', sa.Date()),
        sa.Column('reservation_time', sa.Time()),
        sa.Column('party_size', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('status', sa.String(20), nullable=False, server_default='confirmed'),
        sa.Column('arrived_at', sa.DateTime()),
        sa.Column('cancelled_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint('party_size >= 1', name='ck_reservations_party_size'),
        sa.CheckConstraint(
            "status IN ('confirmed', 'arrived', 'cancelled')",
            name='ck_reservations_status',
        ),
    )
    op.create_index('ix_reservations_tenant_id', 'reservations', ['tenant_id'])
    op.create_index('ix_reservations_status', 'reservations', ['status'])

    # Create orders table
    op.create_table(
        'orders',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('client_name', sa.String(255), nullable=False),
        sa.Column('order_time', sa.Time()),
        sa.Column('items_json', sa.JSON(), nullable=False),
        sa.Column('total_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='received'),
        sa.Column('preparing_at', sa.DateTime()),
        sa.Column('ready_at', sa.DateTime()),
        sa.Column('delivered_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint('total_cents >= 0', name='ck_orders_total_cents'),
        sa.CheckConstraint(
            "status IN ('received', 'preparing', 'ready', 'delivered')",
            name='ck_orders_status',
        ),
    )
    op.create_index('ix_orders_tenant_id', 'orders', ['tenant_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])

    # Create menu_prices table
    op.create_table(
        'menu_prices',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('item_name', sa.String(255), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(100)),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.UniqueConstraint('tenant_id', 'item_name', name='uq_menu_prices_tenant_item'),
    )
    op.create_index('ix_menu_prices_tenant_id', 'menu_prices', ['tenant_id'])

    # Create recharges table
    op.create_table(
        'recharges',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('pack_type', sa.String(10), nullable=False),
        sa.Column('minutes', sa.Integer(), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('stripe_session_id', sa.String(255), unique=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint(
            "status IN ('pending', 'completed', 'failed')",
            name='ck_recharges_status',
        ),
    )
    op.create_index('ix_recharges_tenant_id', 'recharges', ['tenant_id'])

    # Create subscribers table
    op.create_table(
        'subscribers',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id'), unique=True, nullable=False),
        sa.Column('stripe_customer_id', sa.String(255)),
        sa.Column('stripe_subscription_id', sa.String(255)),
        sa.Column('tier', sa.String(20)),
        sa.Column('status', sa.String(20)),
        sa.Column('current_period_end', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )
    op.create_index('ix_subscribers_stripe_customer_id', 'subscribers', ['stripe_customer_id'])

    # Create minute_consumptions table
    op.create_table(
        'minute_consumptions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('minutes', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('consumed_at', sa.DateTime(), default=sa.func.now()),
    )
    op.create_index('ix_minute_consumptions_tenant_id', 'minute_consumptions', ['tenant_id'])

    # Create notifications table
    op.create_table(
        'notifications',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('category', sa.String(20), nullable=False, server_default='info'),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.CheckConstraint(
            "category IN ('success', 'info', 'warning', 'error')",
            name='ck_notifications_category',
        ),
    )
    op.create_index('ix_notifications_tenant_id', 'notifications', ['tenant_id'])

    # Create audit_logs table
    op.create_table(
        'audit_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('tenants.id')),
        sa.Column('actor_id', postgresql.UUID(as_uuid=True)),
        sa.Column('actor_type', sa.String(50)),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('resource_type', sa.String(50)),
        sa.Column('resource_id', postgresql.UUID(as_uuid=True)),
        sa.Column('data_json', sa.JSON()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create webhook_logs table
    op.create_table(
        'webhook_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('webhook_type', sa.String(50), nullable=False),
        sa.Column('data_type', sa.String(100)),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True)),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('error_message', sa.Text()),
        sa.Column('response_status', sa.Integer()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table('webhook_logs')
    op.drop_table('audit_logs')
    op.drop_table('notifications')
    op.drop_table('minute_consumptions')
    op.drop_table('subscribers')
    op.drop_table('recharges')
    op.drop_table('menu_prices')
    op.drop_table('orders')
    op.drop_table('reservations')
    op.drop_table('users')
    op.drop_table('profiles')
    op.drop_table('tenants')
    sa.Enum(name='userrole').drop(op.get_bind(), checkfirst=True)
