"""Initial migration

Revision ID: 001
Revises:
Create Date: 2025-01-01 00:00:00.000000

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
    # Create restaurants table
    op.create_table(
        'restaurants',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), unique=True, nullable=False),
        sa.Column('timezone', sa.String(50), default='America/Toronto'),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('phone', sa.String(20)),
        sa.Column('address', sa.Text()),
        sa.Column('city', sa.String(100)),
        sa.Column('province', sa.String(50), default='ON'),
        sa.Column('postal_code', sa.String(20)),
        sa.Column('logo_url', sa.String(500)),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create restaurant_delivery_areas table
    op.create_table(
        'restaurant_delivery_areas',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('restaurant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('name', sa.String(255)),
        sa.Column('area_number', sa.Integer()),
        sa.Column('delivery_fee_cents', sa.Integer(), nullable=False, default=0),
        sa.Column('min_order_cents', sa.Integer()),
        sa.Column('geometry', sa.JSON()),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('restaurant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('restaurants.id')),
        sa.Column('email', sa.String(255), unique=True, nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100)),
        sa.Column('last_name', sa.String(100)),
        sa.Column('phone', sa.String(20)),
        sa.Column('role', sa.String(50), default='customer'),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('is_verified', sa.Boolean(), default=False),
        sa.Column('stripe_customer_id', sa.String(255)),
        sa.Column('refresh_token', sa.String(500)),
        sa.Column('last_login', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create dishes table
    op.create_table(
        'dishes',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('restaurant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('category', sa.String(100)),
        sa.Column('image_url', sa.String(500)),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('display_order', sa.Integer(), default=0),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create dish_prices table
    op.create_table(
        'dish_prices',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('dish_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('dishes.id'), nullable=False),
        sa.Column('size_variant', sa.String(100), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('display_order', sa.Integer(), default=0),
        sa.Column('is_active', sa.Boolean(), default=True),
    )

    # Create modifier_groups and dish_modifiers tables
    op.create_table(
        'modifier_groups',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('dish_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('dishes.id'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('is_required', sa.Boolean(), default=False),
        sa.Column('min_selections', sa.Integer(), default=0),
        sa.Column('max_selections', sa.Integer(), default=1),
        sa.Column('display_order', sa.Integer(), default=0),
    )

    op.create_table(
        'dish_modifiers',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('modifier_group_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('modifier_groups.id'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False, default=0),
        sa.Column('is_default', sa.Boolean(), default=False),
        sa.Column('placements', sa.JSON()),
        sa.Column('display_order', sa.Integer(), default=0),
        sa.Column('is_active', sa.Boolean(), default=True),
    )

    # Create combo catalog tables
    op.create_table(
        'combo_groups',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('restaurant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('number_of_items', sa.Integer(), default=1),
        sa.Column('display_header', sa.String(255)),
        sa.Column('deleted_at', sa.DateTime()),
    )

    op.create_table(
        'dish_combo_groups',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('dish_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('dishes.id'), nullable=False),
        sa.Column('combo_group_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('combo_groups.id'), nullable=False),
        sa.Column('is_active', sa.Boolean(), default=True),
    )

    op.create_table(
        'combo_group_sections',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('combo_group_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('combo_groups.id'), nullable=False),
        sa.Column('section_type', sa.String(50)),
        sa.Column('use_header', sa.String(255)),
        sa.Column('display_order', sa.Integer(), default=0),
        sa.Column('free_items', sa.Integer(), default=0),
        sa.Column('min_selection', sa.Integer(), default=0),
        sa.Column('max_selection', sa.Integer()),
        sa.Column('is_active', sa.Boolean(), default=True),
    )

    op.create_table(
        'combo_modifier_groups',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('combo_group_section_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('combo_group_sections.id'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('type_code', sa.String(20)),
        sa.Column('is_selected', sa.Boolean(), default=False),
    )

    op.create_table(
        'combo_modifiers',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('combo_modifier_group_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('combo_modifier_groups.id'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('price_cents', sa.Integer()),
        sa.Column('placements', sa.JSON()),
        sa.Column('display_order', sa.Integer(), default=0),
    )

    op.create_table(
        'combo_modifier_prices',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('combo_modifier_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('combo_modifiers.id'), nullable=False),
        sa.Column('size_variant', sa.String(100)),
        sa.Column('price_cents', sa.Integer(), nullable=False),
    )

    # Create promotions table
    op.create_table(
        'promotions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('restaurant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('code', sa.String(50), nullable=False),
        sa.Column('description', sa.String(255)),
        sa.Column('discount_type', sa.String(20), nullable=False),
        sa.Column('discount_value', sa.Integer(), nullable=False, default=0),
        sa.Column('min_order_cents', sa.Integer(), default=0),
        sa.Column('delivery_only', sa.Boolean(), default=False),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('starts_at', sa.DateTime()),
        sa.Column('ends_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.UniqueConstraint('restaurant_id', 'code', name='uq_promotions_restaurant_code'),
    )

    # Create orders table; payment_reference is the idempotency key
    op.create_table(
        'orders',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('restaurant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id')),
        sa.Column('guest_email', sa.String(255)),
        sa.Column('guest_name', sa.String(255)),
        sa.Column('order_type', sa.String(20), nullable=False, default='delivery'),
        sa.Column('items_json', sa.JSON(), nullable=False),
        sa.Column('subtotal_cents', sa.Integer(), nullable=False, default=0),
        sa.Column('discount_cents', sa.Integer(), nullable=False, default=0),
        sa.Column('delivery_fee_cents', sa.Integer(), nullable=False, default=0),
        sa.Column('tax_cents', sa.Integer(), nullable=False, default=0),
        sa.Column('total_cents', sa.Integer(), nullable=False, default=0),
        sa.Column('promo_code', sa.String(50)),
        sa.Column('delivery_address', sa.JSON()),
        sa.Column('delivery_instructions', sa.Text()),
        sa.Column('special_instructions', sa.Text()),
        sa.Column('scheduled_time', sa.DateTime()),
        sa.Column('payment_reference', sa.String(255), unique=True, nullable=False),
        sa.Column('payment_method', sa.String(50), default='card'),
        sa.Column('payment_status', sa.String(50), default='pending'),
        sa.Column('status', sa.String(50), default='pending'),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    op.create_table(
        'order_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('dish_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('dishes.id')),
        sa.Column('dish_name', sa.String(255), nullable=False),
        sa.Column('size_variant', sa.String(100)),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price_cents', sa.Integer(), nullable=False),
        sa.Column('modifiers', sa.JSON()),
        sa.Column('special_instructions', sa.Text()),
        sa.Column('subtotal_cents', sa.Integer(), nullable=False),
    )

    op.create_table(
        'order_status_history',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('notes', sa.Text()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create payment tables
    op.create_table(
        'payment_transactions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id')),
        sa.Column('restaurant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('stripe_payment_intent_id', sa.String(255), nullable=False),
        sa.Column('stripe_charge_id', sa.String(255)),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, default='CAD'),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('payment_method', sa.String(50), default='card'),
        sa.Column('failure_reason', sa.Text()),
        sa.Column('refund_amount_cents', sa.Integer()),
        sa.Column('refunded_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    op.create_table(
        'stripe_webhook_events',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('stripe_event_id', sa.String(255), unique=True, nullable=False),
        sa.Column('event_type', sa.String(100), nullable=False),
        sa.Column('payload', sa.JSON()),
        sa.Column('processed', sa.Boolean(), default=False),
        sa.Column('error_message', sa.Text()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create indexes
    op.create_index('ix_dishes_restaurant_id', 'dishes', ['restaurant_id'])
    op.create_index('ix_dish_prices_dish_id', 'dish_prices', ['dish_id'])
    op.create_index('ix_orders_restaurant_id', 'orders', ['restaurant_id'])
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_order_status_history_order_id', 'order_status_history', ['order_id'])
    op.create_index('ix_payment_transactions_stripe_payment_intent_id', 'payment_transactions', ['stripe_payment_intent_id'])
    op.create_index('ix_payment_transactions_stripe_charge_id', 'payment_transactions', ['stripe_charge_id'])


def downgrade() -> None:
    op.drop_table('stripe_webhook_events')
    op.drop_table('payment_transactions')
    op.drop_table('order_status_history')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('promotions')
    op.drop_table('combo_modifier_prices')
    op.drop_table('combo_modifiers')
    op.drop_table('combo_modifier_groups')
    op.drop_table('combo_group_sections')
    op.drop_table('dish_combo_groups')
    op.drop_table('combo_groups')
    op.drop_table('dish_modifiers')
    op.drop_table('modifier_groups')
    op.drop_table('dish_prices')
    op.drop_table('dishes')
    op.drop_table('users')
    op.drop_table('restaurant_delivery_areas')
    op.drop_table('restaurants')
