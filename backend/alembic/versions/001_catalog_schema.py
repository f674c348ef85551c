"""Create catalog schema: users, vehicles, parts and part_vehicles.

Revision ID: 001_catalog_schema
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_catalog_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create catalog tables."""

    # 1. users - marketplace accounts that own parts
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('full_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('role', sa.String(30), nullable=False, server_default='User'),  # Admin, Seller, SellerSuspended, User
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # 2. vehicles - model year or inclusive production range
    op.create_table(
        'vehicles',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('brand', sa.String(60), nullable=False),
        sa.Column('model', sa.String(60), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('start_year', sa.Integer(), nullable=True),
        sa.Column('end_year', sa.Integer(), nullable=True),
        sa.Column('engine', sa.String(60), nullable=True),
        sa.Column('image_url', sa.String(300), nullable=True),
        sa.Column('brand_logo_url', sa.String(300), nullable=True),
        sa.CheckConstraint(
            'start_year IS NULL OR end_year IS NULL OR start_year <= end_year',
            name='ck_vehicles_year_range',
        ),
    )
    op.create_index('ix_vehicles_brand_model', 'vehicles', ['brand', 'model'])

    # 3. parts
    op.create_table(
        'parts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('brand', sa.String(60), nullable=False),
        sa.Column('category', sa.String(40), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(300), nullable=True),
        sa.Column('condition', sa.String(20), nullable=False, server_default='Sıfır'),
        sa.Column('seller_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        # Deprecated single-vehicle link
        sa.Column('vehicle_id', sa.Integer(), sa.ForeignKey('vehicles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('stock >= 0', name='ck_parts_stock_non_negative'),
        sa.CheckConstraint('price >= 0 AND price <= 999999', name='ck_parts_price_range'),
    )
    op.create_index('ix_parts_category', 'parts', ['category'])
    op.create_index('ix_parts_seller_id', 'parts', ['seller_id'])
    op.create_index('ix_parts_vehicle_id', 'parts', ['vehicle_id'])

    # 4. part_vehicles - many-to-many compatibility
    op.create_table(
        'part_vehicles',
        sa.Column('part_id', sa.Integer(), sa.ForeignKey('parts.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('vehicle_id', sa.Integer(), sa.ForeignKey('vehicles.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_index('ix_part_vehicles_vehicle_id', 'part_vehicles', ['vehicle_id'])


def downgrade() -> None:
    """Drop catalog tables."""
    op.drop_index('ix_part_vehicles_vehicle_id', table_name='part_vehicles')
    op.drop_table('part_vehicles')

    op.drop_index('ix_parts_vehicle_id', table_name='parts')
    op.drop_index('ix_parts_seller_id', table_name='parts')
    op.drop_index('ix_parts_category', table_name='parts')
    op.drop_table('parts')

    op.drop_index('ix_vehicles_brand_model', table_name='vehicles')
    op.drop_table('vehicles')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
