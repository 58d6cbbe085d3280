"""create feature tables

Revision ID: 3c9e1f2a7b40
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c9e1f2a7b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('features',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('enabled', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    # One override per (tenant, feature); tenants live outside this database
    op.create_table('tenant_feature_states',
        sa.Column('tenant_id', sa.String(length=100), nullable=False),
        sa.Column('feature_id', sa.String(length=100), nullable=False),
        sa.Column('enabled', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['feature_id'], ['features.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('tenant_id', 'feature_id')
    )
    op.create_index('idx_tenant_feature_states_feature', 'tenant_feature_states', ['feature_id'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_tenant_feature_states_feature', table_name='tenant_feature_states')
    op.drop_table('tenant_feature_states')
    op.drop_table('features')
