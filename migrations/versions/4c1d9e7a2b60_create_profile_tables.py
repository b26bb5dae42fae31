"""create_profile_tables

Revision ID: 4c1d9e7a2b60
Revises:
Create Date: 2026-10-19 10:12:44.518302

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1d9e7a2b60'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create published profiles and the pending signups staged before payment."""
    op.create_table('profiles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('catchphrase', sa.Text(), nullable=False),
        sa.Column('links', sa.Text(), server_default='[]', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
    )

    # Keyed by the payment intent id; rows are deleted once promoted
    op.create_table('pending_profiles',
        sa.Column('id', sa.String(length=255), nullable=False),
        sa.Column('clean_username', sa.String(length=100), nullable=False),
        sa.Column('catchphrase', sa.Text(), nullable=False),
        sa.Column('links', sa.Text(), server_default='[]', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_pending_profiles_clean_username',
        'pending_profiles',
        ['clean_username'],
        unique=False,
    )


def downgrade() -> None:
    """Drop profile tables."""
    op.drop_index('ix_pending_profiles_clean_username', table_name='pending_profiles')
    op.drop_table('pending_profiles')
    op.drop_table('profiles')
