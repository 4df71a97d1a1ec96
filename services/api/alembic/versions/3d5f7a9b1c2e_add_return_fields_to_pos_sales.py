"""add_return_fields_to_pos_sales

Revision ID: 3d5f7a9b1c2e
Revises: 1a2b3c4d5e6f
Create Date: 2026-10-18 14:02:11.418305

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3d5f7a9b1c2e'
down_revision: Union[str, Sequence[str], None] = '1a2b3c4d5e6f'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Existing sales are not returned
    op.add_column('pos_sales', sa.Column('is_returned', sa.Boolean(), nullable=False, server_default='false'))
    op.add_column('pos_sales', sa.Column('returned_at', sa.DateTime(timezone=True), nullable=True))
    op.add_column('pos_sales', sa.Column('returned_by', sa.String(length=100), nullable=True))
    op.add_column('pos_sales', sa.Column('return_reason', sa.Text(), nullable=True))


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_column('pos_sales', 'return_reason')
    op.drop_column('pos_sales', 'returned_by')
    op.drop_column('pos_sales', 'returned_at')
    op.drop_column('pos_sales', 'is_returned')
