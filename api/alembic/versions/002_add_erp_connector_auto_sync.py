"""add_erp_connector_auto_sync

Revision ID: 002
Revises: 001
Create Date: 2026-10-06 16:40:03.527911

Conectores creados antes de esta revision quedan con auto_sync = false:
el auto-sync solo toma los que se habiliten explicitamente.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, Sequence[str], None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    columns = [c['name'] for c in inspector.get_columns('erp_connectors')]

    if 'auto_sync' not in columns:
        op.add_column(
            'erp_connectors',
            sa.Column('auto_sync', sa.Boolean(), server_default=sa.false(), nullable=True)
        )


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    columns = [c['name'] for c in inspector.get_columns('erp_connectors')]

    if 'auto_sync' in columns:
        with op.batch_alter_table('erp_connectors') as batch_op:
            batch_op.drop_column('auto_sync')
