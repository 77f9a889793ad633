"""create_tasks_table

Revision ID: 8b24e6f0c5d3
Revises: 3f1c9a2d7b10
Create Date: 2026-10-12 09:45:02

"""
from typing import Sequence, Union

from alembic import op

revision: str = '8b24e6f0c5d3'
down_revision: Union[str, None] = '3f1c9a2d7b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE tasks (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            title VARCHAR(500) NOT NULL,
            description TEXT,
            due_date TIMESTAMPTZ,
            status VARCHAR(20) NOT NULL DEFAULT 'pending'
                CHECK (status IN ('pending', 'completed')),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """)
    op.execute("CREATE INDEX ix_tasks_user_id ON tasks(user_id)")
    op.execute("CREATE INDEX ix_tasks_user_status ON tasks(user_id, status)")
    op.execute("CREATE INDEX ix_tasks_created_at ON tasks(created_at)")

def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS tasks")
