"""Create users and codes tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates the `users` and `codes` tables.
How:   Generic UUID columns; ids are generated by the application on insert.

codes.owner_id is indexed but NOT a foreign key: deleting a
user leaves its codes in place unless CASCADE_USER_DELETE is enabled.

Rollback: downgrade() drops both tables (destructive, all data lost).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "codes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("language", sa.String(50), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    # GET /codes?owner_id= and cascade deletes filter on the owner
    op.create_index("ix_codes_owner_id", "codes", ["owner_id"])


def downgrade() -> None:
    op.drop_index("ix_codes_owner_id", table_name="codes")
    op.drop_table("codes")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
