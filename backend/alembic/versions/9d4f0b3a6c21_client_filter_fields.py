"""Client filter fields: industry, status, location, recruiter assignment

Revision ID: 9d4f0b3a6c21
Revises: 5a1c2e7d9b10
Create Date: 2025-11-15

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "9d4f0b3a6c21"
down_revision = "5a1c2e7d9b10"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("clients") as batch_op:
        batch_op.add_column(sa.Column("industry", sa.String(), nullable=False, server_default=""))
        batch_op.add_column(sa.Column("status", sa.String(), nullable=False, server_default="Active"))
        batch_op.add_column(sa.Column("location", sa.String(), nullable=False, server_default=""))
        batch_op.add_column(sa.Column("assigned_recruiter_id", sa.Integer(), nullable=True))
        batch_op.add_column(
            sa.Column("assigned_recruiter_name", sa.String(), nullable=False, server_default="")
        )
        batch_op.add_column(
            sa.Column(
                "date_added",
                sa.DateTime(),
                nullable=False,
                server_default=sa.func.current_timestamp(),
            )
        )
        batch_op.create_index("ix_clients_industry", ["industry"], unique=False)
        batch_op.create_index("ix_clients_assigned_recruiter_id", ["assigned_recruiter_id"], unique=False)
        batch_op.create_foreign_key(
            "fk_clients_assigned_recruiter_id_users",
            "users",
            ["assigned_recruiter_id"],
            ["id"],
            ondelete="SET NULL",
        )


def downgrade() -> None:
    with op.batch_alter_table("clients") as batch_op:
        batch_op.drop_constraint("fk_clients_assigned_recruiter_id_users", type_="foreignkey")
        batch_op.drop_index("ix_clients_assigned_recruiter_id")
        batch_op.drop_index("ix_clients_industry")
        batch_op.drop_column("date_added")
        batch_op.drop_column("assigned_recruiter_name")
        batch_op.drop_column("assigned_recruiter_id")
        batch_op.drop_column("location")
        batch_op.drop_column("status")
        batch_op.drop_column("industry")
