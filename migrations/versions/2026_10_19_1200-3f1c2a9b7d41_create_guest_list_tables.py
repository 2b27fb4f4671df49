"""create_guest_list_tables

Revision ID: 3f1c2a9b7d41
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9b7d41"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

guest_status_enum = sa.Enum("PENDING", "CONFIRMED", "DECLINED", name="guest_status_enum")
history_action_enum = sa.Enum(
    "CREATE", "UPDATE", "DELETE", "STATUS_CHANGE", name="history_action_enum"
)


def upgrade() -> None:
    op.create_table(
        "guests",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("church", sa.String(200), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("status", guest_status_enum, nullable=False, server_default="PENDING"),
        sa.Column("is_pastor", sa.Boolean, nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_guests_created_at", "guests", ["created_at"])
    op.create_index("ix_guests_deleted_at", "guests", ["deleted_at"])
    op.create_index("ix_guests_first_name", "guests", ["first_name"])
    op.create_index("ix_guests_last_name", "guests", ["last_name"])
    op.create_index("ix_guests_status", "guests", ["status"])
    op.create_index(
        "uq_guests_live_name_pair",
        "guests",
        [
            sa.text("lower(trim(first_name))"),
            sa.text("lower(trim(coalesce(last_name, '')))"),
        ],
        unique=True,
        postgresql_where=sa.text("deleted_at IS NULL"),
        sqlite_where=sa.text("deleted_at IS NULL"),
    )

    op.create_table(
        "guest_history",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column("guest_id", sa.Integer, nullable=False),
        sa.Column("action", history_action_enum, nullable=False),
        sa.Column("field", sa.String(50), nullable=True),
        sa.Column("old_value", sa.Text, nullable=True),
        sa.Column("new_value", sa.Text, nullable=True),
    )
    op.create_index("ix_guest_history_created_at", "guest_history", ["created_at"])
    op.create_index("ix_guest_history_guest_id", "guest_history", ["guest_id"])


def downgrade() -> None:
    op.drop_index("ix_guest_history_guest_id", table_name="guest_history")
    op.drop_index("ix_guest_history_created_at", table_name="guest_history")
    op.drop_table("guest_history")

    op.drop_index("uq_guests_live_name_pair", table_name="guests")
    op.drop_index("ix_guests_status", table_name="guests")
    op.drop_index("ix_guests_last_name", table_name="guests")
    op.drop_index("ix_guests_first_name", table_name="guests")
    op.drop_index("ix_guests_deleted_at", table_name="guests")
    op.drop_index("ix_guests_created_at", table_name="guests")
    op.drop_table("guests")

    history_action_enum.drop(op.get_bind(), checkfirst=True)
    guest_status_enum.drop(op.get_bind(), checkfirst=True)
