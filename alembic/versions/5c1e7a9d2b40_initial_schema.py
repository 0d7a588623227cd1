"""Initial schema: users, lists, shares, groups, items, API keys

Revision ID: 5c1e7a9d2b40
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5c1e7a9d2b40"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("profile_picture_url", sa.String(1000), nullable=True),
        sa.Column("external_provider", sa.String(50), nullable=False),
        sa.Column("external_user_id", sa.String(255), nullable=False),
        sa.Column("default_list_id", sa.Uuid(), nullable=True),
        *timestamps(),
        sa.UniqueConstraint(
            "external_provider", "external_user_id", name="uq_user_external_identity"
        ),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "grocery_lists",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column(
            "owner_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("share_token", sa.String(100), nullable=True, unique=True),
        sa.Column("share_token_can_edit", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "auto_remove_bought_items_enabled",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column(
            "auto_remove_bought_items_delay_minutes",
            sa.Integer(),
            nullable=False,
            server_default="60",
        ),
        *timestamps(),
    )
    op.create_index("ix_grocery_lists_owner_id", "grocery_lists", ["owner_id"])

    # users <-> grocery_lists reference each other
    op.create_foreign_key(
        "fk_users_default_list_id",
        "users",
        "grocery_lists",
        ["default_list_id"],
        ["id"],
        ondelete="SET NULL",
    )

    op.create_table(
        "list_shares",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "list_id",
            sa.Uuid(),
            sa.ForeignKey("grocery_lists.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("can_edit", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("shared_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("list_id", "user_id", name="uq_list_share_user"),
    )
    op.create_index("ix_list_shares_list_id", "list_shares", ["list_id"])
    op.create_index("ix_list_shares_user_id", "list_shares", ["user_id"])

    op.create_table(
        "item_groups",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "list_id",
            sa.Uuid(),
            sa.ForeignKey("grocery_lists.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("icon", sa.String(50), nullable=True),
        sa.Column("color", sa.String(20), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        *timestamps(),
    )
    op.create_index("ix_item_groups_list_id", "item_groups", ["list_id"])

    op.create_table(
        "grocery_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "list_id",
            sa.Uuid(),
            sa.ForeignKey("grocery_lists.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "group_id",
            sa.Uuid(),
            sa.ForeignKey("item_groups.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.String(500), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("unit", sa.String(50), nullable=True),
        sa.Column("is_bought", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("bought_at", sa.DateTime(timezone=True), nullable=True),
        *timestamps(),
    )
    op.create_index("ix_grocery_items_list_id", "grocery_items", ["list_id"])
    op.create_index("ix_grocery_items_group_id", "grocery_items", ["group_id"])
    op.create_index("ix_grocery_items_is_bought", "grocery_items", ["is_bought"])

    op.create_table(
        "api_keys",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("key_hash", sa.String(128), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        *timestamps(),
    )
    op.create_index("ix_api_keys_user_id", "api_keys", ["user_id"])
    op.create_index("ix_api_keys_key_hash", "api_keys", ["key_hash"], unique=True)


def downgrade() -> None:
    op.drop_table("api_keys")
    op.drop_table("grocery_items")
    op.drop_table("item_groups")
    op.drop_table("list_shares")
    op.drop_constraint("fk_users_default_list_id", "users", type_="foreignkey")
    op.drop_table("grocery_lists")
    op.drop_table("users")
