"""Create claim and resource class tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-18 00:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "claim",
        sa.Column("uid", sa.Uuid(), nullable=False),
        sa.Column("kind", sa.String(), nullable=False),
        sa.Column("namespace", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("class_selector", sa.Text(), nullable=False),
        sa.Column("class_reference", sa.Text(), nullable=True),
        sa.Column("external_name", sa.String(), nullable=True),
        sa.Column("resource_version", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("uid", name=op.f("pk_claim")),
        sa.UniqueConstraint("kind", "namespace", "name", name="uq_claim_kind_namespace_name"),
    )
    op.create_table(
        "resource_class",
        sa.Column("uid", sa.Uuid(), nullable=False),
        sa.Column("kind", sa.String(), nullable=False),
        sa.Column("namespace", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("labels", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("uid", name=op.f("pk_resource_class")),
        sa.UniqueConstraint(
            "kind", "namespace", "name", name="uq_resource_class_kind_namespace_name"
        ),
    )
    op.create_index(
        op.f("ix_resource_class_kind"), "resource_class", ["kind"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_resource_class_kind"), table_name="resource_class")
    op.drop_table("resource_class")
    op.drop_table("claim")
