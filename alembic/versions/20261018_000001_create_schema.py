"""
alembic.versions.20261018_000001_create_schema

Initial schema: accounts, academic structure, and link tables.
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "20261018_000001"
down_revision = None
branch_labels = None
depends_on = None


def _entity_columns() -> list[sa.Column]:
    # Shared by every table mapped through `studenda.db.base.Entity`.
    return [
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "roles",
        *_entity_columns(),
        sa.Column("name", sa.String(128), nullable=False),
    )
    op.create_table(
        "permissions",
        *_entity_columns(),
        sa.Column("name", sa.String(128), nullable=False, unique=True),
    )
    op.create_table(
        "users",
        *_entity_columns(),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("surname", sa.String(128), nullable=True),
        sa.Column("email", sa.String(128), nullable=True, unique=True),
        sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id"), nullable=True),
    )
    op.create_index("ix_users_role_id", "users", ["role_id"])

    op.create_table(
        "departments",
        *_entity_columns(),
        sa.Column("name", sa.String(128), nullable=False),
    )
    op.create_table(
        "courses",
        *_entity_columns(),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column(
            "department_id", sa.Integer(), sa.ForeignKey("departments.id"), nullable=False
        ),
    )
    op.create_index("ix_courses_department_id", "courses", ["department_id"])
    op.create_table(
        "groups",
        *_entity_columns(),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("course_id", sa.Integer(), sa.ForeignKey("courses.id"), nullable=False),
    )
    op.create_index("ix_groups_course_id", "groups", ["course_id"])
    op.create_table(
        "week_types",
        *_entity_columns(),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("index", sa.Integer(), nullable=False),
    )

    op.create_table(
        "user_group_links",
        *_entity_columns(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id"), nullable=False),
        sa.UniqueConstraint("user_id", "group_id", name="uq_user_group_link"),
    )
    op.create_index("ix_user_group_links_user_id", "user_group_links", ["user_id"])
    op.create_index("ix_user_group_links_group_id", "user_group_links", ["group_id"])
    op.create_table(
        "role_permission_links",
        *_entity_columns(),
        sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id"), nullable=False),
        sa.Column(
            "permission_id", sa.Integer(), sa.ForeignKey("permissions.id"), nullable=False
        ),
        sa.UniqueConstraint("role_id", "permission_id", name="uq_role_permission_link"),
    )
    op.create_index("ix_role_permission_links_role_id", "role_permission_links", ["role_id"])
    op.create_index(
        "ix_role_permission_links_permission_id", "role_permission_links", ["permission_id"]
    )


def downgrade() -> None:
    op.drop_table("role_permission_links")
    op.drop_table("user_group_links")
    op.drop_table("week_types")
    op.drop_table("groups")
    op.drop_table("courses")
    op.drop_table("departments")
    op.drop_table("users")
    op.drop_table("permissions")
    op.drop_table("roles")
