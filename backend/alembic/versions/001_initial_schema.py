"""Initial schema: event, team, match, categoryresult, qualifierbye, advancementhold

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "event",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("winners_confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "team",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("seed", sa.Integer(), nullable=True),
        sa.Column("education_level", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["event_id"], ["event.id"]),
        sa.UniqueConstraint("event_id", "category_id", "name", name="uq_category_team_name"),
    )
    op.create_index("ix_team_event_id", "team", ["event_id"])
    op.create_index("ix_team_category_id", "team", ["category_id"])

    op.create_table(
        "match",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.String(), nullable=False),
        sa.Column("round", sa.Integer(), nullable=False),
        sa.Column("match_number", sa.Integer(), nullable=False),
        sa.Column("stage", sa.String(), nullable=False),
        sa.Column("education_level", sa.String(), nullable=True),
        sa.Column("team_a_id", sa.Integer(), nullable=True),
        sa.Column("team_b_id", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("winner_id", sa.Integer(), nullable=True),
        sa.Column("score_a", sa.Integer(), nullable=True),
        sa.Column("score_b", sa.Integer(), nullable=True),
        sa.Column("ko_points_a", sa.Integer(), nullable=True),
        sa.Column("ko_points_b", sa.Integer(), nullable=True),
        sa.Column("goals_a", sa.Integer(), nullable=True),
        sa.Column("goals_b", sa.Integer(), nullable=True),
        sa.Column("time_a", sa.Float(), nullable=True),
        sa.Column("time_b", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("started_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["event_id"], ["event.id"]),
        sa.ForeignKeyConstraint(["team_a_id"], ["team.id"]),
        sa.ForeignKeyConstraint(["team_b_id"], ["team.id"]),
        sa.ForeignKeyConstraint(["winner_id"], ["team.id"]),
        sa.UniqueConstraint("event_id", "category_id", "stage", "match_number", name="uq_match_number"),
    )
    op.create_index("ix_match_event_id", "match", ["event_id"])
    op.create_index("ix_match_category_id", "match", ["category_id"])

    op.create_table(
        "categoryresult",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.String(), nullable=False),
        sa.Column("education_level", sa.String(), nullable=False, server_default=""),
        sa.Column("champion_team_id", sa.Integer(), nullable=False),
        sa.Column("runner_up_team_id", sa.Integer(), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["event_id"], ["event.id"]),
        sa.ForeignKeyConstraint(["champion_team_id"], ["team.id"]),
        sa.ForeignKeyConstraint(["runner_up_team_id"], ["team.id"]),
        sa.UniqueConstraint("event_id", "category_id", "education_level", name="uq_category_result"),
    )
    op.create_index("ix_categoryresult_event_id", "categoryresult", ["event_id"])

    op.create_table(
        "qualifierbye",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.String(), nullable=False),
        sa.Column("round", sa.Integer(), nullable=False),
        sa.Column("team_id", sa.Integer(), nullable=False),
        sa.Column("education_level", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["event_id"], ["event.id"]),
        sa.ForeignKeyConstraint(["team_id"], ["team.id"]),
        sa.UniqueConstraint("event_id", "category_id", "round", "team_id", name="uq_qualifier_bye"),
    )
    op.create_index("ix_qualifierbye_event_id", "qualifierbye", ["event_id"])

    op.create_table(
        "advancementhold",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.String(), nullable=False),
        sa.Column("match_id", sa.Integer(), nullable=True),
        sa.Column("detail", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["event_id"], ["event.id"]),
        sa.UniqueConstraint("event_id", "category_id", name="uq_advancement_hold"),
    )
    op.create_index("ix_advancementhold_event_id", "advancementhold", ["event_id"])


def downgrade() -> None:
    op.drop_index("ix_advancementhold_event_id", table_name="advancementhold")
    op.drop_table("advancementhold")
    op.drop_index("ix_qualifierbye_event_id", table_name="qualifierbye")
    op.drop_table("qualifierbye")
    op.drop_index("ix_categoryresult_event_id", table_name="categoryresult")
    op.drop_table("categoryresult")
    op.drop_index("ix_match_category_id", table_name="match")
    op.drop_index("ix_match_event_id", table_name="match")
    op.drop_table("match")
    op.drop_index("ix_team_category_id", table_name="team")
    op.drop_index("ix_team_event_id", table_name="team")
    op.drop_table("team")
    op.drop_table("event")
