"""Add (group, position) indexes for the bounded position shifts.

Revision ID: add_position_indexes
Revises: e52f0d8a61c4
Create Date: 2026-10-19

"""

from alembic import op


revision = "add_position_indexes"
down_revision = "e52f0d8a61c4"
branch_labels = None
depends_on = None


def upgrade():
    # Every move runs "UPDATE ... WHERE <group> = ? AND position BETWEEN ..."
    op.create_index("ix_lists_board_id_position", "lists", ["board_id", "position"])
    op.create_index("ix_cards_list_id_position", "cards", ["list_id", "position"])


def downgrade():
    op.drop_index("ix_cards_list_id_position", table_name="cards")
    op.drop_index("ix_lists_board_id_position", table_name="lists")
