"""add clients, workers and card assignment fields

Revision ID: e52f0d8a61c4
Revises: 7c1e4a9b2d30
Create Date: 2026-10-19 11:47:03.550912

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'e52f0d8a61c4'
down_revision = '7c1e4a9b2d30'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('clients',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('email', sa.String(length=255), nullable=True),
    sa.Column('phone', sa.String(length=50), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('email')
    )
    op.create_table('workers',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('email', sa.String(length=255), nullable=True),
    sa.Column('phone', sa.String(length=50), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('email')
    )
    op.create_table('card_workers',
    sa.Column('card_id', sa.String(length=36), nullable=False),
    sa.Column('worker_id', sa.String(length=36), nullable=False),
    sa.ForeignKeyConstraint(['card_id'], ['cards.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['worker_id'], ['workers.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('card_id', 'worker_id')
    )
    with op.batch_alter_table('cards', schema=None) as batch_op:
        batch_op.add_column(sa.Column('client_id', sa.String(length=36), nullable=True))
        batch_op.add_column(sa.Column('vehicle', sa.String(length=255), nullable=True))
        batch_op.add_column(sa.Column('commands', sa.Text(), nullable=True))
        batch_op.add_column(sa.Column('start_at', sa.DateTime(), nullable=True))
        batch_op.create_foreign_key('fk_cards_client_id_clients', 'clients', ['client_id'], ['id'], ondelete='SET NULL')


def downgrade():
    with op.batch_alter_table('cards', schema=None) as batch_op:
        batch_op.drop_constraint('fk_cards_client_id_clients', type_='foreignkey')
        batch_op.drop_column('start_at')
        batch_op.drop_column('commands')
        batch_op.drop_column('vehicle')
        batch_op.drop_column('client_id')

    op.drop_table('card_workers')
    op.drop_table('workers')
    op.drop_table('clients')
