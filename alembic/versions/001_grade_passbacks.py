"""grade passbacks

Revision ID: 001_grade_passbacks
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_grade_passbacks'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # grade_passbacks - one row per submission token, pending until the platform acknowledges the score
    op.create_table(
        'grade_passbacks',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('submission_token', sa.String(255), nullable=False),
        sa.Column('grade_target_ref', sa.Text(), nullable=False),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('score', sa.Float(), nullable=False),
        sa.Column('max_score', sa.Float(), nullable=False),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('submission_token', name='unique_passback_submission_token')
    )
    
    op.create_index('idx_grade_passbacks_user', 'grade_passbacks', ['user_id'])


def downgrade() -> None:
    op.drop_index('idx_grade_passbacks_user', table_name='grade_passbacks')
    op.drop_table('grade_passbacks')
