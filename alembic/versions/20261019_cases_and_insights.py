"""Create cases and insights tables

Revision ID: 001_cases_insights
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_cases_insights'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create cases and insights tables matching CaseDB / InsightDB."""
    op.create_table(
        'cases',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('patient_name', sa.Text(), nullable=False),
        sa.Column('patient_age', sa.Integer(), nullable=True),
        sa.Column('clinical_notes', sa.Text(), nullable=True),
        sa.Column('transcript', sa.Text(), nullable=True),
        sa.Column('audio_url', sa.Text(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('pending', 'analyzing', 'completed', 'failed', name='casestatus'),
            nullable=False,
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_cases_status'), 'cases', ['status'], unique=False)
    op.create_index(op.f('ix_cases_created_at'), 'cases', ['created_at'], unique=False)

    op.create_table(
        'insights',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('case_id', sa.Integer(), nullable=False),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('blind_spots', sa.JSON(), nullable=False),
        sa.Column('questions', sa.JSON(), nullable=False),
        sa.Column('original_language', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['case_id'], ['cases.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('case_id', name='uq_insights_case_id')
    )
    op.create_index(op.f('ix_insights_case_id'), 'insights', ['case_id'], unique=False)


def downgrade() -> None:
    """Drop insights, then cases."""
    op.drop_index(op.f('ix_insights_case_id'), table_name='insights')
    op.drop_table('insights')

    op.drop_index(op.f('ix_cases_created_at'), table_name='cases')
    op.drop_index(op.f('ix_cases_status'), table_name='cases')
    op.drop_table('cases')

    # Drop enum type (PostgreSQL only)
    # SQLite will ignore this
    sa.Enum(name='casestatus').drop(op.get_bind(), checkfirst=True)
