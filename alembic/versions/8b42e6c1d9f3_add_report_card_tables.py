"""add report card tables

Revision ID: 8b42e6c1d9f3
Revises: 3f1c9a7d2b10
Create Date: 2026-10-19 14:37:52.601934

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b42e6c1d9f3'
down_revision: Union[str, Sequence[str], None] = '3f1c9a7d2b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'config_holistic_metrics',
        sa.Column('metric_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('school_id', sa.Integer(), nullable=False),
        sa.Column('metric_type', sa.String(), nullable=False),
        sa.Column('metric_name', sa.String(), nullable=False),
    )
    op.create_index('ix_config_holistic_metrics_school_id', 'config_holistic_metrics', ['school_id'])

    op.create_table(
        'reports_holistic_feedback',
        sa.Column('feedback_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.student_id'), nullable=False),
        sa.Column('school_id', sa.Integer(), nullable=False),
        sa.Column('term', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column(
            'metric_id', sa.Integer(),
            sa.ForeignKey('config_holistic_metrics.metric_id'), nullable=False,
        ),
        sa.Column('rating', sa.String(), nullable=True),
        sa.UniqueConstraint('student_id', 'metric_id', 'term', 'year', name='uq_holistic_feedback'),
    )

    op.create_table(
        'results_header',
        sa.Column('header_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.student_id'), nullable=False),
        sa.Column('school_id', sa.Integer(), nullable=False),
        sa.Column('subject_id', sa.Integer(), sa.ForeignKey('config_subjects.subject_id'), nullable=False),
        sa.Column('term', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.UniqueConstraint('student_id', 'subject_id', 'term', 'year', name='uq_results_header'),
    )

    op.create_table(
        'reports_summary',
        sa.Column('summary_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'header_id', sa.Integer(),
            sa.ForeignKey('results_header.header_id'), nullable=False, unique=True,
        ),
        sa.Column('total_percentage_score', sa.Float(), nullable=False),
        sa.Column(
            'final_grade_ref', sa.Integer(),
            sa.ForeignKey('config_grading_scales.scale_id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column('weighted_formative_score', sa.Float(), nullable=True),
        sa.Column('weighted_summative_score', sa.Float(), nullable=True),
        sa.Column('class_teacher_comment', sa.Text(), nullable=True),
        sa.Column('head_teacher_comment', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('reports_summary')
    op.drop_table('results_header')
    op.drop_table('reports_holistic_feedback')
    op.drop_index('ix_config_holistic_metrics_school_id', table_name='config_holistic_metrics')
    op.drop_table('config_holistic_metrics')
