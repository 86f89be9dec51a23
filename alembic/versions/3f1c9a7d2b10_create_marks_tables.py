"""create marks and grading tables

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 10:02:11.418205

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'students',
        sa.Column('student_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('school_id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('class_name', sa.String(), nullable=False),
        sa.Column('reg_number', sa.String(), nullable=True),
        sa.Column('lin_number', sa.String(), nullable=True),
    )
    op.create_index('ix_students_school_id', 'students', ['school_id'])

    op.create_table(
        'config_subjects',
        sa.Column('subject_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('school_id', sa.Integer(), nullable=False),
        sa.Column('subject_name', sa.String(), nullable=False),
        sa.Column('school_level', sa.String(), nullable=False),
        sa.Column(
            'subject_type',
            sa.Enum('Compulsory', 'Elective', 'International-Custom', name='subjecttype'),
            nullable=False,
        ),
        sa.Column('ncdc_reference_name', sa.String(), nullable=True),
        sa.Column('max_selections_allowed', sa.Integer(), nullable=True),
    )
    op.create_index('ix_config_subjects_school_id', 'config_subjects', ['school_id'])

    op.create_table(
        'config_grading_scales',
        sa.Column('scale_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('school_id', sa.Integer(), nullable=False),
        sa.Column('grade_letter', sa.String(), nullable=False),
        sa.Column('descriptor', sa.String(), nullable=True),
        sa.Column('min_score_percent', sa.Float(), nullable=False),
        sa.UniqueConstraint('school_id', 'min_score_percent', name='uq_grading_scale_threshold'),
    )
    op.create_index('ix_config_grading_scales_school_id', 'config_grading_scales', ['school_id'])

    op.create_table(
        'config_school_settings',
        sa.Column('setting_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('school_id', sa.Integer(), nullable=False, unique=True),
        sa.Column(
            'curriculum_type',
            sa.Enum('Nursery', 'Primary-Local', 'Secondary-LSC', 'International', name='curriculumtype'),
            nullable=False,
        ),
        sa.Column('grading_scale_ref', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    )

    op.create_table(
        'config_exam_sets',
        sa.Column('exam_set_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('school_id', sa.Integer(), nullable=False),
        sa.Column('set_name', sa.String(), nullable=False),
        sa.Column('class_level', sa.String(), nullable=False),
        sa.Column('term', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column(
            'assessment_type',
            sa.Enum('Formative', 'Summative', 'Mixed', name='assessmenttype'),
            nullable=False,
        ),
    )
    op.create_index('ix_config_exam_sets_school_id', 'config_exam_sets', ['school_id'])

    op.create_table(
        'config_assessment_elements',
        sa.Column('element_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('school_id', sa.Integer(), nullable=False),
        sa.Column('subject_id', sa.Integer(), sa.ForeignKey('config_subjects.subject_id'), nullable=False),
        sa.Column('exam_set_id', sa.Integer(), sa.ForeignKey('config_exam_sets.exam_set_id'), nullable=False),
        sa.Column('element_name', sa.String(), nullable=False),
        sa.Column('max_score', sa.Float(), nullable=False),
        sa.Column('contributing_weight_percent', sa.Float(), nullable=False),
    )

    op.create_table(
        'results_exam_entries',
        sa.Column('exam_entry_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.student_id'), nullable=False),
        sa.Column('subject_id', sa.Integer(), sa.ForeignKey('config_subjects.subject_id'), nullable=False),
        sa.Column('exam_set_id', sa.Integer(), sa.ForeignKey('config_exam_sets.exam_set_id'), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.UniqueConstraint('student_id', 'subject_id', 'exam_set_id', name='uq_exam_entry'),
    )

    op.create_table(
        'results_entry',
        sa.Column('entry_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'exam_entry_id', sa.Integer(),
            sa.ForeignKey('results_exam_entries.exam_entry_id'), nullable=False,
        ),
        sa.Column(
            'element_id', sa.Integer(),
            sa.ForeignKey('config_assessment_elements.element_id'), nullable=False,
        ),
        sa.Column('score_obtained', sa.Float(), nullable=False),
        sa.Column('max_score_at_entry', sa.Float(), nullable=False),
        sa.Column('entered_by_user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.UniqueConstraint('exam_entry_id', 'element_id', name='uq_result_entry'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('results_entry')
    op.drop_table('results_exam_entries')
    op.drop_table('config_assessment_elements')
    op.drop_index('ix_config_exam_sets_school_id', table_name='config_exam_sets')
    op.drop_table('config_exam_sets')
    op.drop_table('config_school_settings')
    op.drop_index('ix_config_grading_scales_school_id', table_name='config_grading_scales')
    op.drop_table('config_grading_scales')
    op.drop_index('ix_config_subjects_school_id', table_name='config_subjects')
    op.drop_table('config_subjects')
    op.drop_index('ix_students_school_id', table_name='students')
    op.drop_table('students')
    sa.Enum(name='assessmenttype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='curriculumtype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='subjecttype').drop(op.get_bind(), checkfirst=True)
