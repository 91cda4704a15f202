"""Initial migration - create all tables

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

Creates all database tables for the EduTest Platform:
- tests, questions, answer_options: generic test bank
- attempts, answers: graded submissions of generic tests
- suspend_test_answers: in-progress drafts of generic tests
- group_memberships: which users belong to which groups
- sat_tests, sat_questions, sat_answer_options: sectioned SAT test bank
- sat_attempts, sat_answers: graded submissions of SAT tests
- deadlines: per-group SAT windows

Also creates indexes for common query patterns.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Tests Table ───────────────────────────────────────────
    op.create_table(
        'tests',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('group_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('time_open', sa.DateTime(), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('max_attempts', sa.Integer(), nullable=True),
    )

    # ── Questions / Answer Options ────────────────────────────
    op.create_table(
        'questions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('test_id', sa.Integer(),
                  sa.ForeignKey('tests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('hint', sa.Text(), nullable=True),
        sa.Column('image', sa.Text(), nullable=True),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.Column('explanation_image', sa.Text(), nullable=True),
        sa.Column('question_type', sa.Text(), nullable=False, server_default='single'),
    )
    op.create_index('ix_questions_test_id', 'questions', ['test_id'])

    op.create_table(
        'answer_options',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('question_id', sa.Integer(),
                  sa.ForeignKey('questions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('option_text', sa.Text(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_answer_options_question_id', 'answer_options', ['question_id'])

    # ── Attempts / Answers ────────────────────────────────────
    op.create_table(
        'attempts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('test_id', sa.Integer(),
                  sa.ForeignKey('tests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('attempt_number', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.UniqueConstraint('test_id', 'user_id', 'attempt_number',
                            name='uq_attempts_test_user_number'),
    )
    op.create_index('ix_attempts_user_id', 'attempts', ['user_id'])

    op.create_table(
        'answers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('attempt_id', sa.Integer(),
                  sa.ForeignKey('attempts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_id', sa.Integer(),
                  sa.ForeignKey('questions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('student_answer', sa.Text(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('attempt_id', 'question_id', name='uq_answers_attempt_question'),
    )

    # ── Suspended Drafts ──────────────────────────────────────
    op.create_table(
        'suspend_test_answers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('test_id', sa.Integer(),
                  sa.ForeignKey('tests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_id', sa.Integer(),
                  sa.ForeignKey('questions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('student_answer', sa.Text(), nullable=True),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('suspend_time', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('user_id', 'test_id', 'question_id',
                            name='uq_suspend_user_test_question'),
    )
    op.create_index('ix_suspend_user_test', 'suspend_test_answers', ['user_id', 'test_id'])

    # ── Group Memberships ─────────────────────────────────────
    op.create_table(
        'group_memberships',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.UniqueConstraint('group_id', 'user_id', name='uq_group_memberships_group_user'),
    )

    # ── SAT Tests ─────────────────────────────────────────────
    op.create_table(
        'sat_tests',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('group_id', sa.Integer(), nullable=True),
        sa.Column('opens', sa.DateTime(), nullable=True),
        sa.Column('due', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'sat_questions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('test_id', sa.Integer(),
                  sa.ForeignKey('sat_tests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('section', sa.Text(), nullable=True),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('hint', sa.Text(), nullable=True),
        sa.Column('image', sa.Text(), nullable=True),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.Column('explanation_image', sa.Text(), nullable=True),
        sa.Column('question_type', sa.Text(), nullable=False, server_default='single'),
        sa.CheckConstraint("section IS NULL OR section <> 'totalScore'",
                           name='ck_sat_questions_section_not_total'),
    )
    op.create_index('ix_sat_questions_test_id', 'sat_questions', ['test_id'])

    op.create_table(
        'sat_answer_options',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('question_id', sa.Integer(),
                  sa.ForeignKey('sat_questions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('option_text', sa.Text(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_sat_answer_options_question_id', 'sat_answer_options', ['question_id'])

    # ── SAT Attempts / Answers ────────────────────────────────
    op.create_table(
        'sat_attempts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('test_id', sa.Integer(),
                  sa.ForeignKey('sat_tests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False, server_default='completed'),
        sa.Column('total_score', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_index('ix_sat_attempts_user_id', 'sat_attempts', ['user_id'])
    op.create_index('ix_sat_attempts_test_id', 'sat_attempts', ['test_id'])

    op.create_table(
        'sat_answers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('attempt_id', sa.Integer(),
                  sa.ForeignKey('sat_attempts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_id', sa.Integer(),
                  sa.ForeignKey('sat_questions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('selected_option', sa.Text(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('attempt_id', 'question_id', name='uq_sat_answers_attempt_question'),
    )

    # ── Deadlines ─────────────────────────────────────────────
    op.create_table(
        'deadlines',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('test_id', sa.Integer(),
                  sa.ForeignKey('sat_tests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.Column('open', sa.DateTime(), nullable=False),
        sa.Column('due', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('test_id', 'group_id', name='uq_deadlines_test_group'),
        sa.CheckConstraint('due > open', name='ck_deadlines_due_after_open'),
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table('deadlines')
    op.drop_table('sat_answers')
    op.drop_index('ix_sat_attempts_test_id', table_name='sat_attempts')
    op.drop_index('ix_sat_attempts_user_id', table_name='sat_attempts')
    op.drop_table('sat_attempts')
    op.drop_index('ix_sat_answer_options_question_id', table_name='sat_answer_options')
    op.drop_table('sat_answer_options')
    op.drop_index('ix_sat_questions_test_id', table_name='sat_questions')
    op.drop_table('sat_questions')
    op.drop_table('sat_tests')
    op.drop_table('group_memberships')
    op.drop_index('ix_suspend_user_test', table_name='suspend_test_answers')
    op.drop_table('suspend_test_answers')
    op.drop_table('answers')
    op.drop_index('ix_attempts_user_id', table_name='attempts')
    op.drop_table('attempts')
    op.drop_index('ix_answer_options_question_id', table_name='answer_options')
    op.drop_table('answer_options')
    op.drop_index('ix_questions_test_id', table_name='questions')
    op.drop_table('questions')
    op.drop_table('tests')
