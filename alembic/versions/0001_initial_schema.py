from alembic import op
import sqlalchemy as sa

revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'teams',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(60), nullable=False),
        sa.Column('admin_token', sa.String(64), nullable=False),
        sa.Column('admin_email', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_teams_slug', 'teams', ['slug'], unique=True)
    op.create_index('ix_teams_admin_token', 'teams', ['admin_token'], unique=True)
    op.create_index('ix_teams_admin_email', 'teams', ['admin_email'])

    op.create_table(
        'team_settings',
        sa.Column('team_id', sa.Uuid(), sa.ForeignKey('teams.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('cadence', sa.String(10), nullable=False, server_default='biweekly'),
        sa.Column('scale_max', sa.Integer, nullable=False, server_default='3'),
        sa.Column('min_responses_to_show', sa.Integer, nullable=False, server_default='4'),
        sa.Column('allow_free_text', sa.Boolean, nullable=False, server_default=sa.true()),
    )

    op.create_table(
        'question_bank',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('team_id', sa.Uuid(), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('text', sa.Text, nullable=False),
        sa.Column('category', sa.String(40), nullable=False, server_default='general'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_question_bank_team_id', 'question_bank', ['team_id'])

    op.create_table(
        'question_set',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('team_id', sa.Uuid(), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('is_default', sa.Boolean, nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_question_set_team_id', 'question_set', ['team_id'])

    op.create_table(
        'question_set_item',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('question_set_id', sa.Uuid(), sa.ForeignKey('question_set.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_id', sa.Uuid(), sa.ForeignKey('question_bank.id'), nullable=False),
        sa.Column('position', sa.Integer, nullable=False),
        sa.Column('kind', sa.String(20), nullable=False),
        sa.CheckConstraint("kind IN ('fixed','rotating_pool')", name='ck_question_set_item_kind'),
    )
    op.create_index('ix_question_set_item_question_set_id', 'question_set_item', ['question_set_id'])
    op.create_index('ix_question_set_item_question_id', 'question_set_item', ['question_id'])

    op.create_table(
        'rounds',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('team_id', sa.Uuid(), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_set_id', sa.Uuid(), sa.ForeignKey('question_set.id', ondelete='SET NULL'), nullable=True),
        sa.Column('token', sa.String(32), nullable=False),
        sa.Column('status', sa.String(10), nullable=False, server_default=sa.text("'open'")),
        sa.Column('scale_max', sa.Integer, nullable=False),
        sa.Column('opens_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('closes_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("status IN ('open','closed')", name='ck_rounds_status'),
    )
    op.create_index('ix_rounds_team_id', 'rounds', ['team_id'])
    op.create_index('ix_rounds_token', 'rounds', ['token'], unique=True)
    op.create_index('ix_rounds_status', 'rounds', ['status'])
    op.create_index('ix_rounds_created_at', 'rounds', ['created_at'])

    op.create_table(
        'round_questions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('round_id', sa.Uuid(), sa.ForeignKey('rounds.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_id', sa.Uuid(), sa.ForeignKey('question_bank.id'), nullable=False),
        sa.Column('kind', sa.String(10), nullable=False),
        sa.Column('position', sa.Integer, nullable=False),
        sa.Column('question_text', sa.Text, nullable=False, server_default=sa.text("''")),
    )
    op.create_index('ix_round_questions_round_id', 'round_questions', ['round_id'])
    op.create_index('ix_round_questions_question_id', 'round_questions', ['question_id'])

    op.create_table(
        'submissions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('round_id', sa.Uuid(), sa.ForeignKey('rounds.id', ondelete='CASCADE'), nullable=False),
        sa.Column('client_hash', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_submissions_round_id', 'submissions', ['round_id'])

    op.create_table(
        'answers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('submission_id', sa.Uuid(), sa.ForeignKey('submissions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('round_question_id', sa.Uuid(), sa.ForeignKey('round_questions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('value', sa.Integer, nullable=False),
    )
    op.create_index('ix_answers_submission_id', 'answers', ['submission_id'])
    op.create_index('ix_answers_round_question_id', 'answers', ['round_question_id'])

    op.create_table(
        'free_text',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('submission_id', sa.Uuid(), sa.ForeignKey('submissions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('text', sa.Text, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_free_text_submission_id', 'free_text', ['submission_id'])

def downgrade():
    for table in ('free_text', 'answers', 'submissions', 'round_questions', 'rounds',
                  'question_set_item', 'question_set', 'question_bank', 'team_settings', 'teams'):
        op.drop_table(table)
