from alembic import op
import sqlalchemy as sa

revision='20251019120000'
down_revision=None

def upgrade():
    op.create_table('users', sa.Column('id', sa.String(64), primary_key=True), sa.Column('name', sa.String(120), nullable=False), sa.Column('email', sa.String(255), nullable=False, unique=True), sa.Column('password_hash', sa.String(255), nullable=False), sa.Column('role', sa.String(32), nullable=False, server_default='farmer'), sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')), sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')))
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_table('refresh_tokens', sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True), sa.Column('user_id', sa.String(64), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False), sa.Column('token_hash', sa.String(64), nullable=False, unique=True), sa.Column('expires_at', sa.DateTime(), nullable=False), sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')))
    op.create_index('ix_refresh_tokens_user_id', 'refresh_tokens', ['user_id'])

def downgrade():
    op.drop_table('refresh_tokens'); op.drop_table('users')
