"""criar tabelas do banco de horas

Revision ID: 3b1f0c9d2a11
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3b1f0c9d2a11'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Cria usuários, setores, perfis, status, formas de pagamento, movimentações, logs e escalas."""
    op.create_table('usuarios',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=150), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=150), nullable=True),
        sa.Column('last_name', sa.String(length=150), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_staff', sa.Boolean(), nullable=False),
        sa.Column('force_password_change', sa.Boolean(), nullable=False),
        sa.Column('reset_password_token', sa.String(length=128), nullable=True),
        sa.Column('reset_password_expires', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_usuarios_id', 'usuarios', ['id'], unique=False)
    op.create_index('ix_usuarios_username', 'usuarios', ['username'], unique=True)
    op.create_index('ix_usuarios_email', 'usuarios', ['email'], unique=True)
    op.create_index('ix_usuarios_reset_password_token', 'usuarios', ['reset_password_token'], unique=False)

    op.create_table('setores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nome', sa.String(length=100), nullable=False),
        sa.Column('descricao', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('nome')
    )
    op.create_index('ix_setores_id', 'setores', ['id'], unique=False)

    op.create_table('status_movimentacao',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nome', sa.String(length=50), nullable=False),
        sa.Column('analise', sa.Boolean(), nullable=False),
        sa.Column('autorizado', sa.Boolean(), nullable=False),
        sa.Column('cor', sa.String(length=20), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('nome')
    )
    op.create_index('ix_status_movimentacao_id', 'status_movimentacao', ['id'], unique=False)

    op.create_table('formas_pagamento',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nome', sa.String(length=100), nullable=False),
        sa.Column('descricao', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('nome')
    )
    op.create_index('ix_formas_pagamento_id', 'formas_pagamento', ['id'], unique=False)

    op.create_table('perfis',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=True),
        sa.Column('setor_id', sa.Integer(), nullable=True),
        sa.Column('nome', sa.String(length=200), nullable=False),
        sa.Column('gerente', sa.Boolean(), nullable=False),
        sa.Column('funcao', sa.String(length=100), nullable=True),
        sa.Column('ch_primeira', sa.String(length=5), nullable=True),
        sa.Column('ch_segunda', sa.String(length=5), nullable=True),
        sa.Column('foto_url', sa.String(length=255), nullable=True),
        sa.Column('data_nascimento', sa.Date(), nullable=True),
        sa.Column('sexo', sa.String(length=20), nullable=True),
        sa.Column('cpf', sa.String(length=14), nullable=True),
        sa.Column('telefone', sa.String(length=20), nullable=True),
        sa.Column('linkedin', sa.String(length=255), nullable=True),
        sa.Column('cep', sa.String(length=9), nullable=True),
        sa.Column('logradouro', sa.String(length=255), nullable=True),
        sa.Column('numero', sa.String(length=20), nullable=True),
        sa.Column('bairro', sa.String(length=100), nullable=True),
        sa.Column('cidade', sa.String(length=100), nullable=True),
        sa.Column('estado', sa.String(length=2), nullable=True),
        sa.Column('ordem_escala', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['setor_id'], ['setores.id'], ),
        sa.ForeignKeyConstraint(['usuario_id'], ['usuarios.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('usuario_id')
    )
    op.create_index('ix_perfis_id', 'perfis', ['id'], unique=False)
    op.create_index('ix_perfis_nome', 'perfis', ['nome'], unique=False)
    op.create_index('ix_perfis_setor_id', 'perfis', ['setor_id'], unique=False)

    op.create_table('movimentacoes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('colaborador_id', sa.Integer(), nullable=False),
        sa.Column('data_movimentacao', sa.Date(), nullable=False),
        sa.Column('hora_inicial', sa.String(length=5), nullable=True),
        sa.Column('hora_final', sa.String(length=5), nullable=True),
        sa.Column('hora_total', sa.String(length=8), nullable=False),
        sa.Column('motivo', sa.Text(), nullable=False),
        sa.Column('entrada', sa.Boolean(), nullable=False),
        sa.Column('status_id', sa.Integer(), nullable=False),
        sa.Column('forma_pagamento_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['colaborador_id'], ['perfis.id'], ),
        sa.ForeignKeyConstraint(['forma_pagamento_id'], ['formas_pagamento.id'], ),
        sa.ForeignKeyConstraint(['status_id'], ['status_movimentacao.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_movimentacoes_id', 'movimentacoes', ['id'], unique=False)
    op.create_index('ix_movimentacoes_colaborador_id', 'movimentacoes', ['colaborador_id'], unique=False)
    op.create_index('ix_movimentacoes_data_movimentacao', 'movimentacoes', ['data_movimentacao'], unique=False)
    op.create_index('ix_movimentacoes_status_id', 'movimentacoes', ['status_id'], unique=False)
    op.create_index('ix_movimentacoes_created_at', 'movimentacoes', ['created_at'], unique=False)
    op.create_index('ix_movimentacoes_duplicidade', 'movimentacoes', ['colaborador_id', 'data_movimentacao', 'created_at'], unique=False)

    op.create_table('movimentacoes_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('movimentacao_id', sa.Integer(), nullable=False),
        sa.Column('usuario_id', sa.Integer(), nullable=True),
        sa.Column('acao', sa.String(length=50), nullable=False),
        sa.Column('detalhes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['movimentacao_id'], ['movimentacoes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['usuario_id'], ['usuarios.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_movimentacoes_logs_id', 'movimentacoes_logs', ['id'], unique=False)
    op.create_index('ix_movimentacoes_logs_movimentacao_id', 'movimentacoes_logs', ['movimentacao_id'], unique=False)
    op.create_index('ix_movimentacoes_logs_created_at', 'movimentacoes_logs', ['created_at'], unique=False)

    op.create_table('escalas',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('perfil_id', sa.Integer(), nullable=False),
        sa.Column('data', sa.Date(), nullable=False),
        sa.Column('tipo_escala', sa.String(length=50), nullable=False),
        sa.Column('hora_inicio', sa.String(length=5), nullable=True),
        sa.Column('hora_fim', sa.String(length=5), nullable=True),
        sa.Column('observacoes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['perfil_id'], ['perfis.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('perfil_id', 'data', name='uq_escalas_perfil_data')
    )
    op.create_index('ix_escalas_id', 'escalas', ['id'], unique=False)
    op.create_index('ix_escalas_perfil_id', 'escalas', ['perfil_id'], unique=False)
    op.create_index('ix_escalas_data', 'escalas', ['data'], unique=False)


def downgrade() -> None:
    """Remove as tabelas na ordem inversa das dependências."""
    op.drop_table('escalas')
    op.drop_table('movimentacoes_logs')
    op.drop_table('movimentacoes')
    op.drop_table('perfis')
    op.drop_table('formas_pagamento')
    op.drop_table('status_movimentacao')
    op.drop_table('setores')
    op.drop_table('usuarios')
