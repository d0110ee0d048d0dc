# tests/conftest.py
"""
Configuração global do pytest para o Banco de Horas.

Cada teste recebe um SQLite em memória próprio (StaticPool), com os dados
iniciais (status, formas de pagamento, setores e admin) já gravados.
A aplicação usa esse banco via dependency_overrides[get_db].
"""

import sys
import os
from datetime import date

# Adiciona o diretório raiz do projeto ao PYTHONPATH
# para que os imports funcionem corretamente nos testes
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

os.environ.setdefault("ENV", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auth.models import User
from auth.security import create_access_token, get_password_hash
from config import ADMIN_USERNAME
from database.connection import Base, get_db, ativar_chaves_estrangeiras
from database.init_db import seed_dados_iniciais
from sistemas.banco_horas.models import Perfil, Setor
from sistemas.banco_horas.services import aprovar_movimentacao, criar_movimentacao

SENHA_PADRAO_TESTES = "senha-forte-42"

# PNG 1x1 transparente
PNG_1PX = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
    b"\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


# ==================================================
# BANCO DE DADOS
# ==================================================

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    ativar_chaves_estrangeiras(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    """Sessão com os dados iniciais gravados."""
    session = session_factory()
    seed_dados_iniciais(session)
    yield session
    session.close()


# ==================================================
# USUÁRIOS
# ==================================================

def criar_usuario(db, username, is_staff=False, gerente=False, setor_nome=None, **perfil_kwargs):
    """Cria usuário + perfil prontos para uso nos testes."""
    user = User(
        username=username,
        email=f"{username}@empresa.com",
        first_name=username.capitalize(),
        last_name="Teste",
        password_hash=get_password_hash(SENHA_PADRAO_TESTES),
        is_staff=is_staff,
        is_active=True,
    )
    db.add(user)
    db.flush()

    setor = db.query(Setor).filter(Setor.nome == setor_nome).first() if setor_nome else None
    db.add(Perfil(
        usuario_id=user.id,
        nome=user.full_name,
        gerente=gerente,
        setor_id=setor.id if setor else None,
        **perfil_kwargs
    ))
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin(db):
    return db.query(User).filter(User.username == ADMIN_USERNAME).first()


@pytest.fixture
def colaborador(db):
    return criar_usuario(db, "maria", setor_nome="Tecnologia", ch_primeira="08:00", ch_segunda="17:00")


@pytest.fixture
def outro_colaborador(db):
    return criar_usuario(db, "joao", setor_nome="Tecnologia")


def lancar(db, user, hora_total="02:00", entrada=True, motivo="Plantão", data_mov=None, aprovar_com=None):
    """Cria uma movimentação (opcionalmente já aprovada)."""
    resultado = criar_movimentacao(
        db,
        colaborador_id=user.perfil.id,
        data_movimentacao=data_mov or date(2026, 3, 10),
        motivo=motivo,
        entrada=entrada,
        hora_total=hora_total,
        usuario_id=user.id,
    )
    mov = resultado.movimentacao
    if aprovar_com is not None:
        mov = aprovar_movimentacao(db, mov.id, aprovar_com)
    return mov


# ==================================================
# CLIENTE HTTP
# ==================================================

@pytest.fixture
def client(session_factory, db):
    """TestClient sem lifespan (o banco já vem preparado pela fixture db)."""
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app, raise_server_exceptions=False)
    yield test_client
    app.dependency_overrides.clear()


def autenticar(client, user):
    """Grava o JWT do usuário no cookie do cliente."""
    token = create_access_token({"sub": user.username, "user_id": user.id, "is_staff": user.is_staff})
    client.cookies.set("access_token", token)
    return token


@pytest.fixture
def admin_client(client, admin):
    autenticar(client, admin)
    return client


@pytest.fixture
def colaborador_client(client, colaborador):
    autenticar(client, colaborador)
    return client
