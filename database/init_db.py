# database/init_db.py
"""
Inicialização do banco de dados e seed dos dados básicos

- Status do fluxo de aprovação
- Formas de pagamento
- Setores iniciais
- Usuário administrador (com perfil de gerente)
"""

import time
from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError
from sqlalchemy import text
from database.connection import engine, Base, SessionLocal
from auth.models import User
from auth.security import get_password_hash
from config import ADMIN_USERNAME, ADMIN_EMAIL, ADMIN_PASSWORD

# Importa modelos para criar tabelas
from sistemas.banco_horas.models import (
    Setor, Perfil, StatusMovimentacao, FormaPagamento, Movimentacao, MovimentacaoLog, Escala
)

# nome, analise, autorizado, cor
STATUS_PADRAO = [
    ("Pendente", True, False, "#f59e0b"),
    ("Aprovado", False, True, "#10b981"),
    ("Rejeitado", False, False, "#ef4444"),
    ("Cancelado", False, False, "#6b7280"),
]

FORMAS_PAGAMENTO_PADRAO = [
    ("Horas Extras", "Pagamento das horas em dinheiro"),
    ("Banco de Horas", "Horas acumuladas no banco para compensação"),
    ("Folga Compensatória", "Compensação com dia de folga"),
]

SETORES_PADRAO = ["Administração", "Tecnologia", "Recursos Humanos"]


def wait_for_db(max_retries=10, delay=3):
    """Aguarda o banco de dados ficar disponível"""
    for attempt in range(max_retries):
        try:
            # Tenta conectar
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            print("✅ Conexão com banco de dados estabelecida!")
            return True
        except OperationalError as e:
            if attempt < max_retries - 1:
                print(f"⏳ Aguardando banco de dados... tentativa {attempt + 1}/{max_retries}")
                time.sleep(delay)
            else:
                print(f"❌ Não foi possível conectar ao banco após {max_retries} tentativas")
                raise e
    return False


def create_tables():
    """Cria todas as tabelas no banco de dados"""
    Base.metadata.create_all(bind=engine)
    print("✅ Tabelas criadas com sucesso!")


def seed_status(db: Session):
    """Status do fluxo de aprovação (idempotente)"""
    for nome, analise, autorizado, cor in STATUS_PADRAO:
        if not db.query(StatusMovimentacao).filter(StatusMovimentacao.nome == nome).first():
            db.add(StatusMovimentacao(nome=nome, analise=analise, autorizado=autorizado, cor=cor))
            print(f"✅ Status '{nome}' criado")
    db.commit()


def seed_formas_pagamento(db: Session):
    for nome, descricao in FORMAS_PAGAMENTO_PADRAO:
        if not db.query(FormaPagamento).filter(FormaPagamento.nome == nome).first():
            db.add(FormaPagamento(nome=nome, descricao=descricao))
    db.commit()


def seed_setores(db: Session):
    """Setores iniciais, apenas em banco vazio"""
    if db.query(Setor).count() > 0:
        return
    for nome in SETORES_PADRAO:
        db.add(Setor(nome=nome))
    db.commit()
    print(f"✅ {len(SETORES_PADRAO)} setores iniciais criados")


def seed_admin(db: Session):
    """Cria o usuário administrador inicial (e seu perfil) se não existir"""
    admin = db.query(User).filter(User.username == ADMIN_USERNAME).first()

    if not admin:
        admin = User(
            username=ADMIN_USERNAME,
            email=ADMIN_EMAIL,
            first_name="Administrador",
            last_name="do Sistema",
            password_hash=get_password_hash(ADMIN_PASSWORD),
            is_staff=True,
            is_active=True,
        )
        db.add(admin)
        db.flush()
        print(f"✅ Usuário admin '{ADMIN_USERNAME}' criado com sucesso!")
    else:
        print(f"ℹ️  Usuário admin '{ADMIN_USERNAME}' já existe.")

    if admin.perfil is None:
        setor = db.query(Setor).filter(Setor.nome == "Administração").first()
        db.add(Perfil(
            usuario_id=admin.id,
            nome="Administrador do Sistema",
            gerente=True,
            setor_id=setor.id if setor else None,
        ))
        print("✅ Perfil do administrador criado")
    db.commit()


def seed_dados_iniciais(db: Session):
    """Todos os seeds, na ordem de dependência"""
    seed_status(db)
    seed_formas_pagamento(db)
    seed_setores(db)
    seed_admin(db)


def init_database():
    """Inicializa o banco de dados completo"""
    print("🔧 Inicializando banco de dados...")
    wait_for_db()  # Aguarda o banco ficar disponível
    create_tables()
    db = SessionLocal()
    try:
        seed_dados_iniciais(db)
    finally:
        db.close()
    print("✅ Banco de dados inicializado!")


if __name__ == "__main__":
    init_database()
