# database/connection.py
"""
Conexão com o banco de dados (SQLAlchemy 2.0).

PostgreSQL em produção, SQLite em desenvolvimento e testes.
Cada requisição recebe uma sessão própria via get_db().
"""

from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from config import DATABASE_URL


def criar_engine(url: str) -> Engine:
    """Cria o engine com as opções adequadas ao banco informado."""
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(
            url,
            connect_args={"check_same_thread": False},  # Necessário para SQLite
            echo=False
        )
        ativar_chaves_estrangeiras(sqlite_engine)
        return sqlite_engine

    return create_engine(
        url,
        echo=False,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,  # Recicla conexões a cada 30 min
        pool_pre_ping=True  # Verifica conexão antes de usar
    )


def ativar_chaves_estrangeiras(sqlite_engine: Engine) -> None:
    """SQLite só respeita FOREIGN KEY com o pragma ligado em cada conexão."""

    @event.listens_for(sqlite_engine, "connect")
    def _pragma_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = criar_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base para os models
Base = declarative_base()


def get_db() -> Generator:
    """
    Dependency que fornece uma sessão do banco de dados.
    Uso: db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
