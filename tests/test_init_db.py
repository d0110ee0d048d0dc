# tests/test_init_db.py
"""
Testes do seed inicial (database/init_db.py)
"""

from auth.models import User
from auth.security import verify_password
from config import ADMIN_PASSWORD, ADMIN_USERNAME
from database.init_db import (
    FORMAS_PAGAMENTO_PADRAO,
    SETORES_PADRAO,
    STATUS_PADRAO,
    seed_dados_iniciais,
)
from sistemas.banco_horas.models import FormaPagamento, Perfil, Setor, StatusMovimentacao


class TestSeed:

    def test_status_do_fluxo(self, db):
        status = {s.nome: s for s in db.query(StatusMovimentacao).all()}

        assert set(status) == {nome for nome, *_ in STATUS_PADRAO}
        assert status["Pendente"].analise is True
        assert status["Aprovado"].autorizado is True
        assert not status["Rejeitado"].analise and not status["Rejeitado"].autorizado

    def test_admin_com_perfil_de_gerente(self, db):
        admin = db.query(User).filter(User.username == ADMIN_USERNAME).one()

        assert admin.is_staff is True
        assert verify_password(ADMIN_PASSWORD, admin.password_hash)
        assert admin.perfil.gerente is True
        assert admin.perfil.setor.nome == "Administração"

    def test_idempotente(self, db):
        seed_dados_iniciais(db)
        seed_dados_iniciais(db)

        assert db.query(StatusMovimentacao).count() == len(STATUS_PADRAO)
        assert db.query(FormaPagamento).count() == len(FORMAS_PAGAMENTO_PADRAO)
        assert db.query(Setor).count() == len(SETORES_PADRAO)
        assert db.query(User).count() == 1
        assert db.query(Perfil).count() == 1

    def test_setores_so_em_banco_vazio(self, db):
        setor = db.query(Setor).filter(Setor.nome == "Recursos Humanos").one()
        db.delete(setor)
        db.commit()

        seed_dados_iniciais(db)

        assert db.query(Setor).filter(Setor.nome == "Recursos Humanos").first() is None
