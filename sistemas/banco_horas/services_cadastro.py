# sistemas/banco_horas/services_cadastro.py
"""
Cadastros: setores, perfis de colaboradores e busca por nome.
"""

import logging
from typing import Optional, List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from auth.models import User
from auth.security import get_password_hash
from config import DEFAULT_USER_PASSWORD
from utils.validators import (
    normalize_email, validate_email, validate_cpf, validate_telefone, validate_cep,
    format_cpf, parse_iso_date
)

from .exceptions import (
    RegistroNaoEncontradoError,
    DadosInvalidosError,
    ConflitoError,
    SetorEmUsoError,
)
from .models import Setor, Perfil
from .services import calcular_saldo, listar_movimentacoes

logger = logging.getLogger(__name__)

BUSCA_MINIMO_CARACTERES = 2
BUSCA_LIMITE = 7


# ============================================
# SETORES
# ============================================

def listar_setores(db: Session) -> List[dict]:
    """Setores com a quantidade de colaboradores vinculados."""
    linhas = (
        db.query(Setor, func.count(Perfil.id))
        .outerjoin(Perfil, Perfil.setor_id == Setor.id)
        .group_by(Setor.id)
        .order_by(Setor.nome)
        .all()
    )
    return [setor_to_dict(setor, total) for setor, total in linhas]


def setor_to_dict(setor: Setor, colaborador_count: Optional[int] = None) -> dict:
    return {
        "id": setor.id,
        "nome": setor.nome,
        "descricao": setor.descricao,
        "colaborador_count": colaborador_count if colaborador_count is not None else len(setor.perfis),
        "created_at": setor.created_at.isoformat() if setor.created_at else None,
    }


def obter_setor(db: Session, setor_id: int) -> Setor:
    setor = db.query(Setor).filter(Setor.id == setor_id).first()
    if setor is None:
        raise RegistroNaoEncontradoError("Setor não encontrado.")
    return setor


def _nome_setor_em_uso(db: Session, nome: str, ignorar_id: Optional[int] = None) -> bool:
    query = db.query(Setor.id).filter(func.lower(Setor.nome) == nome.lower())
    if ignorar_id:
        query = query.filter(Setor.id != ignorar_id)
    return query.first() is not None


def criar_setor(db: Session, nome: str, descricao: Optional[str] = None) -> Setor:
    nome = (nome or "").strip()
    if not nome:
        raise DadosInvalidosError("O nome do setor é obrigatório.")
    if _nome_setor_em_uso(db, nome):
        raise ConflitoError("Já existe um setor com este nome.")

    setor = Setor(nome=nome, descricao=descricao)
    db.add(setor)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflitoError("Já existe um setor com este nome.")
    db.refresh(setor)
    logger.info(f"Setor criado: {setor.nome} (id={setor.id})")
    return setor


def atualizar_setor(db: Session, setor_id: int, nome: str, descricao: Optional[str] = None) -> Setor:
    setor = obter_setor(db, setor_id)
    nome = (nome or "").strip()
    if not nome:
        raise DadosInvalidosError("O nome do setor é obrigatório.")
    if _nome_setor_em_uso(db, nome, ignorar_id=setor_id):
        raise ConflitoError("Já existe um setor com este nome.")

    setor.nome = nome
    if descricao is not None:
        setor.descricao = descricao
    db.commit()
    db.refresh(setor)
    return setor


def excluir_setor(db: Session, setor_id: int) -> None:
    """Só exclui setores sem colaboradores."""
    setor = obter_setor(db, setor_id)
    em_uso = db.query(func.count(Perfil.id)).filter(Perfil.setor_id == setor_id).scalar()
    if em_uso:
        raise SetorEmUsoError("Não é possível apagar um setor que possui colaboradores.")

    db.delete(setor)
    db.commit()
    logger.info(f"Setor excluído: {setor.nome} (id={setor_id})")


# ============================================
# PERFIS
# ============================================

def _query_perfis(db: Session):
    return db.query(Perfil).options(joinedload(Perfil.setor), joinedload(Perfil.usuario))


def listar_perfis(db: Session, setor_id: Optional[int] = None) -> List[Perfil]:
    query = _query_perfis(db)
    if setor_id:
        query = query.filter(Perfil.setor_id == setor_id)
    return query.order_by(Perfil.nome).all()


def obter_perfil(db: Session, perfil_id: int) -> Perfil:
    perfil = _query_perfis(db).filter(Perfil.id == perfil_id).first()
    if perfil is None:
        raise RegistroNaoEncontradoError("Perfil não encontrado.")
    return perfil


def perfil_to_dict(perfil: Perfil) -> dict:
    usuario = perfil.usuario
    return {
        "id": perfil.id,
        "usuario_id": perfil.usuario_id,
        "nome": perfil.nome,
        "gerente": perfil.gerente,
        "funcao": perfil.funcao,
        "setor_id": perfil.setor_id,
        "setor_nome": perfil.setor.nome if perfil.setor else None,
        "ch_primeira": perfil.ch_primeira,
        "ch_segunda": perfil.ch_segunda,
        "foto_url": perfil.foto_url,
        "data_nascimento": perfil.data_nascimento.isoformat() if perfil.data_nascimento else None,
        "email": usuario.email if usuario else None,
        "username": usuario.username if usuario else None,
        "is_active": usuario.is_active if usuario else None,
        "ordem_escala": perfil.ordem_escala,
    }


def definir_gerente(db: Session, perfil_id: int, gerente) -> Perfil:
    """Promove/rebaixa o colaborador. O valor precisa ser booleano."""
    if not isinstance(gerente, bool):
        raise DadosInvalidosError("O valor de 'gerente' deve ser verdadeiro ou falso.")
    perfil = obter_perfil(db, perfil_id)
    perfil.gerente = gerente
    db.commit()
    db.refresh(perfil)
    return perfil


def buscar_perfis(db: Session, termo: Optional[str]) -> List[dict]:
    """
    Autocomplete por nome: prefixo, sem diferenciar maiúsculas.

    Menos de 2 caracteres retorna lista vazia.
    """
    termo = (termo or "").strip()
    if len(termo) < BUSCA_MINIMO_CARACTERES:
        return []

    # Escapa curingas digitados pelo usuário
    padrao = termo.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") + "%"
    perfis = (
        db.query(Perfil)
        .options(joinedload(Perfil.setor))
        .filter(func.lower(Perfil.nome).like(padrao, escape="\\"))
        .order_by(Perfil.nome)
        .limit(BUSCA_LIMITE)
        .all()
    )
    return [
        {
            "id": p.id,
            "nome": p.nome,
            "foto_url": p.foto_url,
            "setor_nome": p.setor.nome if p.setor else None,
        }
        for p in perfis
    ]


# ============================================
# COLABORADORES (usuário + perfil)
# ============================================

def _verificar_unicidade(db: Session, username: str, email: str, ignorar_usuario_id: Optional[int] = None) -> None:
    query = db.query(User).filter((User.username == username) | (User.email == email))
    if ignorar_usuario_id:
        query = query.filter(User.id != ignorar_usuario_id)
    existente = query.first()
    if existente is not None:
        campo = "usuário" if existente.username == username else "email"
        raise ConflitoError(f"Já existe um colaborador com este {campo}.")


def criar_colaborador(
    db: Session,
    username: str,
    email: str,
    first_name: str,
    last_name: str,
    password: Optional[str] = None,
    setor_id: Optional[int] = None,
    gerente: bool = False,
    ch_primeira: Optional[str] = None,
    ch_segunda: Optional[str] = None,
    funcao: Optional[str] = None,
) -> Perfil:
    """
    Cria usuário e perfil juntos.

    Sem senha informada usa DEFAULT_USER_PASSWORD e exige troca no primeiro acesso.
    """
    username = (username or "").strip()
    email = normalize_email(email)
    if not username:
        raise DadosInvalidosError("O nome de usuário é obrigatório.")
    if not validate_email(email):
        raise DadosInvalidosError("Informe um email válido.")
    _verificar_unicidade(db, username, email)
    if setor_id:
        obter_setor(db, setor_id)

    usuario = User(
        username=username,
        email=email,
        first_name=(first_name or "").strip(),
        last_name=(last_name or "").strip(),
        password_hash=get_password_hash(password or DEFAULT_USER_PASSWORD),
        is_staff=False,
        is_active=True,
        force_password_change=not password,
    )
    db.add(usuario)
    db.flush()

    perfil = Perfil(
        usuario_id=usuario.id,
        nome=usuario.full_name,
        gerente=bool(gerente),
        setor_id=setor_id or None,
        ch_primeira=ch_primeira or None,
        ch_segunda=ch_segunda or None,
        funcao=funcao or None,
    )
    db.add(perfil)
    db.commit()
    db.refresh(perfil)
    logger.info(f"Colaborador criado: {username} (perfil={perfil.id})")
    return perfil


def atualizar_colaborador(db: Session, perfil_id: int, dados: dict) -> List[str]:
    """
    Atualiza dados do usuário e do perfil (formulário de edição do admin).

    Returns:
        Nomes dos campos alterados
    """
    perfil = obter_perfil(db, perfil_id)
    usuario = perfil.usuario
    alterados = []

    if usuario is not None:
        username = (dados.get("username") or usuario.username).strip()
        email = normalize_email(dados.get("email") or usuario.email)
        if not validate_email(email):
            raise DadosInvalidosError("Informe um email válido.")
        _verificar_unicidade(db, username, email, ignorar_usuario_id=usuario.id)

        for campo, valor in (
            ("username", username),
            ("email", email),
            ("first_name", dados.get("first_name", usuario.first_name)),
            ("last_name", dados.get("last_name", usuario.last_name)),
            ("is_active", dados.get("is_active", usuario.is_active)),
        ):
            if getattr(usuario, campo) != valor:
                setattr(usuario, campo, valor)
                alterados.append(campo)

        if dados.get("password"):
            usuario.password_hash = get_password_hash(dados["password"])
            alterados.append("password")

        nome = usuario.full_name
    else:
        nome = dados.get("nome") or perfil.nome

    setor_id = dados.get("setor_id", perfil.setor_id) or None
    if setor_id:
        obter_setor(db, setor_id)

    for campo, valor in (
        ("nome", nome),
        ("setor_id", setor_id),
        ("gerente", bool(dados.get("gerente", perfil.gerente))),
        ("ch_primeira", dados.get("ch_primeira", perfil.ch_primeira) or None),
        ("ch_segunda", dados.get("ch_segunda", perfil.ch_segunda) or None),
        ("funcao", dados.get("funcao", perfil.funcao) or None),
    ):
        if getattr(perfil, campo) != valor:
            setattr(perfil, campo, valor)
            alterados.append(campo)

    db.commit()
    return alterados


def definir_ativo(db: Session, perfil_id: int, ativo: bool) -> User:
    perfil = obter_perfil(db, perfil_id)
    if perfil.usuario is None:
        raise RegistroNaoEncontradoError("Perfil do colaborador não possui usuário.")
    perfil.usuario.is_active = bool(ativo)
    db.commit()
    return perfil.usuario


CAMPOS_PERFIL_PROPRIO = (
    "telefone", "linkedin", "cep", "logradouro", "numero", "bairro",
    "cidade", "estado", "sexo", "cpf", "data_nascimento", "funcao",
)


def _dados_cadastrais(dados: dict) -> dict:
    """Filtra os campos editáveis; CPF, telefone e CEP preenchidos precisam ser válidos."""
    limpos = {}
    for campo in CAMPOS_PERFIL_PROPRIO:
        if campo not in dados:
            continue
        valor = (dados[campo] or "").strip() if isinstance(dados[campo], str) else dados[campo]
        limpos[campo] = valor or None

    if limpos.get("cpf"):
        if not validate_cpf(limpos["cpf"]):
            raise DadosInvalidosError("CPF inválido.")
        limpos["cpf"] = format_cpf(limpos["cpf"])
    if limpos.get("telefone") and not validate_telefone(limpos["telefone"]):
        raise DadosInvalidosError("Telefone inválido (informe o DDD).")
    if limpos.get("cep") and not validate_cep(limpos["cep"]):
        raise DadosInvalidosError("CEP inválido.")
    if limpos.get("estado"):
        limpos["estado"] = limpos["estado"].upper()[:2]
    if "data_nascimento" in limpos and limpos["data_nascimento"] is not None:
        data = parse_iso_date(limpos["data_nascimento"])
        if data is None:
            raise DadosInvalidosError("Data de nascimento inválida.")
        limpos["data_nascimento"] = data
    return limpos


def atualizar_dados_proprios(db: Session, usuario: User, nome: str, email: str, dados: dict) -> Perfil:
    """Formulário "Editar perfil" do próprio colaborador."""
    nome = (nome or "").strip()
    email = normalize_email(email)
    if not nome:
        raise DadosInvalidosError("O nome é obrigatório.")
    if not validate_email(email):
        raise DadosInvalidosError("Informe um email válido.")

    outro = db.query(User).filter(User.email == email, User.id != usuario.id).first()
    if outro is not None:
        raise ConflitoError("Este email já está em uso por outro usuário.")
    cadastrais = _dados_cadastrais(dados)

    perfil = usuario.perfil
    if perfil is None:
        raise RegistroNaoEncontradoError("O seu usuário não possui um perfil de funcionário associado.")

    usuario.email = email
    partes = nome.split(" ", 1)
    usuario.first_name = partes[0]
    usuario.last_name = partes[1] if len(partes) > 1 else ""
    perfil.nome = nome

    for campo, valor in cadastrais.items():
        setattr(perfil, campo, valor)

    db.commit()
    db.refresh(perfil)
    return perfil


def perfil_com_movimentacoes(db: Session, perfil_id: int, limit: int = 50) -> dict:
    """Detalhes usados no painel de busca: perfil, saldo e movimentações."""
    perfil = obter_perfil(db, perfil_id)
    movimentacoes = listar_movimentacoes(db, colaborador_id=perfil_id, limit=limit)
    return {
        "profile": perfil_to_dict(perfil),
        "balance": calcular_saldo(db, perfil_id).to_dict(),
        "movements": [m.to_dict() for m in movimentacoes],
    }
