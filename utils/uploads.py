# utils/uploads.py
"""
Upload de imagens (fotos de perfil e anexos de sugestões).

- Apenas JPEG, PNG e GIF (tipo MIME e extensão)
- Tamanho máximo de 2MB (foto) ou 5MB (anexo)
- Nome gerado: user-<id>-<timestamp>-<aleatório><ext>
- Arquivos servidos em /uploads
"""

import os
import secrets
import time
import logging
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from config import (
    UPLOAD_FOLDER, ALLOWED_EXTENSIONS, ALLOWED_MIME_TYPES, MAX_CONTENT_LENGTH, MAX_ANEXO_LENGTH
)

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads"


class UploadInvalidoError(Exception):
    """Arquivo recusado pela validação"""
    pass


def _extensao(filename: Optional[str]) -> str:
    return os.path.splitext(filename or "")[1].lower()


def gerar_nome_foto(user_id: int, filename: str) -> str:
    """Nome único para a foto do usuário, preservando a extensão."""
    sufixo = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
    return f"user-{user_id}-{sufixo}{_extensao(filename)}"


async def salvar_imagem(
    arquivo: UploadFile,
    user_id: int,
    destino: Optional[Path] = None,
    limite: int = MAX_CONTENT_LENGTH
) -> str:
    """
    Valida e grava uma imagem enviada (foto de perfil ou anexo).

    Returns:
        URL pública do arquivo (ex: /uploads/user-3-...png)

    Raises:
        UploadInvalidoError: tipo não permitido, arquivo vazio ou acima do limite
    """
    if not arquivo or not arquivo.filename:
        raise UploadInvalidoError("Nenhum arquivo enviado.")

    extensao = _extensao(arquivo.filename).lstrip(".")
    if arquivo.content_type not in ALLOWED_MIME_TYPES or extensao not in ALLOWED_EXTENSIONS:
        raise UploadInvalidoError("Apenas imagens (JPEG, PNG, GIF) são permitidas!")

    conteudo = await arquivo.read(limite + 1)
    if len(conteudo) > limite:
        raise UploadInvalidoError(f"A imagem deve ter no máximo {limite // (1024 * 1024)}MB.")
    if not conteudo:
        raise UploadInvalidoError("O arquivo enviado está vazio.")

    pasta = Path(destino or UPLOAD_FOLDER)
    pasta.mkdir(parents=True, exist_ok=True)

    nome = gerar_nome_foto(user_id, arquivo.filename)
    (pasta / nome).write_bytes(conteudo)
    logger.info(f"Imagem salva: {nome} ({len(conteudo)} bytes)")

    return f"{UPLOAD_URL_PREFIX}/{nome}"


async def salvar_foto_perfil(arquivo: UploadFile, user_id: int, destino: Optional[Path] = None) -> str:
    """Foto de perfil: limite de 2MB."""
    return await salvar_imagem(arquivo, user_id, destino, MAX_CONTENT_LENGTH)


async def salvar_anexo_sugestao(arquivo: UploadFile, user_id: int, destino: Optional[Path] = None) -> str:
    return await salvar_imagem(arquivo, user_id, destino, MAX_ANEXO_LENGTH)


def remover_foto_antiga(foto_url: Optional[str], destino: Optional[Path] = None) -> None:
    """Remove a foto anterior do disco (falhas apenas logadas)."""
    if not foto_url or not foto_url.startswith(UPLOAD_URL_PREFIX + "/"):
        return
    caminho = Path(destino or UPLOAD_FOLDER) / foto_url.rsplit("/", 1)[-1]
    try:
        caminho.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Não foi possível remover foto antiga {caminho}: {e}")
