# tests/test_uploads.py
"""
Testes do upload de imagens (utils/uploads.py)
"""

import asyncio
from io import BytesIO

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from config import MAX_CONTENT_LENGTH
from sistemas.banco_horas.models import Perfil
from utils.uploads import (
    UploadInvalidoError,
    gerar_nome_foto,
    remover_foto_antiga,
    salvar_anexo_sugestao,
    salvar_foto_perfil,
)

from tests.conftest import PNG_1PX


def _upload(filename, conteudo, content_type):
    return UploadFile(file=BytesIO(conteudo), filename=filename, headers=Headers({"content-type": content_type}))


class TestSalvarImagem:

    def test_grava_foto(self, tmp_path):
        url = asyncio.run(salvar_foto_perfil(_upload("eu.PNG", PNG_1PX, "image/png"), 3, destino=tmp_path))

        assert url.startswith("/uploads/user-3-")
        assert url.endswith(".png")
        assert (tmp_path / url.rsplit("/", 1)[-1]).read_bytes() == PNG_1PX

    @pytest.mark.parametrize("filename,content_type", [
        ("foto.pdf", "application/pdf"),
        ("foto.png", "application/octet-stream"),
        ("foto.exe", "image/png"),
    ])
    def test_tipo_invalido(self, tmp_path, filename, content_type):
        with pytest.raises(UploadInvalidoError, match="Apenas imagens"):
            asyncio.run(salvar_foto_perfil(_upload(filename, PNG_1PX, content_type), 3, destino=tmp_path))

    def test_acima_do_limite(self, tmp_path):
        grande = b"0" * (MAX_CONTENT_LENGTH + 1)
        with pytest.raises(UploadInvalidoError, match="2MB"):
            asyncio.run(salvar_foto_perfil(_upload("grande.jpg", grande, "image/jpeg"), 3, destino=tmp_path))
        assert list(tmp_path.iterdir()) == []

    def test_anexo_aceita_ate_5mb(self, tmp_path):
        conteudo = b"0" * (MAX_CONTENT_LENGTH + 1)
        url = asyncio.run(salvar_anexo_sugestao(_upload("print.gif", conteudo, "image/gif"), 1, destino=tmp_path))
        assert url.endswith(".gif")

    def test_arquivo_vazio(self, tmp_path):
        with pytest.raises(UploadInvalidoError, match="vazio"):
            asyncio.run(salvar_foto_perfil(_upload("vazio.png", b"", "image/png"), 3, destino=tmp_path))

    def test_nomes_unicos(self):
        assert gerar_nome_foto(1, "a.png") != gerar_nome_foto(1, "a.png")


class TestRemoverFotoAntiga:

    def test_remove_arquivo(self, tmp_path):
        arquivo = tmp_path / "user-1-antiga.png"
        arquivo.write_bytes(PNG_1PX)

        remover_foto_antiga("/uploads/user-1-antiga.png", destino=tmp_path)

        assert not arquivo.exists()

    def test_ignora_urls_externas_e_ausentes(self, tmp_path):
        externo = tmp_path / "externo.png"
        externo.write_bytes(PNG_1PX)

        remover_foto_antiga("https://cdn.exemplo.com/externo.png", destino=tmp_path)
        remover_foto_antiga(None, destino=tmp_path)
        remover_foto_antiga("/uploads/nao-existe.png", destino=tmp_path)

        assert externo.exists()


class TestFotoDoPerfil:

    def test_troca_foto(self, colaborador_client, db, colaborador):
        response = colaborador_client.post(
            "/profile/foto",
            files={"foto": ("eu.png", PNG_1PX, "image/png")},
            follow_redirects=False,
        )

        assert response.status_code == 303
        db.expire_all()
        foto_url = db.get(Perfil, colaborador.perfil.id).foto_url
        assert foto_url.startswith("/uploads/user-")
        assert colaborador_client.get(foto_url).content == PNG_1PX

    def test_foto_invalida_mantem_a_anterior(self, colaborador_client, db, colaborador):
        response = colaborador_client.post(
            "/profile/foto",
            files={"foto": ("doc.pdf", b"%PDF-1.4", "application/pdf")},
            follow_redirects=False,
        )

        assert response.headers["location"] == "/profile/editar"
        db.expire_all()
        assert db.get(Perfil, colaborador.perfil.id).foto_url is None
