# tests/test_relatorios.py
"""
Testes de relatórios e exportação (CSV, XLSX e PDF)

Uso:
    pytest tests/test_relatorios.py -v
"""

import io
from datetime import date

import pytest
from openpyxl import load_workbook

from sistemas.banco_horas.exceptions import DadosInvalidosError
from sistemas.banco_horas.relatorios import filtros_da_query, gerar_relatorio
from sistemas.banco_horas.services_export import (
    BOM,
    COLUNAS_COLABORADOR,
    COLUNAS_GERAL,
    ExportService,
    nome_arquivo,
)

from tests.conftest import lancar


class TestFiltrosDaQuery:

    def test_converte_tipos(self):
        filtros = filtros_da_query({
            "colaborador_id": "3",
            "data_inicio": "2026-01-01",
            "data_fim": "2026-01-31",
            "entrada": "false",
        })
        assert filtros == {
            "colaborador_id": 3,
            "data_inicio": date(2026, 1, 1),
            "data_fim": date(2026, 1, 31),
            "entrada": False,
        }

    def test_ignora_campos_vazios(self):
        assert filtros_da_query({"colaborador_id": "", "status_id": "  ", "entrada": ""}) == {}

    @pytest.mark.parametrize("params", [
        {"colaborador_id": "abc"},
        {"data_inicio": "31/01/2026"},
        {"entrada": "talvez"},
        {"limit": "-1"},
        {"limit": "0"},
        {"colaborador_id": "-5"},
    ])
    def test_valores_invalidos(self, params):
        with pytest.raises(DadosInvalidosError):
            filtros_da_query(params)


class TestGerarRelatorio:

    def test_resumo_apenas_aprovadas(self, db, colaborador, admin):
        lancar(db, colaborador, "04:00", motivo="A", aprovar_com=admin)
        lancar(db, colaborador, "01:00", entrada=False, motivo="B", aprovar_com=admin)
        lancar(db, colaborador, "09:00", motivo="Pendente")

        relatorio = gerar_relatorio(db, {}, colaborador_id=colaborador.perfil.id)

        assert len(relatorio["movimentacoes"]) == 3
        assert relatorio["summary"] == {
            "totalHorasPositivas": "+04:00",
            "totalHorasNegativas": "-01:00",
            "saldoTotalHoras": "+03:00",
        }

    def test_colaborador_id_forcado(self, db, colaborador, outro_colaborador):
        lancar(db, colaborador, motivo="Minha")
        lancar(db, outro_colaborador, motivo="Dele")

        relatorio = gerar_relatorio(
            db, {"colaborador_id": outro_colaborador.perfil.id}, colaborador_id=colaborador.perfil.id
        )
        assert [m.motivo for m in relatorio["movimentacoes"]] == ["Minha"]


class TestExportService:

    def test_csv_com_bom_e_cabecalho(self, db, colaborador):
        mov = lancar(db, colaborador, motivo="Plantão, noturno")

        conteudo = ExportService().exportar_csv([mov], COLUNAS_GERAL).decode("utf-8")

        assert conteudo.startswith(BOM)
        linhas = conteudo[len(BOM):].splitlines()
        assert linhas[0] == ",".join(COLUNAS_GERAL)
        assert linhas[1].startswith("Maria Teste,Tecnologia,10/03/2026,Crédito,02:00,Pendente,")
        assert '"Plantão, noturno"' in linhas[1]

    def test_excel_com_resumo(self, db, colaborador):
        mov = lancar(db, colaborador)
        resumo = {"positive": "+02:00", "negative": "-00:00", "formatted": "02:00"}

        buffer = ExportService().exportar_excel([mov], COLUNAS_COLABORADOR, resumo)

        wb = load_workbook(buffer)
        assert wb.sheetnames == ["Movimentações", "Resumo"]
        ws = wb["Movimentações"]
        assert [c.value for c in ws[1]] == COLUNAS_COLABORADOR
        assert ws.cell(row=2, column=3).value == "02:00"
        assert wb["Resumo"].cell(row=3, column=2).value == "02:00"

    def test_excel_sem_resumo(self):
        wb = load_workbook(ExportService().exportar_excel([], COLUNAS_GERAL))
        assert wb.sheetnames == ["Movimentações"]

    def test_excel_remove_caracteres_ilegais(self):
        assert ExportService()._limpar_texto_excel("a\x00b\x1fc") == "abc"

    def test_pdf(self, db, colaborador):
        mov = lancar(db, colaborador, motivo="<script> & outros")
        buffer = ExportService().exportar_pdf([mov], "Relatório", COLUNAS_GERAL, {"positive": "+02:00"})
        assert buffer.getvalue().startswith(b"%PDF")

    def test_pdf_vazio(self):
        buffer = ExportService().exportar_pdf([], "Relatório vazio")
        assert buffer.getvalue().startswith(b"%PDF")

    def test_nome_arquivo(self):
        nome = nome_arquivo("relatorio_movimentacoes", "csv")
        assert nome.startswith("relatorio_movimentacoes_")
        assert nome.endswith(".csv")


class TestRotasDeExportacao:

    def test_admin_csv(self, admin_client, db, colaborador):
        lancar(db, colaborador)
        response = admin_client.get("/admin/relatorios/exportar")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'attachment; filename="relatorio_movimentacoes_' in response.headers["content-disposition"]
        assert response.content.startswith(BOM.encode("utf-8"))

    def test_admin_xlsx_filtrado_por_colaborador(self, admin_client, db, colaborador, admin):
        lancar(db, colaborador, aprovar_com=admin)
        response = admin_client.get(f"/admin/relatorios/exportar-xlsx?colaborador_id={colaborador.perfil.id}")

        assert response.status_code == 200
        wb = load_workbook(io.BytesIO(response.content))
        assert "Resumo" in wb.sheetnames

    def test_admin_pdf(self, admin_client):
        response = admin_client.get("/admin/relatorios/exportar-pdf")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"

    def test_admin_api_relatorios(self, admin_client, db, colaborador, admin):
        lancar(db, colaborador, aprovar_com=admin)
        data = admin_client.get("/admin/api/relatorios?entrada=true").json()

        assert len(data["movimentacoes"]) == 1
        assert data["summary"]["saldoTotalHoras"] == "+02:00"

    def test_filtro_invalido(self, admin_client):
        response = admin_client.get("/admin/api/relatorios?data_inicio=ontem")
        assert response.status_code == 400

    def test_limite_negativo_retorna_400(self, admin_client, colaborador_client):
        assert admin_client.get("/admin/api/relatorios?limit=-1").status_code == 400
        assert colaborador_client.get("/profile/api/relatorio?limit=-1").status_code == 400

    def test_exportacao_exige_admin(self, colaborador_client):
        assert colaborador_client.get("/admin/relatorios/exportar").status_code == 403

    def test_colaborador_exporta_o_proprio(self, colaborador_client, db, colaborador, outro_colaborador):
        lancar(db, colaborador, motivo="Minha")
        lancar(db, outro_colaborador, motivo="Dele")

        response = colaborador_client.get(
            f"/profile/relatorio/exportar-csv?colaborador_id={outro_colaborador.perfil.id}"
        )

        texto = response.content.decode("utf-8")
        assert response.status_code == 200
        assert "Minha" in texto
        assert "Dele" not in texto

    def test_colaborador_api_relatorio(self, colaborador_client, db, colaborador):
        lancar(db, colaborador)
        data = colaborador_client.get("/profile/api/relatorio").json()
        assert len(data["movimentacoes"]) == 1

    def test_colaborador_pdf_e_xlsx(self, colaborador_client, db, colaborador):
        lancar(db, colaborador)
        assert colaborador_client.get("/profile/relatorio/exportar-pdf").content.startswith(b"%PDF")
        assert colaborador_client.get("/profile/relatorio/exportar-xlsx").status_code == 200
