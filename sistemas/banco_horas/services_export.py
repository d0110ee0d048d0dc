# sistemas/banco_horas/services_export.py
"""
Exportação dos relatórios de movimentações.

Suporta exportação em:
- CSV (UTF-8 com BOM, para o Excel reconhecer a acentuação)
- Excel (.xlsx)
- PDF (A4, tabela + resumo de saldo)
"""

import csv
import io
import re
import logging
from typing import List, Optional

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from utils.timezone import now_local, format_date

from .models import Movimentacao

logger = logging.getLogger(__name__)

BOM = "\ufeff"

COLUNAS_GERAL = ["Colaborador", "Setor", "Data", "Tipo", "Horas", "Status", "Motivo"]
COLUNAS_COLABORADOR = ["Data", "Tipo", "Horas", "Status", "Motivo"]


def nome_arquivo(prefixo: str, extensao: str) -> str:
    """relatorio_movimentacoes_2026-10-19.csv"""
    return f"{prefixo}_{now_local().strftime('%Y-%m-%d')}.{extensao}"


def _tipo(mov: Movimentacao) -> str:
    return "Crédito" if mov.entrada else "Débito"


def _linha(mov: Movimentacao, colunas: List[str]) -> list:
    perfil = mov.colaborador
    valores = {
        "Colaborador": perfil.nome if perfil else "",
        "Setor": perfil.setor.nome if perfil and perfil.setor else "",
        "Data": format_date(mov.data_movimentacao),
        "Tipo": _tipo(mov),
        "Horas": mov.hora_total,
        "Status": mov.status.nome if mov.status else "",
        "Motivo": mov.motivo or "",
    }
    return [valores[c] for c in colunas]


class ExportService:
    """Gera os arquivos de relatório a partir de uma lista de movimentações"""

    # Caracteres ilegais em Excel
    ILLEGAL_CHARACTERS_RE = re.compile(
        r'[\x00-\x08\x0b-\x0c\x0e-\x1f\x7f-\x9f]'
    )

    def _limpar_texto_excel(self, texto) -> str:
        if not texto:
            return ""
        return self.ILLEGAL_CHARACTERS_RE.sub('', str(texto))

    def exportar_csv(self, movimentacoes: List[Movimentacao], colunas: List[str] = COLUNAS_GERAL) -> bytes:
        """
        CSV separado por vírgula com cabeçalho.

        Returns:
            Conteúdo em UTF-8 precedido do BOM
        """
        buffer = io.StringIO()
        buffer.write(BOM)
        writer = csv.writer(buffer)
        writer.writerow(colunas)
        for mov in movimentacoes:
            writer.writerow(_linha(mov, colunas))
        return buffer.getvalue().encode("utf-8")

    def exportar_excel(
        self,
        movimentacoes: List[Movimentacao],
        colunas: List[str] = COLUNAS_GERAL,
        resumo: Optional[dict] = None
    ) -> io.BytesIO:
        """
        Planilha com as movimentações e, opcionalmente, uma aba de resumo.

        Args:
            resumo: dict do SaldoHoras (positive/negative/formatted)
        """
        wb = Workbook()
        ws = wb.active
        ws.title = "Movimentações"

        for col, header in enumerate(colunas, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = Font(bold=True)
            cell.fill = PatternFill(start_color="DDDDDD", end_color="DDDDDD", fill_type="solid")

        for row_idx, mov in enumerate(movimentacoes, 2):
            for col, valor in enumerate(_linha(mov, colunas), 1):
                ws.cell(row=row_idx, column=col, value=self._limpar_texto_excel(valor))

        # Ajusta largura das colunas
        for col in range(1, len(colunas) + 1):
            column_letter = get_column_letter(col)
            max_length = max(
                (len(str(ws.cell(row=r, column=col).value or "")) for r in range(1, min(len(movimentacoes) + 2, 100))),
                default=0
            )
            ws.column_dimensions[column_letter].width = min(max_length + 2, 50)

        if resumo:
            ws_resumo = wb.create_sheet("Resumo")
            linhas = [
                ("Total de Créditos", resumo.get("positive")),
                ("Total de Débitos", resumo.get("negative")),
                ("Saldo", resumo.get("formatted")),
                ("Exportado em", now_local().strftime("%d/%m/%Y %H:%M")),
            ]
            for row_idx, (prop, valor) in enumerate(linhas, 1):
                ws_resumo.cell(row=row_idx, column=1, value=prop).font = Font(bold=True)
                ws_resumo.cell(row=row_idx, column=2, value=valor or "")
            ws_resumo.column_dimensions["A"].width = 22

        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)
        return buffer

    def exportar_pdf(
        self,
        movimentacoes: List[Movimentacao],
        titulo: str,
        colunas: List[str] = COLUNAS_GERAL,
        resumo: Optional[dict] = None
    ) -> io.BytesIO:
        """
        Relatório A4 em tabela.

        Quando `resumo` é informado (filtro por colaborador) o PDF abre com o
        total de créditos, débitos e o saldo.
        """
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=30,
            leftMargin=30,
            topMargin=40,
            bottomMargin=30,
            title=titulo,
        )

        styles = getSampleStyleSheet()
        styles.add(ParagraphStyle(name="Titulo", fontSize=16, leading=20, alignment=1, spaceAfter=16))
        styles.add(ParagraphStyle(name="Celula", fontSize=8, leading=10))
        styles.add(ParagraphStyle(name="Pequeno", fontSize=8, textColor=colors.grey))

        elements = [Paragraph(_escapar(titulo), styles["Titulo"])]
        elements.append(
            Paragraph(f"Gerado em {now_local().strftime('%d/%m/%Y %H:%M')}", styles["Pequeno"])
        )
        elements.append(Spacer(1, 12))

        if resumo:
            elements.append(Paragraph("<b>Resumo de Horas Aprovadas (Período Filtrado)</b>", styles["Normal"]))
            elements.append(Paragraph(
                f"Total de Créditos: {resumo.get('positive')} | Total de Débitos: {resumo.get('negative')}",
                styles["Normal"]
            ))
            elements.append(Paragraph(f"<b>Saldo do Período: {resumo.get('formatted')}</b>", styles["Normal"]))
            elements.append(Spacer(1, 16))

        if movimentacoes:
            tabela = [colunas]
            for mov in movimentacoes:
                linha = _linha(mov, colunas)
                # Motivo pode ser longo: Paragraph quebra a linha dentro da célula
                linha[-1] = Paragraph(_escapar(linha[-1]), styles["Celula"])
                tabela.append(linha)

            largura_util = A4[0] - 60
            larguras = _larguras_colunas(colunas, largura_util)
            elements.append(
                Table(
                    tabela,
                    colWidths=larguras,
                    repeatRows=1,
                    style=TableStyle([
                        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                        ("FONTSIZE", (0, 0), (-1, -1), 8),
                        ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ])
                )
            )
        else:
            elements.append(Paragraph("Nenhuma movimentação encontrada para os filtros informados.", styles["Normal"]))

        doc.build(elements)
        buffer.seek(0)
        logger.info(f"PDF gerado: '{titulo}' com {len(movimentacoes)} movimentações")
        return buffer


def _escapar(texto: str) -> str:
    return (texto or "").replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _larguras_colunas(colunas: List[str], largura_util: float) -> List[float]:
    """Motivo fica com o espaço que sobra."""
    fixas = {
        "Colaborador": 100,
        "Setor": 75,
        "Data": 55,
        "Tipo": 45,
        "Horas": 40,
        "Status": 60,
    }
    larguras = [fixas.get(c, 0) for c in colunas]
    restante = max(largura_util - sum(larguras), 80)
    return [w if w else restante for w in larguras]
