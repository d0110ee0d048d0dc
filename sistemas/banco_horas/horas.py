# sistemas/banco_horas/horas.py
"""
Aritmética de horas no formato HH:MM.

Durações ficam gravadas como texto ("02:30"); os cálculos de saldo e de
carga horária são feitos em minutos.
"""

from typing import Optional, Iterable, Tuple

from config import (
    CARGA_HORARIA_PADRAO_MINUTOS,
    INTERVALO_ALMOCO_MINUTOS,
    JORNADA_MINIMA_COM_ALMOCO_MINUTOS,
)

MINUTOS_DIA = 24 * 60


def hhmm_para_minutos(valor: Optional[str]) -> Optional[int]:
    """
    Converte "HH:MM" em minutos.

    Aceita sinal ("-01:30") e horas acima de 24 ("40:00").
    Retorna None para valores vazios ou malformados.

    >>> hhmm_para_minutos("02:30")
    150
    """
    if valor is None:
        return None
    texto = str(valor).strip()
    if not texto:
        return None

    sinal = 1
    if texto[0] in "+-":
        sinal = -1 if texto[0] == "-" else 1
        texto = texto[1:]

    partes = texto.split(":")
    if len(partes) != 2 or not all(p.isdigit() for p in partes):
        return None
    horas = int(partes[0])
    minutos = int(partes[1])
    if not 0 <= minutos < 60:
        return None

    return sinal * (horas * 60 + minutos)


def duracao_para_minutos(valor: Optional[str]) -> Optional[int]:
    """
    Duração de uma movimentação em minutos.

    A direção vem de `entrada`, então a duração não tem sinal e é maior que
    zero. Retorna None para "-05:00", "+02:00", "00:00" ou malformados.
    """
    if valor is None:
        return None
    texto = str(valor).strip()
    if not texto or texto[0] in "+-":
        return None
    minutos = hhmm_para_minutos(texto)
    if minutos is None or minutos <= 0:
        return None
    return minutos


def normalizar_duracao(valor: Optional[str]) -> Optional[str]:
    """Forma canônica da duração ("2:00" -> "02:00"), ou None se inválida."""
    minutos = duracao_para_minutos(valor)
    return None if minutos is None else _hhmm(minutos)


def horario_para_minutos(valor: Optional[str]) -> Optional[int]:
    """Horário do relógio ("08:00" a "23:59") em minutos desde a meia-noite."""
    if valor is None:
        return None
    texto = str(valor).strip()
    if not texto or texto[0] in "+-":
        return None
    minutos = hhmm_para_minutos(texto)
    if minutos is None or minutos >= MINUTOS_DIA:
        return None
    return minutos


def _hhmm(minutos: int) -> str:
    minutos = abs(int(minutos))
    return f"{minutos // 60:02d}:{minutos % 60:02d}"


def formatar_minutos(minutos: Optional[int]) -> str:
    """Minutos -> "HH:MM", com "-" quando negativo."""
    if minutos is None:
        return "00:00"
    sinal = "-" if minutos < 0 else ""
    return f"{sinal}{_hhmm(minutos)}"


def formatar_positivo(minutos: Optional[int]) -> str:
    """Saldo credor: "+HH:MM" (zero ou negativo vira +00:00)."""
    if not minutos or minutos <= 0:
        return "+00:00"
    return f"+{_hhmm(minutos)}"


def formatar_negativo(minutos: Optional[int]) -> str:
    """Total de débitos: sempre "-HH:MM"."""
    return f"-{_hhmm(minutos or 0)}"


def formatar_saldo(minutos: Optional[int]) -> str:
    """Saldo com sinal explícito: "+02:00", "-01:30", "+00:00"."""
    minutos = minutos or 0
    sinal = "-" if minutos < 0 else "+"
    return f"{sinal}{_hhmm(minutos)}"


def calcular_hora_total(hora_inicial: Optional[str], hora_final: Optional[str]) -> Optional[str]:
    """
    Duração entre dois horários do mesmo turno.

    Quando o fim é menor ou igual ao início o turno atravessou a meia-noite.
    """
    inicio = horario_para_minutos(hora_inicial)
    fim = horario_para_minutos(hora_final)
    if inicio is None or fim is None:
        return None

    diferenca = fim - inicio
    if diferenca <= 0:
        diferenca += MINUTOS_DIA
    return _hhmm(diferenca)


def carga_horaria_diaria(ch_primeira: Optional[str], ch_segunda: Optional[str]) -> int:
    """
    Minutos de uma jornada do colaborador.

    Sem expediente cadastrado vale a carga padrão de 8h. Jornadas de 6h ou
    mais descontam 1h de almoço.
    """
    inicio = horario_para_minutos(ch_primeira)
    fim = horario_para_minutos(ch_segunda)
    if inicio is None or fim is None:
        return CARGA_HORARIA_PADRAO_MINUTOS

    jornada = fim - inicio
    if jornada < 0:
        jornada += MINUTOS_DIA
    if jornada >= JORNADA_MINIMA_COM_ALMOCO_MINUTOS:
        jornada -= INTERVALO_ALMOCO_MINUTOS
    return max(jornada, 0)


def somar_movimentacoes(itens: Iterable[Tuple[Optional[str], bool]]) -> Tuple[int, int]:
    """
    Soma pares (hora_total, entrada).

    Returns:
        (minutos de crédito, minutos de débito), ignorando durações inválidas
        ou com sinal
    """
    creditos = 0
    debitos = 0
    for hora_total, entrada in itens:
        minutos = duracao_para_minutos(hora_total)
        if minutos is None:
            continue
        if entrada:
            creditos += minutos
        else:
            debitos += minutos
    return creditos, debitos
