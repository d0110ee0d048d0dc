# sistemas/banco_horas/exceptions.py
"""
Exceções específicas do módulo Banco de Horas

Os routers convertem cada uma no status HTTP correspondente
(ver STATUS_HTTP).
"""


class BancoHorasError(Exception):
    """Erro base do módulo"""
    pass


class RegistroNaoEncontradoError(BancoHorasError):
    """Movimentação, perfil, setor ou escala inexistente"""
    pass


class DadosInvalidosError(BancoHorasError):
    """Dados enviados não passam nas regras de negócio"""
    pass


class SaldoInsuficienteError(BancoHorasError):
    """Saldo do banco de horas não cobre o débito solicitado"""
    pass


class TransicaoInvalidaError(BancoHorasError):
    """Movimentação não está em um status que permita a ação"""
    pass


class ConflitoError(BancoHorasError):
    """Registro duplicado (ex: nome de setor já existente)"""
    pass


class SetorEmUsoError(BancoHorasError):
    """Setor com colaboradores vinculados não pode ser excluído"""
    pass


class PermissaoNegadaError(BancoHorasError):
    """Usuário não pode agir sobre o registro"""
    pass


class StatusNaoConfiguradoError(BancoHorasError):
    """Status padrão (Pendente/Aprovado/...) ausente no banco"""
    pass


class IntegracaoError(BancoHorasError):
    """Falha em serviço externo (GitHub)"""
    pass


STATUS_HTTP = {
    RegistroNaoEncontradoError: 404,
    DadosInvalidosError: 400,
    SaldoInsuficienteError: 400,
    SetorEmUsoError: 400,
    TransicaoInvalidaError: 409,
    ConflitoError: 409,
    PermissaoNegadaError: 403,
    StatusNaoConfiguradoError: 500,
    IntegracaoError: 500,
}


def status_http(exc: BancoHorasError) -> int:
    """Status HTTP correspondente à exceção (500 para as não mapeadas)."""
    for tipo, codigo in STATUS_HTTP.items():
        if isinstance(exc, tipo):
            return codigo
    return 500
