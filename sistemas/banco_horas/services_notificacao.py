# sistemas/banco_horas/services_notificacao.py
"""
Notificações por email (SMTP via aiosmtplib).

Os envios são "melhor esforço": rodam como BackgroundTasks depois da
resposta e qualquer falha é apenas registrada no log.

As funções recebem dicionários (Movimentacao.to_dict()) e não objetos do
ORM, porque a sessão do request já foi fechada quando a tarefa executa.
"""

import logging
from dataclasses import dataclass
from datetime import date
from email.message import EmailMessage
from html import escape
from typing import List, Optional

import aiosmtplib

from auth.models import User
from config import (
    SMTP_HOST,
    SMTP_PORT,
    SMTP_USER,
    SMTP_PASSWORD,
    SMTP_FROM,
    SMTP_USE_TLS,
    SMTP_START_TLS,
    APP_URL,
    RESET_PASSWORD_EXPIRE_MINUTES,
)

logger = logging.getLogger(__name__)


@dataclass
class SMTPConfig:
    host: str = SMTP_HOST
    port: int = SMTP_PORT
    user: str = SMTP_USER
    password: str = SMTP_PASSWORD
    remetente: str = SMTP_FROM
    use_tls: bool = SMTP_USE_TLS
    start_tls: bool = SMTP_START_TLS

    @property
    def configurado(self) -> bool:
        return bool(self.host)


@dataclass
class Email:
    destinatarios: List[str]
    assunto: str
    html: str
    texto: str = ""

    def to_message(self, remetente: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = self.assunto
        msg["From"] = remetente
        msg["To"] = ", ".join(self.destinatarios)
        msg.set_content(self.texto or "Este email requer um cliente com suporte a HTML.")
        msg.add_alternative(self.html, subtype="html")
        return msg


def _data_br(valor) -> str:
    if isinstance(valor, date):
        return valor.strftime("%d/%m/%Y")
    try:
        return date.fromisoformat(str(valor)[:10]).strftime("%d/%m/%Y")
    except ValueError:
        return str(valor or "")


def _tipo(mov: dict) -> str:
    return "Crédito" if mov.get("entrada") else "Débito"


class NotificationService:
    """Monta e envia os emails do banco de horas"""

    def __init__(self, config: Optional[SMTPConfig] = None):
        self.config = config or SMTPConfig()

    async def enviar(self, email: Email) -> bool:
        """
        Envia um email. Nunca levanta exceção.

        Returns:
            True se o servidor SMTP aceitou a mensagem
        """
        destinatarios = [d for d in email.destinatarios if d]
        if not destinatarios:
            return False
        if not self.config.configurado:
            logger.info(f"SMTP não configurado; email '{email.assunto}' não enviado")
            return False

        email.destinatarios = destinatarios
        try:
            await aiosmtplib.send(
                email.to_message(self.config.remetente),
                hostname=self.config.host,
                port=self.config.port,
                username=self.config.user or None,
                password=self.config.password or None,
                use_tls=self.config.use_tls,
                start_tls=self.config.start_tls if not self.config.use_tls else False,
            )
        except Exception as e:
            logger.error(f"Falha ao enviar email '{email.assunto}': {type(e).__name__}: {e}")
            return False

        logger.info(f"Email enviado: '{email.assunto}' para {len(destinatarios)} destinatário(s)")
        return True

    # ------------------------------------------------------------
    # Mensagens
    # ------------------------------------------------------------

    @staticmethod
    def email_nova_movimentacao(mov: dict, admins: List[str]) -> Email:
        nome = escape(mov.get("colaborador_nome") or "")
        html = f"""
            <p>Olá Administrador,</p>
            <p>Uma nova solicitação de horas foi feita por <strong>{nome}</strong> e aguarda a sua aprovação.</p>
            <ul>
                <li><strong>Data:</strong> {_data_br(mov.get("data_movimentacao"))}</li>
                <li><strong>Horas:</strong> {escape(mov.get("hora_total") or "")} ({_tipo(mov)})</li>
                <li><strong>Motivo:</strong> {escape(mov.get("motivo") or "")}</li>
            </ul>
            <p>Você pode aprovar ou rejeitar esta solicitação no painel de administração:
            <a href="{APP_URL}/admin/aprovacoes">{APP_URL}/admin/aprovacoes</a></p>
        """
        return Email(admins, f"Nova Solicitação de Horas de {mov.get('colaborador_nome')}", html)

    @staticmethod
    def email_status_colaborador(mov: dict, destinatario: str, primeiro_nome: str, ator_nome: str, status: str) -> Email:
        html = f"""
            <p>Olá {escape(primeiro_nome or "")},</p>
            <p>A sua solicitação de horas do dia {_data_br(mov.get("data_movimentacao"))} foi <strong>{escape(status)}</strong>.</p>
            <p>A ação foi realizada por: <strong>{escape(ator_nome or "")}</strong>.</p>
            <p><strong>Detalhes da Solicitação:</strong></p>
            <ul>
                <li><strong>Horas:</strong> {escape(mov.get("hora_total") or "")}</li>
                <li><strong>Motivo:</strong> {escape(mov.get("motivo") or "")}</li>
            </ul>
        """
        return Email([destinatario], f"Sua Solicitação de Horas foi {status}", html)

    @staticmethod
    def email_lancamento_admin(mov: dict, destinatario: str, primeiro_nome: str, ator_nome: str) -> Email:
        html = f"""
            <p>Olá {escape(primeiro_nome or "")},</p>
            <p>O administrador <strong>{escape(ator_nome or "")}</strong> registrou uma nova movimentação de horas em seu nome.</p>
            <p><strong>Detalhes da Movimentação:</strong></p>
            <ul>
                <li><strong>Data:</strong> {_data_br(mov.get("data_movimentacao"))}</li>
                <li><strong>Horas:</strong> {escape(mov.get("hora_total") or "")} ({_tipo(mov)})</li>
                <li><strong>Motivo:</strong> {escape(mov.get("motivo") or "")}</li>
            </ul>
        """
        return Email([destinatario], "Uma nova movimentação de horas foi registrada para você", html)

    @staticmethod
    def email_redefinir_senha(destinatario: str, primeiro_nome: str, token: str) -> Email:
        link = f"{APP_URL}/auth/resetar-senha/{token}"
        horas = max(RESET_PASSWORD_EXPIRE_MINUTES // 60, 1)
        html = f"""
            <p>Olá {escape(primeiro_nome or "")},</p>
            <p>Recebemos um pedido para redefinir a sua senha. Clique no link abaixo para escolher uma nova senha:</p>
            <p><a href="{link}">{link}</a></p>
            <p>O link é válido por {horas} hora(s). Se você não fez este pedido, ignore este email.</p>
        """
        texto = f"Para redefinir a sua senha acesse: {link}"
        return Email([destinatario], "Redefinição de senha - Banco de Horas", html, texto)

    # ------------------------------------------------------------
    # Atalhos usados pelos routers (BackgroundTasks)
    # ------------------------------------------------------------

    async def nova_movimentacao_para_admins(self, mov: dict, admins: List[str]) -> bool:
        return await self.enviar(self.email_nova_movimentacao(mov, admins))

    async def status_para_colaborador(
        self, mov: dict, destinatario: str, primeiro_nome: str, ator_nome: str, status: str
    ) -> bool:
        return await self.enviar(self.email_status_colaborador(mov, destinatario, primeiro_nome, ator_nome, status))

    async def lancamento_admin_para_colaborador(
        self, mov: dict, destinatario: str, primeiro_nome: str, ator_nome: str
    ) -> bool:
        return await self.enviar(self.email_lancamento_admin(mov, destinatario, primeiro_nome, ator_nome))

    async def link_redefinicao_senha(self, destinatario: str, primeiro_nome: str, token: str) -> bool:
        return await self.enviar(self.email_redefinir_senha(destinatario, primeiro_nome, token))


_notification_service: Optional[NotificationService] = None


def get_notification_service() -> NotificationService:
    """Singleton usado pelos routers (sobrescrito nos testes)."""
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService()
    return _notification_service


def emails_administradores(db) -> List[str]:
    """Emails dos administradores ativos."""
    linhas = db.query(User.email).filter(User.is_staff.is_(True), User.is_active.is_(True)).all()
    return [email for (email,) in linhas if email]
