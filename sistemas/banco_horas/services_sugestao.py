# sistemas/banco_horas/services_sugestao.py
"""
Envio de sugestões dos administradores como issues no GitHub.
"""

from typing import Optional

import httpx

from config import GITHUB_TOKEN, GITHUB_REPO_OWNER, GITHUB_REPO_NAME, GITHUB_API_URL
from utils.logging_config import get_logger

from .exceptions import DadosInvalidosError, IntegracaoError

logger = get_logger(__name__)

CATEGORIA_OUTRO = "Outro"
GITHUB_TIMEOUT = 15.0


def categoria_final(categoria: Optional[str], categoria_outro: Optional[str] = None) -> str:
    """'Outro' usa o texto livre informado pelo usuário."""
    categoria = (categoria or "").strip()
    if categoria == CATEGORIA_OUTRO:
        return (categoria_outro or "").strip() or CATEGORIA_OUTRO
    return categoria


def montar_issue(
    nome: str,
    categoria: str,
    detalhes: str,
    categoria_outro: Optional[str] = None,
    anexo_url: Optional[str] = None,
) -> dict:
    """Payload da API de issues: título, corpo em markdown e labels."""
    final = categoria_final(categoria, categoria_outro)
    corpo = (
        f"**Enviado por:** {nome}\n"
        f"**Categoria:** {final}\n\n"
        "---\n\n"
        "### Detalhes:\n"
        f"{detalhes}\n"
    )
    if anexo_url:
        corpo += f"\n---\n### Anexo:\n[Ver anexo]({anexo_url})\n"

    return {
        "title": f"[Sugestão] {final}: Enviado por {nome}",
        "body": corpo,
        "labels": ["feedback", (categoria or "").strip().lower()],
    }


class GitHubIssuesClient:
    """Cliente mínimo da API REST de issues"""

    def __init__(
        self,
        token: str = GITHUB_TOKEN,
        owner: str = GITHUB_REPO_OWNER,
        repo: str = GITHUB_REPO_NAME,
        api_url: str = GITHUB_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self.owner = owner
        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self._transport = transport

    @property
    def configurado(self) -> bool:
        return bool(self.token and self.owner and self.repo)

    async def criar_issue(self, payload: dict) -> dict:
        """
        Cria a issue e devolve o JSON da resposta.

        Raises:
            IntegracaoError: integração não configurada, falha de rede ou
                resposta de erro do GitHub
        """
        if not self.configurado:
            raise IntegracaoError("Integração com o GitHub não configurada.")

        url = f"{self.api_url}/repos/{self.owner}/{self.repo}/issues"
        headers = {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github.v3+json",
        }
        try:
            async with httpx.AsyncClient(timeout=GITHUB_TIMEOUT, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Erro de comunicação com o GitHub: {type(e).__name__}: {e}")
            raise IntegracaoError(f"Erro do GitHub: falha de comunicação ({type(e).__name__}).")

        try:
            dados = response.json()
        except ValueError:
            dados = {}

        if response.status_code >= 400:
            mensagem = dados.get("message") or "Falha ao criar a issue."
            logger.error(f"GitHub respondeu {response.status_code}: {mensagem}")
            raise IntegracaoError(f"Erro do GitHub: {mensagem}")

        logger.info("Issue criada no GitHub", numero=dados.get("number"))
        return dados


async def enviar_sugestao(
    nome: str,
    categoria: str,
    detalhes: str,
    categoria_outro: Optional[str] = None,
    anexo_url: Optional[str] = None,
    client: Optional[GitHubIssuesClient] = None,
) -> dict:
    """Valida os campos e cria a issue. Retorna o JSON da issue."""
    if not (nome or "").strip() or not (categoria or "").strip() or not (detalhes or "").strip():
        raise DadosInvalidosError("Nome, categoria e detalhes são obrigatórios.")

    payload = montar_issue(nome.strip(), categoria, detalhes.strip(), categoria_outro, anexo_url)
    return await (client or GitHubIssuesClient()).criar_issue(payload)
