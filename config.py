# config.py
# -*- coding: utf-8 -*-
"""
Configurações centralizadas do Banco de Horas
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Carrega variáveis de ambiente (apenas se existir .env)
load_dotenv()

# ==================================================
# AMBIENTE
# ==================================================
ENV = os.getenv("ENV", "development")
IS_PRODUCTION = ENV == "production"

# ==================================================
# CONFIGURAÇÕES DO BANCO DE DADOS
# ==================================================
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./banco_horas.db")

# Provedores de nuvem usam postgres:// mas SQLAlchemy precisa de postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# ==================================================
# CONFIGURAÇÕES DE AUTENTICAÇÃO JWT
# ==================================================
# ATENÇÃO: Em produção, SEMPRE defina SECRET_KEY via variável de ambiente
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings
    warnings.warn("SECRET_KEY não definida! Usando chave temporária. DEFINA EM PRODUÇÃO!", RuntimeWarning)
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"

ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # 1 dia

# Chave da sessão usada pelas mensagens flash
SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY", SECRET_KEY)

# Validade do link de redefinição de senha
RESET_PASSWORD_EXPIRE_MINUTES = int(os.getenv("RESET_PASSWORD_EXPIRE_MINUTES", "60"))

# Credenciais do admin inicial (DEVEM ser definidas via variáveis de ambiente em produção)
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@empresa.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
if not ADMIN_PASSWORD:
    import warnings
    warnings.warn("ADMIN_PASSWORD não definida! Usando senha padrão insegura.", RuntimeWarning)
    ADMIN_PASSWORD = "admin123"

DEFAULT_USER_PASSWORD = os.getenv("DEFAULT_USER_PASSWORD", "mudar123")  # Senha padrão para novos colaboradores

# ==================================================
# CONFIGURAÇÕES DE EMAIL (SMTP)
# ==================================================
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_FROM = os.getenv("SMTP_FROM", "banco-horas@empresa.com")
SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "false").lower() == "true"
SMTP_START_TLS = os.getenv("SMTP_START_TLS", "true").lower() == "true"

# URL pública usada nos links dos emails
APP_URL = os.getenv("APP_URL", "http://localhost:8000")

# ==================================================
# CONFIGURAÇÕES DO GITHUB (Sugestões)
# ==================================================
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN", "")
GITHUB_REPO_OWNER = os.getenv("GITHUB_REPO_OWNER", "")
GITHUB_REPO_NAME = os.getenv("GITHUB_REPO_NAME", "")
GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com")

# ==================================================
# CONFIGURAÇÕES DE ARQUIVOS
# ==================================================
BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "frontend" / "templates"
UPLOAD_FOLDER = Path(os.getenv("UPLOAD_FOLDER", str(BASE_DIR / "uploads")))
ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif"}
ALLOWED_MIME_TYPES = {"image/jpeg", "image/png", "image/gif"}
MAX_CONTENT_LENGTH = 2 * 1024 * 1024  # 2MB

# Anexos das sugestões
MAX_ANEXO_LENGTH = 5 * 1024 * 1024  # 5MB

# ==================================================
# REGRAS DO BANCO DE HORAS
# ==================================================
# Janela em que envios idênticos são tratados como duplicados
JANELA_DUPLICIDADE_MINUTOS = int(os.getenv("JANELA_DUPLICIDADE_MINUTOS", "5"))

# Carga horária diária quando o perfil não tem expediente definido
CARGA_HORARIA_PADRAO_MINUTOS = 8 * 60
INTERVALO_ALMOCO_MINUTOS = 60
JORNADA_MINIMA_COM_ALMOCO_MINUTOS = 6 * 60
