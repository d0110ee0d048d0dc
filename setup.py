"""
Setup script para instalação do Banco de Horas.

Este arquivo permite instalar o projeto em modo editable para desenvolvimento:
    pip install -e .[test]

Isso adiciona o projeto ao PYTHONPATH e permite imports como:
    from sistemas.banco_horas.services import calcular_saldo
"""

from setuptools import setup, find_namespace_packages

setup(
    name="banco-horas",
    version="1.0.0",
    description="Banco de Horas - controle de horas extras, folgas e escalas",
    packages=find_namespace_packages(
        include=["admin", "auth", "database", "middleware", "sistemas*", "users", "utils"]
    ),
    py_modules=["main", "config"],
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]>=0.27",
        "sqlalchemy>=2.0",
        "alembic>=1.13",
        "pydantic>=2.5",
        "python-jose[cryptography]>=3.3",
        "bcrypt>=4.0",
        "python-dotenv>=1.0",
        "python-multipart>=0.0.9",
        "jinja2>=3.1",
        "itsdangerous>=2.1",
        "structlog>=24.1",
        "slowapi>=0.1.9",
        "httpx>=0.27",
        "pytz>=2024.1",
        "reportlab>=4.0",
        "openpyxl>=3.1",
        "aiosmtplib>=3.0",
        "psycopg2-binary>=2.9",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "httpx>=0.27",
        ],
    },
)
