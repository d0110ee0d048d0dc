# tests/test_request_id.py
"""
Testes do RequestIDMiddleware (middleware/request_id.py)

O ID deve ser reaproveitado do proxy quando enviado, gerado caso
contrário, e ficar disponível via get_request_id só durante a requisição.
"""

import uuid

from fastapi import FastAPI
from fastapi.testclient import TestClient

from middleware.request_id import (
    MAX_REQUEST_ID_LENGTH,
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    generate_request_id,
    get_request_id,
)


def _app():
    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)

    @app.get("/eco")
    async def eco():
        return {"request_id": get_request_id()}

    return app


def test_reaproveita_header_do_proxy():
    client = TestClient(_app())
    response = client.get("/eco", headers={REQUEST_ID_HEADER: "abc-123"})

    assert response.headers[REQUEST_ID_HEADER] == "abc-123"
    assert response.json()["request_id"] == "abc-123"


def test_gera_uuid_quando_ausente():
    client = TestClient(_app())
    response = client.get("/eco")

    gerado = response.headers[REQUEST_ID_HEADER]
    assert str(uuid.UUID(gerado)) == gerado
    assert response.json()["request_id"] == gerado


def test_trunca_ids_longos():
    client = TestClient(_app())
    response = client.get("/eco", headers={REQUEST_ID_HEADER: "x" * 200})

    assert len(response.headers[REQUEST_ID_HEADER]) == MAX_REQUEST_ID_LENGTH


def test_fora_de_requisicao_nao_ha_id():
    assert get_request_id() is None


def test_ids_gerados_sao_unicos():
    assert generate_request_id() != generate_request_id()


def test_app_principal_devolve_header(client):
    response = client.get("/health", headers={REQUEST_ID_HEADER: "saude-1"})

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "banco-horas"}
    assert response.headers[REQUEST_ID_HEADER] == "saude-1"
