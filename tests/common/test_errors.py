# tests/common/test_errors.py
"""
Тесты таксономии ошибок и обработчиков FastAPI.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

from src.common.errors import (
    AuthenticationError,
    InternalError,
    NotFoundError,
    UpstreamError,
    ValidationError,
    format_validation_errors,
    register_exception_handlers,
)


class Payload(BaseModel):
    name: str = Field(min_length=1)
    quantity: int = Field(gt=0)


def build_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.post("/payload")
    async def payload(body: Payload):
        return body

    @app.get("/missing")
    async def missing():
        raise NotFoundError("User not found")

    @app.get("/denied")
    async def denied():
        raise AuthenticationError()

    @app.get("/crash")
    async def crash():
        raise InternalError()

    @app.get("/upstream")
    async def upstream():
        raise UpstreamError(418, b'{"error":"teapot"}', "application/json")

    return app


client = TestClient(build_app())


class TestStatusCodes:
    def test_defaults(self) -> None:
        assert ValidationError().status_code == 400
        assert AuthenticationError().status_code == 401
        assert NotFoundError().status_code == 404
        assert InternalError().status_code == 500

    def test_to_dict_includes_details_only_when_set(self) -> None:
        assert NotFoundError("x").to_dict() == {"error": "x"}
        assert ValidationError(details=[1]).to_dict() == {"error": "Invalid request payload", "details": [1]}


class TestHandlers:
    def test_app_error_rendered_as_json(self) -> None:
        response = client.get("/missing")
        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}

    def test_authentication_error(self) -> None:
        response = client.get("/denied")
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_internal_error_has_no_details(self) -> None:
        response = client.get("/crash")
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    def test_upstream_error_relayed_verbatim(self) -> None:
        response = client.get("/upstream")
        assert response.status_code == 418
        assert response.content == b'{"error":"teapot"}'
        assert response.headers["content-type"].startswith("application/json")

    def test_request_validation_lists_every_field(self) -> None:
        response = client.post("/payload", json={"name": "", "quantity": 0})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid request payload"
        assert {d["field"] for d in body["details"]} == {"name", "quantity"}

    def test_unknown_route_uses_error_format(self) -> None:
        response = client.get("/nowhere")
        assert response.status_code == 404
        assert "error" in response.json()


def test_format_validation_errors_strips_location_source() -> None:
    details = format_validation_errors([
        {"loc": ("body", "email"), "msg": "bad email"},
        {"loc": ("body",), "msg": "Field required"},
    ])
    assert details == [
        {"field": "email", "message": "bad email"},
        {"field": "body", "message": "Field required"},
    ]
