"""Factory da aplicação FastAPI.

A Application é injetada explicitamente e fica em ``app.state.application``;
as rotas a obtêm via ``api.dependencies.get_application``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import RequestResponseEndpoint

from api.routes import create_api_router
from app.observability import get_correlation_id, reset_correlation_id, set_correlation_id

if TYPE_CHECKING:
    from app.controller import Application

CORRELATION_HEADER = "x-correlation-id"


def create_api_app(application: Application | None = None) -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Args:
        application: Controlador do processo. Pode ser anexado depois via
            ``attach_application`` (o servidor é criado antes da Application).

    Returns:
        Aplicação FastAPI configurada.
    """
    fastapi_app = FastAPI(
        title="vigia",
        description="Bootstrap e ciclo de vida de sessões de monitoramento",
        version="1.0.0",
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
    )
    fastapi_app.state.application = application

    @fastapi_app.middleware("http")
    async def correlation_middleware(
        request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        token = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        correlation_id = get_correlation_id()
        try:
            response = await call_next(request)
        finally:
            reset_correlation_id(token)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response

    fastapi_app.include_router(create_api_router())
    return fastapi_app


def attach_application(fastapi_app: FastAPI, application: Application) -> None:
    """Vincula a Application ao app FastAPI já criado."""
    fastapi_app.state.application = application
