"""Dependências FastAPI compartilhadas pelas rotas."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import HTTPException, Request, status

if TYPE_CHECKING:
    from app.controller import Application


def get_application(request: Request) -> Application:
    """Retorna a Application vinculada ao app FastAPI.

    Raises:
        HTTPException: 503 se nenhuma Application foi vinculada.
    """
    application = getattr(request.app.state, "application", None)
    if application is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="application_not_attached",
        )
    return application
