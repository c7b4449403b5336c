"""Rotas HTTP da API.

Estrutura:
- routes/health/: liveness e readiness
- routes/sessions/: bootstrap e listagem de sessões

Agregação:
- router.py: registra todos os routers no app principal
"""

from __future__ import annotations

from api.routes.router import create_api_router

__all__ = ["create_api_router"]
