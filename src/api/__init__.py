"""API: camada de borda HTTP.

Responsabilidades:
- Receber requests de bootstrap de sessões e traduzir para Application.bootstrap()
- Expor health/readiness
- Servir o app FastAPI via uvicorn (api.server)

NÃO PODE conter: regras de pipeline, ordem de start, política de shutdown.
"""
