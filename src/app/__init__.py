"""App: coração do processo (ciclo de vida, bootstrap de sessões e subsistemas).

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- controller.py: Application (start, shutdown, bootstrap)
- domain/: identificadores e modelos de sessão/pipeline
- lifecycle/: estados do processo e token de shutdown
- subsystems/: registro de heurísticas, pipelines, sessões e rotinas
- protocols/: contratos/interfaces dos colaboradores
- observability/: correlation_id e métricas
- main.py: entrypoint do processo

Padrão: app executa; api adapta; config parametriza; utils apoia.
"""
