"""Entrypoint do processo vigia.

Uso:
    vigia --bootstrap-path sessions.yaml
    python -m app.main --log-level DEBUG

Sequência:
    logging → config → composition root → start() → bootstrap das sessões
    pré-definidas → listen_for_shutdown(application.stop)
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from typing import TYPE_CHECKING

from app.bootstrap import build_application, initialize_app, validate_runtime_settings
from app.bootstrap.sessions_loader import load_session_requests
from config.settings import load_app_config
from utils.errors import (
    BootstrapFileError,
    BootstrapStageError,
    ConfigurationError,
    StartError,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from app.controller import Application
    from config.settings import AppConfig

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="vigia",
        description="Controlador de bootstrap e ciclo de vida de sessões de monitoramento",
    )
    parser.add_argument(
        "--bootstrap-path",
        default=None,
        help="Arquivo YAML/JSON com sessões a iniciar no boot (sobrescreve BOOTSTRAP_PATH)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Nível de log (sobrescreve LOG_LEVEL)",
    )
    return parser.parse_args(argv)


def _load_config(args: argparse.Namespace) -> AppConfig:
    try:
        config = load_app_config()
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    if args.log_level:
        config = dataclasses.replace(
            config, base=dataclasses.replace(config.base, log_level=args.log_level.upper())
        )
    if args.bootstrap_path:
        config = dataclasses.replace(
            config,
            bootstrap=dataclasses.replace(config.bootstrap, bootstrap_path=args.bootstrap_path),
        )
    return config


async def _bootstrap_preset_sessions(application: Application) -> None:
    path = application.config.bootstrap.bootstrap_path
    if not path:
        logger.info("bootstrap_file_not_configured", extra={"component": "main"})
        return

    requests = load_session_requests(path)
    heuristic_ids = await application.bootstrap(requests)
    logger.info(
        "preset_sessions_started",
        extra={"component": "main", "path": path, "sessions": len(heuristic_ids)},
    )


async def _run(application: Application) -> None:
    application.request_shutdown_channel()
    await application.start()
    try:
        await _bootstrap_preset_sessions(application)
    except (BootstrapFileError, BootstrapStageError):
        # O erro do bootstrap prevalece sobre falhas de teardown
        try:
            await application.stop()
        except Exception as exc:
            logger.error(
                "teardown_after_bootstrap_failed",
                extra={"component": "main", "error_type": type(exc).__name__},
            )
        raise
    await application.listen_for_shutdown(application.stop)


def main(argv: Sequence[str] | None = None) -> int:
    """Executa o processo até o sinal de término.

    Returns:
        Código de saída (0 = encerramento limpo, 1 = falha de boot).
    """
    args = _parse_args(argv)
    try:
        config = _load_config(args)
        initialize_app(level=config.base.log_level, service_name=config.base.service_name)
        validate_runtime_settings(config)
    except (ConfigurationError, ValueError) as exc:
        print(f"vigia: configuração inválida: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    application = build_application(config)
    try:
        asyncio.run(_run(application))
    except StartError as exc:
        logger.error(
            "app_start_aborted",
            extra={"component": "main", "step": exc.step, "error": str(exc)},
        )
        return EXIT_FAILURE
    except BootstrapStageError as exc:
        logger.error("preset_bootstrap_failed", extra={"component": "main", **exc.as_dict()})
        return EXIT_FAILURE
    except BootstrapFileError as exc:
        logger.error("bootstrap_file_invalid", extra={"component": "main", "error": str(exc)})
        return EXIT_FAILURE

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
