"""Ponto de entrada do processo: config, DI, app e ciclo de vida."""
from __future__ import annotations
import sys
from kink import di
from pydantic import ValidationError
from .core.settings import Settings
from .core.logging import configure_logging, get_logger
from .core.catalog import CatalogError
from .core.di import bootstrap_di
from .domain.services.menu_service import MenuStore
from .api.app import create_app
from .server.lifecycle import ServerLifecycle

def main() -> int:
    """Sobe o serviço e devolve o exit code. Nenhuma exceção escapa daqui."""
    try:
        settings = Settings()
    except ValidationError as e:
        configure_logging()
        get_logger().error("startup_failed", source="settings", error=str(e))
        return 1
    configure_logging(settings.log_level)
    log = get_logger()
    try:
        bootstrap_di(settings)
    except CatalogError as e:
        log.error("startup_failed", error=str(e))
        return 1

    app = create_app(di[MenuStore], settings)
    lifecycle = ServerLifecycle(app, settings.host, settings.port, settings.drain_timeout_s)
    try:
        return lifecycle.run()
    except Exception:
        log.exception("fatal_error", state=lifecycle.state.value)
        return 1

def run() -> None:
    sys.exit(main())
