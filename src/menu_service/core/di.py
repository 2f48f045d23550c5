"""Bootstrap do container de DI (kink): Settings e o MenuStore imutável."""
from kink import di
from .settings import Settings
from .catalog import load_catalog
from ..domain.services.menu_service import MenuStore

def bootstrap_di(settings: Settings | None = None) -> None:
    settings = settings or Settings()
    di[Settings] = settings
    di[MenuStore] = load_catalog(settings.catalog_path)
