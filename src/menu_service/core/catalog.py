"""Carregador do cardápio.

- Fonte padrão: DEFAULT_MENU embutido em domain/services/menu_service.py
- Fonte opcional: arquivo JSON (lista de itens no formato de /api/menu)
- Fornece: load_catalog()
"""
from __future__ import annotations
import json
from pathlib import Path
from ..domain.services.menu_service import MenuStore, default_store
from .logging import get_logger

log = get_logger()

class CatalogError(RuntimeError):
    """Cardápio ilegível ou inválido. Falha de inicialização."""

def load_catalog(path: str | None = None) -> MenuStore:
    """Monta o MenuStore. Erros de leitura/validação viram CatalogError."""
    if not path:
        store = default_store()
        log.info("catalog_loaded", source="builtin", items=len(store))
        return store
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(raw, dict):
            # aceita também o corpo de /api/menu: {"success":..., "data":[...]}
            raw = raw.get("data", [])
        if not isinstance(raw, list):
            raise ValueError("catalog must be a JSON array of menu items")
        store = MenuStore.from_records(raw)
    except (OSError, ValueError) as e:
        raise CatalogError(f"could not load catalog {path}: {e}") from e
    log.info("catalog_loaded", source=path, items=len(store))
    return store
