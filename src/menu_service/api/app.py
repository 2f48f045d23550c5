"""API Flask: listagem do cardápio, health check e rota raiz informativa."""
from __future__ import annotations
from datetime import datetime, timezone
from flask import Flask, request, jsonify
from kink import di
from werkzeug.exceptions import InternalServerError
from ..core.logging import set_trace_id, get_logger, trace_id_ctx
from ..core.settings import Settings
from ..domain.services.menu_service import MenuStore, get_menu

log = get_logger()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
}

def utc_now_iso() -> str:
    """Instante atual em ISO-8601 UTC com milissegundos e sufixo Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

def create_app(store: MenuStore | None = None, settings: Settings | None = None) -> Flask:
    """Cria o app com o MenuStore injetado (padrão: o registrado no container)."""
    store = store if store is not None else di[MenuStore]
    settings = settings or di[Settings]

    app = Flask(__name__)
    # mantém a ordem dos campos do MenuItem no JSON
    app.json.sort_keys = False

    @app.before_request
    def _trace():
        set_trace_id(request.headers.get("X-Trace-Id"))

    @app.after_request
    def _cors(response):
        # vale para toda resposta, inclusive 404/405/500
        response.headers.update(CORS_HEADERS)
        response.headers["X-Trace-Id"] = trace_id_ctx.get()
        return response

    @app.errorhandler(InternalServerError)
    def _internal_error(e):
        original = getattr(e, "original_exception", None)
        log.error("unhandled_exception", path=request.path, error=repr(original) if original else str(e))
        return jsonify({"success": False, "message": "Internal server error"}), 500

    @app.get("/")
    def root():
        """Descrição do serviço."""
        return {"message": "Menu Service is running", "endpoints": ["/api/menu", "/health"], "port": settings.port}

    @app.get("/api/menu")
    def list_menu():
        """Cardápio completo. Falha na serialização vira 500 com corpo descritivo."""
        try:
            data = get_menu(store)
            response = jsonify({"success": True, "data": data, "count": len(data)})
        except Exception as e:
            log.error("menu_list_failed", error=str(e))
            return jsonify({"success": False, "message": "Error retrieving menu data", "error": str(e)}), 500
        log.info("menu_listed", count=len(data))
        return response

    @app.get("/health")
    def health():
        """Health check (liveness)."""
        return {"status": "OK", "timestamp": utc_now_iso()}

    return app
