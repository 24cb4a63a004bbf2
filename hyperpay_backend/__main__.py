"""
Point d'entrée principal pour le backend HyperPay.

Usage:
    python -m hyperpay_backend

Ce mode lance uvicorn directement et lit quelques variables d'environnement:
- PORT: port d'écoute (par défaut 5002)
- UVICORN_RELOAD: active le reload auto en dev ("1"/"true"/"yes")
- LOG_LEVEL: niveau de logs uvicorn (ex: "info", "debug")
"""
import os
import uvicorn

from hyperpay_backend.config import load_settings


def main() -> None:
    settings = load_settings()
    # Activer le reload uniquement si explicitement demandé (ex: en local)
    reload_flag = os.environ.get("UVICORN_RELOAD", "").lower() in ("1", "true", "yes")
    log_level = os.environ.get("LOG_LEVEL", "info")
    uvicorn.run(
        "hyperpay_backend.asgi:app",
        host="0.0.0.0",
        port=settings.port,
        reload=reload_flag,
        log_level=log_level,
    )


if __name__ == "__main__":
    main()
