"""
Factory d’application recommandée pour les entrypoints (ex: hyperpay_backend.asgi).
Ordonne les étapes d’initialisation de manière lisible et testable.
"""
from typing import Optional

from fastapi import FastAPI

from hyperpay_backend.config import Settings, load_settings
from hyperpay_backend.payments.gateway_client import HyperPayClient
from hyperpay_backend.payments.repository import SupabaseOrderStore
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_security_middleware
from .exceptions import register_exception_handlers
from .routes import register_routes
from .routers import register_routers


def create_app(
    settings: Optional[Settings] = None,
    *,
    gateway: Optional[HyperPayClient] = None,
    store: Optional[SupabaseOrderStore] = None,
) -> FastAPI:
    """
    Construit l’app FastAPI avec le lifespan et enregistre:
      - middlewares CORS et sécurité (CSP du widget HyperPay)
      - gestionnaires d’exceptions et routes simples
      - routers payments et health
    Les ressources non fournies (gateway, store) sont construites par le lifespan.
    """
    settings = settings or load_settings()
    app = FastAPI(title="HyperPay backend", lifespan=lifespan)
    app.state.settings = settings
    app.state.gateway = gateway
    app.state.order_store = store
    register_basic_middlewares(app, settings)
    register_security_middleware(app, settings)
    register_exception_handlers(app)
    register_routes(app)
    register_routers(app)
    return app
