"""
Dépendances FastAPI: exposent les ressources construites au démarrage (app.state).
Surchargées en tests via app.dependency_overrides ou create_app(...).
"""
from fastapi import Request

from hyperpay_backend.config import Settings
from hyperpay_backend.payments.gateway_client import HyperPayClient
from hyperpay_backend.payments.repository import SupabaseOrderStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway(request: Request) -> HyperPayClient:
    return request.app.state.gateway


def get_order_store(request: Request) -> SupabaseOrderStore:
    return request.app.state.order_store
