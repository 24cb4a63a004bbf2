"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Settings: chargés et validés une fois (ConfigurationError => le process ne démarre pas).
- HyperPayClient (httpx) et store Supabase: construits ici, injectés via app.state.
- FastAPILimiter (Redis) avec options de test (fakeredis).
Variables d’environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement le rate limiting (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l’init échoue
"""
import os
import logging
import redis.asyncio as redis
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from hyperpay_backend.config import load_settings
from hyperpay_backend.infra.supabase_client import create_service_supabase
from hyperpay_backend.payments.gateway_client import HyperPayClient
from hyperpay_backend.payments.repository import SupabaseOrderStore

logger = logging.getLogger("uvicorn.error")


def _init_state(app: FastAPI) -> None:
    """Complète app.state avec ce que create_app(...) n’a pas fourni."""
    settings = getattr(app.state, "settings", None) or load_settings()
    app.state.settings = settings.validate()
    if getattr(app.state, "gateway", None) is None:
        app.state.gateway = HyperPayClient(settings)
        app.state.owns_gateway = True
    if getattr(app.state, "order_store", None) is None:
        app.state.order_store = SupabaseOrderStore(create_service_supabase(settings))
    logger.info("HyperPay backend (%s) configured, gateway=%s", settings.hyperpay_env, settings.gateway_origin)


async def _init_rate_limiter(app: FastAPI) -> None:
    """
    Configure le rate limiting et gère les fallbacks.
    - En cas d’échec de Redis et sans fallback, le rate limiting est désactivé proprement.
    """
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        return
    try:
        if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
            from fakeredis.aioredis import FakeRedis
            r = FakeRedis(decode_responses=True)
        else:
            redis_url = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")
            r = redis.from_url(redis_url, encoding="utf-8", decode_responses=True)
        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = True
            logger.warning("Rate limiting falling back to local in-memory due to init error: %s", e)
        else:
            app.state.rate_limit_enabled = False
            logger.warning("Rate limiting disabled due to init error: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _init_state(app)
    await _init_rate_limiter(app)
    yield
    if getattr(app.state, "owns_gateway", False):
        app.state.gateway.close()
