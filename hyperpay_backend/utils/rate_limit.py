from typing import Optional, Dict, Any, List
from fastapi import Request, HTTPException
import os
import time


def _client_key(req: Request) -> str:
    """
    Clé de limitation: adresse client + chemin.
    X-Forwarded-For (premier hop) n'est lu que si TRUST_PROXY_HEADERS=1,
    c.-à-d. quand l'app tourne derrière un proxy qui réécrit cet en-tête.
    """
    ip = req.client.host if req.client else "local"
    if os.getenv("TRUST_PROXY_HEADERS") == "1":
        forwarded = (req.headers.get("x-forwarded-for") or "").split(",")[0].strip()
        ip = forwarded or ip
    return f"ip:{ip}:{req.url.path}"


def _local_hit(request: Request, times: int, seconds: int) -> None:
    """Fenêtre glissante en mémoire; les clés sans hit récent sont supprimées."""
    now = time.time()
    stores: Dict[int, Dict[str, List[float]]] = getattr(request.app.state, "_rl_store", {})
    request.app.state._rl_store = stores
    store = stores.setdefault(seconds, {})
    for k in list(store):
        fresh = [t for t in store[k] if now - t < seconds]
        if fresh:
            store[k] = fresh
        else:
            del store[k]
    key = _client_key(request)
    hits = store.get(key, [])
    if len(hits) >= times:
        raise HTTPException(status_code=429, detail="Too Many Requests")
    hits.append(now)
    store[key] = hits


def optional_rate_limit(times: int, seconds: int):
    async def _dep(request: Request):
        # Forcer le fallback mémoire en DEV si demandé
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            _local_hit(request, times, seconds)
            return

        # Respecter le flag global
        disabled_flag = getattr(request.app.state, "rate_limit_enabled", None) is False
        if disabled_flag:
            return

        # Utiliser fastapi-limiter si dispo
        try:
            from fastapi_limiter.depends import RateLimiter
            async def _identifier(req: Request) -> str:
                return _client_key(req)
            return await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request)
        except HTTPException:
            raise
        except Exception:
            # Si fastapi-limiter échoue (ex: Redis indisponible), pas de 429 en prod;
            # en dev, activer LOCAL_RATE_LIMIT_FALLBACK=1
            return
    return _dep


def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)

    limiter_ready = False
    backend: Optional[str] = None
    try:
        from fastapi_limiter import FastAPILimiter
        limiter_ready = getattr(FastAPILimiter, "redis", None) is not None
        backend = "redis" if limiter_ready else None
    except ImportError:
        limiter_ready = False
        backend = None

    info: Dict[str, Any] = {
        "enabled": (bool(enabled) if enabled is not None else None),
        "ready": limiter_ready,
        "backend": backend,
    }

    if backend == "redis":
        from urllib.parse import urlparse
        redis_url = os.getenv("RATE_LIMIT_REDIS_URL")
        if redis_url:
            p = urlparse(redis_url)
            info["redis"] = {
                "scheme": p.scheme,
                "host": p.hostname,
                "port": p.port,
            }

    return info
