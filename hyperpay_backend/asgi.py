"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production, un process manager (ex: gunicorn/uvicorn-workers) importe `hyperpay_backend.asgi:app`.
- La configuration est lue à l’import; sa validation a lieu au démarrage (lifespan).
"""

from hyperpay_backend.app_setup.factory import create_app

app = create_app()
