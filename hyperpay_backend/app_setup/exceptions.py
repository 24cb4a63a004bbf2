"""
Gestionnaires d’exceptions.
- PaymentBridgeError (et sous-classes): {"error": message, "details": ...} avec le code HTTP de l’erreur.
- HTTPException: corps JSON FastAPI standard {"detail": ...}.
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from hyperpay_backend.errors import PaymentBridgeError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PaymentBridgeError)
    async def payment_bridge_error(request: Request, exc: PaymentBridgeError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s: %s details=%s", request.method, request.url.path,
                         exc.__class__.__name__, exc.message, exc.details)
        content = {"error": exc.message}
        if exc.details is not None:
            content["details"] = exc.details
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(HTTPException)
    async def http_exception(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)
