"""
Middlewares transverses de l’application.
- register_basic_middlewares: CORS (la vitrine appelle l’API depuis une autre origine).
- register_security_middleware: en-têtes de sécurité et CSP autorisant le widget HyperPay.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from hyperpay_backend.config import Settings


def register_basic_middlewares(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def build_csp(widget_origin: str) -> str:
    """CSP: le widget HyperPay charge ses scripts, iframes et appels XHR depuis son origine."""
    return "; ".join([
        "default-src 'self'",
        f"script-src 'self' 'unsafe-inline' 'unsafe-eval' {widget_origin}",
        f"connect-src 'self' {widget_origin}",
        f"frame-src 'self' {widget_origin}",
        "img-src 'self' data: https://*",
    ])


def register_security_middleware(app: FastAPI, settings: Settings) -> None:
    """
    En-têtes: X-Content-Type-Options, Referrer-Policy, Permissions-Policy, CSP.
    Les en-têtes déjà posés par une route ne sont pas écrasés.
    """
    csp = build_csp(settings.gateway_origin)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        if "X-Content-Type-Options" not in response.headers:
            response.headers["X-Content-Type-Options"] = "nosniff"
        if "Referrer-Policy" not in response.headers:
            response.headers["Referrer-Policy"] = "no-referrer"
        if "Permissions-Policy" not in response.headers:
            response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        if "Content-Security-Policy" not in response.headers:
            response.headers["Content-Security-Policy"] = csp
        return response
