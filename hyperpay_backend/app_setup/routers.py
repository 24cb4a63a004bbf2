"""
Registre central des routers.
- API: payments (create-checkout, payment-status, verify-payment)
- Health: health_router
"""
from fastapi import FastAPI
from hyperpay_backend.payments import views as payments_views
from hyperpay_backend.health.router import router as health_router


def register_routers(app: FastAPI) -> None:
    app.include_router(payments_views.router)
    app.include_router(health_router)
