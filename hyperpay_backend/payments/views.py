import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from hyperpay_backend.config import Settings
from hyperpay_backend.errors import PaymentBridgeError, ValidationError
from hyperpay_backend.payments import service as payments_service
from hyperpay_backend.payments.gateway_client import HyperPayClient
from hyperpay_backend.payments.repository import SupabaseOrderStore
from hyperpay_backend.payments.results import PaymentOutcome
from hyperpay_backend.utils.dependencies import get_gateway, get_order_store, get_settings
from hyperpay_backend.utils.rate_limit import optional_rate_limit

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Payments API"])


async def _json_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def payment_failed_url(settings: Settings, code: str, description: str) -> str:
    return f"{settings.frontend_url}/payment-failed?error={quote(code, safe='')}&message={quote(description, safe='')}"


def order_details_url(settings: Settings, order_id: str, supplier_id: str) -> str:
    return f"{settings.frontend_url}/order-details/{quote(order_id, safe='')}?supplierId={quote(supplier_id, safe='')}"


# module hyperpay_backend.payments.views
@router.post("/create-checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_checkout(
    request: Request,
    settings: Settings = Depends(get_settings),
    gateway: HyperPayClient = Depends(get_gateway),
):
    """
    Crée une session de checkout HyperPay.
    - Entrée JSON: { "amount", "name", "email"?, "street"?, "city"?, "state"?, "country"?, "postcode"? }
    - Réponse: { "checkoutId": "<id>" } à transmettre au widget
    - Erreurs: 400 si name/amount manquant (aucun appel passerelle), 500 passerelle/configuration
    """
    body = await _json_body(request)
    session = await run_in_threadpool(
        payments_service.initiate_checkout, body, settings=settings, gateway=gateway
    )
    return {"checkoutId": session.checkout_id}


@router.get("/payment-status")
def payment_status(
    resource_path: Optional[str] = Query(None, alias="resourcePath"),
    buyer_id: Optional[str] = Query(None, alias="buyerId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    supplier_id: Optional[str] = Query(None, alias="supplierId"),
    settings: Settings = Depends(get_settings),
    gateway: HyperPayClient = Depends(get_gateway),
    store: SupabaseOrderStore = Depends(get_order_store),
):
    """
    Retour du shopper depuis le widget: vérifie une fois, persiste la commande, vide le panier, redirige.
    - userId accepté comme alias historique de buyerId
    - declined: 302 vers /payment-failed?error=<code>&message=<description>
    - approved: 302 vers /order-details/<transactionId>?supplierId=<supplierId>
    - Erreurs: 400 si paramètres manquants, 500 texte "Error verifying payment" sinon
    """
    try:
        resolution = payments_service.resolve_payment(
            resource_path, buyer_id or user_id, supplier_id, gateway=gateway, store=store
        )
    except ValidationError:
        raise
    except PaymentBridgeError as e:
        logger.error("payments.payment_status failed: %s details=%s", e.message, e.details)
        return PlainTextResponse("Error verifying payment", status_code=500)
    except Exception:
        logger.exception("Erreur payment_status")
        return PlainTextResponse("Error verifying payment", status_code=500)

    result = resolution.result
    if resolution.outcome is not PaymentOutcome.APPROVED:
        url = payment_failed_url(settings, result.result_code, result.result_description)
    else:
        url = order_details_url(settings, resolution.order.order_id, resolution.order.supplier_id)
    return RedirectResponse(url=url, status_code=302)


@router.post("/verify-payment")
async def verify_payment(request: Request, gateway: HyperPayClient = Depends(get_gateway)):
    """
    Vérification sans effet de bord (affichage du statut côté client).
    - Entrée JSON: { "resourcePath": "/v1/checkouts/<id>/payment" }
    - Erreurs: 400 {success: false, error} si resourcePath manquant/invalide,
      500 {success: false, error, details} si la passerelle échoue
    """
    body = await _json_body(request)
    try:
        return await run_in_threadpool(
            payments_service.verify_payment, body.get("resourcePath"), gateway=gateway
        )
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"success": False, "error": e.message})
    except PaymentBridgeError as e:
        logger.error("payments.verify_payment failed: %s details=%s", e.message, e.details)
        return JSONResponse(
            status_code=e.status_code,
            content={"success": False, "error": "Verification failed", "details": e.details},
        )
    except Exception:
        logger.exception("Erreur verify_payment")
        return JSONResponse(status_code=500, content={"success": False, "error": "Verification failed"})
