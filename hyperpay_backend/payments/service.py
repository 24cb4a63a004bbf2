"""
Cas d'usage 'payments': orchestre checkout, passerelle HyperPay, classification et repository.
"""
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
import logging

from hyperpay_backend.config import Settings
from hyperpay_backend.errors import StoreError, ValidationError
from hyperpay_backend.payments import checkout
from hyperpay_backend.payments.gateway_client import HyperPayClient, validate_resource_path
from hyperpay_backend.payments.models import GatewaySession, GatewayTransactionResult, Order
from hyperpay_backend.payments.repository import SupabaseOrderStore
from hyperpay_backend.payments.results import PaymentOutcome, classify_result

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentResolution:
    outcome: PaymentOutcome
    result: GatewayTransactionResult
    order: Optional[Order] = None


def initiate_checkout(payload: Mapping[str, Any], *, settings: Settings, gateway: HyperPayClient) -> GatewaySession:
    """
    Valide et normalise la demande, puis crée la session HyperPay.
    Aucun appel passerelle si name/amount manquent (ValidationError).
    """
    params = checkout.build_checkout_params(payload, settings)
    return gateway.create_checkout(params)


def fulfill_order(result: GatewayTransactionResult, *, buyer_id: str, supplier_id: str,
                  store: SupabaseOrderStore) -> Order:
    """
    Transition unique panier -> commande, appelée seulement sur résultat approuvé.
    Ordre: snapshot du panier -> écriture de la commande -> suppression du panier.
    - La commande est créée si absente: une résolution rejouée (double clic, redirect relancé)
      garde la commande existante et ne supprime que les articles qu'elle a capturés,
      jamais ceux ajoutés au panier depuis.
    - Un échec après l'écriture laisse un panier obsolète, jamais une commande perdue:
      la commande n'est pas annulée, l'erreur remonte en StoreError.
    """
    items = store.fetch_cart_items(buyer_id, supplier_id)
    order = Order.paid(result, buyer_id=buyer_id, supplier_id=supplier_id, items=items)

    if store.create_order(order):
        if not items:
            logger.warning(
                "payments.fulfill_order empty cart transaction_id=%s buyer_id=%s supplier_id=%s",
                result.transaction_id, buyer_id, supplier_id,
            )
        logger.info("payments.fulfill_order order written transaction_id=%s items=%s", order.transaction_id, len(items))
    else:
        existing = store.get_order(order.transaction_id)
        if existing is not None:
            order = Order.from_record(existing)
        logger.info("payments.fulfill_order already fulfilled transaction_id=%s", order.transaction_id)

    try:
        store.delete_cart_items(buyer_id, supplier_id, [item.get("id") for item in order.items])
    except StoreError:
        logger.error(
            "payments.fulfill_order stale cart left after order transaction_id=%s buyer_id=%s supplier_id=%s",
            order.transaction_id, buyer_id, supplier_id,
        )
        raise
    return order


def resolve_payment(resource_path: Optional[str], buyer_id: Optional[str], supplier_id: Optional[str], *,
                    gateway: HyperPayClient, store: SupabaseOrderStore) -> PaymentResolution:
    """
    Résout le retour du shopper: lit le statut, classe le code, et crée la commande si approuvé.
    - declined: aucune mutation de panier ni de commande.
    """
    buyer_id = (buyer_id or "").strip()
    supplier_id = (supplier_id or "").strip()
    if not resource_path or not buyer_id or not supplier_id:
        raise ValidationError("Missing resourcePath, buyerId or supplierId")
    path = validate_resource_path(resource_path)

    result = gateway.fetch_resource_status(path)
    outcome = classify_result(result.result_code)
    if outcome is not PaymentOutcome.APPROVED:
        logger.info(
            "payments.resolve_payment declined transaction_id=%s code=%s description=%s",
            result.transaction_id, result.result_code, result.result_description,
        )
        return PaymentResolution(outcome=outcome, result=result)

    order = fulfill_order(result, buyer_id=buyer_id, supplier_id=supplier_id, store=store)
    return PaymentResolution(outcome=outcome, result=result, order=order)


def verify_payment(resource_path: Optional[str], *, gateway: HyperPayClient) -> Dict[str, Any]:
    """
    Lecture seule du statut (affichage côté client), sans aucune persistance.
    """
    path = validate_resource_path(resource_path)
    result = gateway.fetch_resource_status(path)
    return {
        "success": True,
        "transactionId": result.transaction_id,
        "result": {"code": result.result_code, "description": result.result_description},
        "amount": result.amount,
        "paymentType": result.payment_type,
        "cardBrand": result.card_brand,
        "customerName": result.buyer_name,
        "customerEmail": result.buyer_email,
        "billing": result.billing,
        "resourcePath": path,
    }
