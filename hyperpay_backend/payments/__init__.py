"""
Module 'payments' (feature-first): point d'entrée public.
Réunit construction du checkout, client HyperPay, classification des résultats,
repository Supabase et services.
"""

from .checkout import build_checkout_params, format_amount, new_merchant_transaction_id
from .results import APPROVED_CODES, PaymentOutcome, classify_result, is_approved
from .gateway_client import HyperPayClient, validate_resource_path
from .models import GatewaySession, GatewayTransactionResult, Order
from .repository import SupabaseOrderStore
from .service import PaymentResolution, initiate_checkout, fulfill_order, resolve_payment, verify_payment

__all__ = [
    # checkout
    "build_checkout_params",
    "format_amount",
    "new_merchant_transaction_id",
    # results
    "APPROVED_CODES",
    "PaymentOutcome",
    "classify_result",
    "is_approved",
    # gateway
    "HyperPayClient",
    "validate_resource_path",
    # models
    "GatewaySession",
    "GatewayTransactionResult",
    "Order",
    # repository
    "SupabaseOrderStore",
    # services
    "PaymentResolution",
    "initiate_checkout",
    "fulfill_order",
    "resolve_payment",
    "verify_payment",
]
