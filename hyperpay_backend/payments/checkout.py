"""
Construction des paramètres de checkout HyperPay (logique pure: pas de HTTP, pas de DB).
"""
import time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Mapping
from uuid import uuid4

from hyperpay_backend.config import Settings
from hyperpay_backend.errors import ValidationError

# module hyperpay_backend.payments.checkout
DEFAULT_EMAIL = "buyer@example.com"
# (paramètre HyperPay, champ d'entrée, défaut)
BILLING_FIELDS = (
    ("billing.street1", "street", "King Fahad Road"),
    ("billing.city", "city", "Riyadh"),
    ("billing.state", "state", "Riyadh"),
    ("billing.country", "country", "SA"),
    ("billing.postcode", "postcode", "12345"),
)

# 3-D Secure v2 et standing instruction: fixés par le domaine, jamais fournis par l'appelant
FIXED_PARAMETERS = {
    "paymentType": "DB",
    "customParameters[3DS2_enrolled]": "true",
    "customParameters[3DS2_scenario]": "02",
    "standingInstruction.mode": "INITIAL",
    "standingInstruction.type": "UNSCHEDULED",
}


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def format_amount(raw: Any) -> str:
    """
    Formate un montant avec exactement deux décimales ("100" -> "100.00").
    - Accepte str|int|float.
    - Lève ValidationError si le montant est vide, non numérique ou <= 0.
    """
    if isinstance(raw, bool):
        raise ValidationError("amount doit être numérique")
    text = _text(raw)
    if not text:
        raise ValidationError("Missing required fields: name or amount")
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValidationError(f"amount doit être numérique: {text!r}")
    if not amount.is_finite():
        raise ValidationError(f"amount doit être un nombre positif: {text!r}")
    try:
        rounded = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"amount hors limites: {text!r}")
    # contrôle sur la valeur envoyée à la passerelle
    if rounded <= 0:
        raise ValidationError(f"amount doit être un nombre positif: {text!r}")
    return str(rounded)


def new_merchant_transaction_id() -> str:
    """Identifiant marchand unique par appel (horodatage ms + suffixe aléatoire)."""
    return f"txn_{int(time.time() * 1000)}_{uuid4().hex[:8]}"


def build_checkout_params(payload: Mapping[str, Any], settings: Settings) -> Dict[str, str]:
    """
    Normalise les champs acheteur/facturation en paramètres HyperPay complets.
    - Requis: name, amount (ValidationError sinon).
    - Optionnels (trim puis défaut si vide): email, street, city, state, country, postcode.
    - Ajoute entityId, currency, merchantTransactionId et les paramètres 3DS2 fixes.
    """
    payload = payload or {}
    name = _text(payload.get("name"))
    if not name or _text(payload.get("amount")) == "":
        raise ValidationError("Missing required fields: name or amount")
    amount = format_amount(payload.get("amount"))

    params: Dict[str, str] = {
        "entityId": settings.entity_id,
        "amount": amount,
        "currency": settings.currency,
        "merchantTransactionId": new_merchant_transaction_id(),
        "customer.email": _text(payload.get("email")) or DEFAULT_EMAIL,
        "customer.givenName": name,
        "customer.surname": name,
    }
    for param, key, default in BILLING_FIELDS:
        params[param] = _text(payload.get(key)) or default
    params.update(FIXED_PARAMETERS)
    return params
