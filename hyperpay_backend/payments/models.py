"""
Enregistrements du domaine paiement.
- GatewaySession: identifiant de checkout émis par HyperPay (transmis au widget)
- GatewayTransactionResult: résultat final lu sur la passerelle (transitoire)
- Order: commande persistée, clé = transactionId
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

ORDER_STATUS_PAID = "Paid"


def _section(payload: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Sous-objet JSON optionnel; TypeError si la passerelle renvoie autre chose qu'un objet."""
    value = payload.get(key) or {}
    if not isinstance(value, dict):
        raise TypeError(f"{key} n'est pas un objet: {value!r}")
    return value


class GatewaySession(BaseModel):
    checkout_id: str


class GatewayTransactionResult(BaseModel):
    transaction_id: str
    result_code: str
    result_description: str = ""
    amount: Optional[str] = None
    payment_type: Optional[str] = None
    card_brand: Optional[str] = None
    buyer_email: Optional[str] = None
    buyer_name: Optional[str] = None
    billing: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_gateway(cls, payload: Dict[str, Any]) -> "GatewayTransactionResult":
        """
        Construit le résultat depuis la réponse JSON HyperPay:
        {"id", "result": {"code", "description"}, "amount", "paymentType",
         "card": {"brand"}, "customer": {"email", "givenName"}, "billing": {...}}
        """
        result = _section(payload, "result")
        card = _section(payload, "card")
        customer = _section(payload, "customer")
        amount = payload.get("amount")
        return cls(
            transaction_id=str(payload["id"]),
            result_code=str(result["code"]),
            result_description=str(result.get("description") or ""),
            amount=str(amount) if amount is not None else None,
            payment_type=payload.get("paymentType"),
            card_brand=card.get("brand"),
            buyer_email=customer.get("email"),
            buyer_name=customer.get("givenName"),
            billing=payload.get("billing") or {},
        )


class Order(BaseModel):
    transaction_id: str
    status: str = ORDER_STATUS_PAID
    payment_method: Optional[str] = None
    total_amount: str = "0"
    card_brand: str = "N/A"
    buyer_id: str
    supplier_id: str
    buyer_email: Optional[str] = None
    buyer_name: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    items: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def order_id(self) -> str:
        return self.transaction_id

    @classmethod
    def paid(cls, result: GatewayTransactionResult, *, buyer_id: str, supplier_id: str,
             items: List[Dict[str, Any]]) -> "Order":
        return cls(
            transaction_id=result.transaction_id,
            payment_method=result.payment_type,
            total_amount=result.amount if result.amount is not None else "0",
            card_brand=result.card_brand or "N/A",
            buyer_id=buyer_id,
            supplier_id=supplier_id,
            buyer_email=result.buyer_email,
            buyer_name=result.buyer_name,
            items=list(items),
        )

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Order":
        return cls(
            transaction_id=record["transaction_id"],
            status=record.get("order_status") or ORDER_STATUS_PAID,
            payment_method=record.get("payment_method"),
            total_amount=str(record.get("total_amount") or "0"),
            card_brand=record.get("card_brand") or "N/A",
            buyer_id=record["buyer_id"],
            supplier_id=record["supplier_id"],
            buyer_email=record.get("buyer_email"),
            buyer_name=record.get("buyer_name"),
            created_at=record.get("created_at") or datetime.now(timezone.utc),
            items=record.get("items") or [],
        )

    def to_record(self) -> Dict[str, Any]:
        """Ligne de la table 'orders' (colonnes snake_case, items en JSON)."""
        return {
            "transaction_id": self.transaction_id,
            "order_status": self.status,
            "payment_method": self.payment_method,
            "total_amount": self.total_amount,
            "card_brand": self.card_brand,
            "buyer_id": self.buyer_id,
            "supplier_id": self.supplier_id,
            "buyer_email": self.buyer_email,
            "buyer_name": self.buyer_name,
            "created_at": self.created_at.isoformat(),
            "items": self.items,
        }
