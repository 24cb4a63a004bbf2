"""
Accès aux données pour la feature 'payments' (Supabase / PostgREST).
- cart_items: lignes de panier, portée (buyer_id, supplier_id)
- orders: commandes, clé primaire transaction_id
"""
from typing import Any, Dict, List, Optional, Sequence
import logging

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from hyperpay_backend.errors import StoreError
from hyperpay_backend.payments.models import Order

logger = logging.getLogger(__name__)

# module hyperpay_backend.payments.repository
CART_ITEMS_TABLE = "cart_items"
ORDERS_TABLE = "orders"

UNIQUE_VIOLATION = "23505"

_STORE_ERRORS = (APIError, httpx.HTTPError)


class SupabaseOrderStore:
    """
    Store des paniers et commandes, injecté dans le coordinateur de fulfillment.
    Le client Supabase est long-vivant: construit au démarrage, partagé entre requêtes.
    """

    def __init__(self, client: Client):
        self.client = client

    def fetch_cart_items(self, buyer_id: str, supplier_id: str) -> List[Dict[str, Any]]:
        """
        Snapshot du panier de l'acheteur pour un fournisseur, ordonné par id.
        - Retourne [] si le panier est vide (pas une erreur).
        """
        try:
            res = (
                self.client
                .table(CART_ITEMS_TABLE)
                .select("*")
                .eq("buyer_id", buyer_id)
                .eq("supplier_id", supplier_id)
                .order("id")
                .execute()
            )
        except _STORE_ERRORS as exc:
            logger.exception("payments.repository.fetch_cart_items failed buyer_id=%s supplier_id=%s", buyer_id, supplier_id)
            raise StoreError("Lecture du panier impossible", details=str(exc)) from exc
        return list(res.data or [])

    def create_order(self, order: Order) -> bool:
        """
        Écrit la commande si absente (clé primaire transaction_id).
        - True: ligne créée
        - False: une commande existe déjà pour ce transaction_id (violation d'unicité 23505)
        """
        try:
            (
                self.client
                .table(ORDERS_TABLE)
                .insert(order.to_record())
                .execute()
            )
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                return False
            logger.exception("payments.repository.create_order failed transaction_id=%s", order.transaction_id)
            raise StoreError("Écriture de la commande impossible", details=str(exc)) from exc
        except httpx.HTTPError as exc:
            logger.exception("payments.repository.create_order failed transaction_id=%s", order.transaction_id)
            raise StoreError("Écriture de la commande impossible", details=str(exc)) from exc
        return True

    def get_order(self, transaction_id: str) -> Optional[Dict[str, Any]]:
        try:
            res = (
                self.client
                .table(ORDERS_TABLE)
                .select("*")
                .eq("transaction_id", transaction_id)
                .limit(1)
                .execute()
            )
        except _STORE_ERRORS as exc:
            logger.exception("payments.repository.get_order failed transaction_id=%s", transaction_id)
            raise StoreError("Lecture de la commande impossible", details=str(exc)) from exc
        rows = res.data or []
        return rows[0] if rows else None

    def delete_cart_items(self, buyer_id: str, supplier_id: str, item_ids: Sequence[Any]) -> int:
        """
        Supprime les lignes lues dans le snapshot, en une seule instruction DELETE (tout ou rien).
        - item_ids vide: aucun appel (no-op), retourne 0.
        """
        ids = [i for i in item_ids if i is not None]
        if not ids:
            return 0
        try:
            (
                self.client
                .table(CART_ITEMS_TABLE)
                .delete()
                .eq("buyer_id", buyer_id)
                .eq("supplier_id", supplier_id)
                .in_("id", ids)
                .execute()
            )
        except _STORE_ERRORS as exc:
            logger.exception("payments.repository.delete_cart_items failed buyer_id=%s supplier_id=%s", buyer_id, supplier_id)
            raise StoreError("Suppression du panier impossible", details=str(exc)) from exc
        return len(ids)

    def table_status(self, name: str) -> Dict[str, Any]:
        """Sonde de santé: lit au plus une ligne de la table."""
        try:
            res = self.client.table(name).select("*").limit(1).execute()
            return {"ok": True, "rows": len(res.data or [])}
        except _STORE_ERRORS as exc:
            return {"ok": False, "error": str(exc)}
