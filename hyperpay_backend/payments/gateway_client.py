"""
Adaptateur HyperPay (OPPWA): centralise les appels serveur-à-serveur et leur configuration.
"""
import logging
import re
from typing import Any, Dict, Optional

import httpx
import pydantic

from hyperpay_backend.config import Settings
from hyperpay_backend.errors import ConfigurationError, GatewayError, ValidationError
from hyperpay_backend.payments.models import GatewaySession, GatewayTransactionResult

logger = logging.getLogger(__name__)

# module hyperpay_backend.payments.gateway_client
RESOURCE_PATH_RE = re.compile(r"^/v1/(checkouts/[\w.\-]+/payment|payments/[\w.\-]+)$")


def validate_resource_path(resource_path: Optional[str]) -> str:
    """
    Vérifie que resourcePath a la forme émise par HyperPay avant de l'utiliser dans une URL sortante.
    - Accepte /v1/checkouts/{id}/payment et /v1/payments/{id}
    - Refuse URL absolues, '..', query strings (ValidationError)
    - Refuse toute valeur qui n'est pas une chaîne (JSON numérique, liste...)
    """
    if resource_path is not None and not isinstance(resource_path, str):
        raise ValidationError("resourcePath doit être une chaîne")
    path = (resource_path or "").strip()
    if not path:
        raise ValidationError("Missing resourcePath")
    if ".." in path or not RESOURCE_PATH_RE.match(path):
        raise ValidationError(f"resourcePath invalide: {path!r}")
    return path


def _error_details(exc: httpx.HTTPError) -> Any:
    """Payload d'erreur brut de la passerelle si disponible, sinon le message transport."""
    response = getattr(exc, "response", None) if isinstance(exc, httpx.HTTPStatusError) else None
    if response is None:
        return str(exc) or exc.__class__.__name__
    try:
        return response.json()
    except ValueError:
        return response.text


class HyperPayClient:
    """
    Client sans état entre appels: une requête synchrone par opération, aucun retry.
    - create_checkout: POST form-urlencoded sur /v1/checkouts
    - fetch_resource_status: GET {origin}{resourcePath}?entityId=...
    Le client httpx est construit au démarrage (lifespan) et fermé à l'arrêt.
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.Client] = None):
        self.settings = settings
        self._http = http_client or httpx.Client(timeout=settings.timeout_seconds)

    def close(self) -> None:
        self._http.close()

    def _headers(self) -> Dict[str, str]:
        if not self.settings.access_token or not self.settings.entity_id:
            raise ConfigurationError("HYPERPAY_ACCESS_TOKEN ou HYPERPAY_ENTITY_ID manquant")
        return {"Authorization": f"Bearer {self.settings.access_token}"}

    def _send(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        headers = self._headers()
        try:
            response = self._http.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            details = _error_details(exc)
            logger.error("hyperpay.%s %s failed details=%s", method.lower(), url, details)
            raise GatewayError("HyperPay request failed", details=details) from exc
        except ValueError as exc:
            logger.error("hyperpay.%s %s returned non-JSON body", method.lower(), url)
            raise GatewayError("HyperPay returned a malformed response", details=response.text) from exc
        if not isinstance(data, dict):
            raise GatewayError("HyperPay returned a malformed response", details=data)
        return data

    def create_checkout(self, params: Dict[str, str]) -> GatewaySession:
        """
        Crée une session de checkout.
        Retour: GatewaySession(checkout_id=<id>) à transmettre au widget.
        Erreurs: GatewayError si statut non-2xx, échec transport, ou réponse sans 'id'.
        """
        logger.info("hyperpay.create_checkout params=%s", params)
        data = self._send("POST", self.settings.checkouts_url, data=params)
        logger.info("hyperpay.create_checkout response=%s", data)
        checkout_id = data.get("id")
        if not checkout_id:
            raise GatewayError("No checkoutId returned", details=data)
        return GatewaySession(checkout_id=str(checkout_id))

    def fetch_resource_status(self, resource_path: str) -> GatewayTransactionResult:
        """
        Lit le résultat final d'une transaction.
        - resource_path: chemin opaque émis par HyperPay (déjà validé par validate_resource_path)
        Erreurs: GatewayError (HTTP/transport) ou réponse sans id/result.code.
        """
        url = f"{self.settings.gateway_origin}{resource_path}"
        data = self._send("GET", url, params={"entityId": self.settings.entity_id})
        logger.info("hyperpay.fetch_resource_status path=%s response=%s", resource_path, data)
        try:
            return GatewayTransactionResult.from_gateway(data)
        except (KeyError, TypeError, AttributeError, pydantic.ValidationError) as exc:
            raise GatewayError("HyperPay returned a malformed payment status", details=data) from exc
