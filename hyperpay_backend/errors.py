"""
Taxonomie des erreurs du service de paiement.
- ValidationError: entrée appelant absente/mal formée (400, aucun effet de bord)
- ConfigurationError: identifiant marchand/credential absent (500)
- GatewayError: statut HTTP non-2xx, échec transport ou réponse HyperPay mal formée (500)
- StoreError: échec d'une opération Supabase pendant le fulfillment (500)
"""
from typing import Any


class PaymentBridgeError(Exception):
    """Base de toutes les erreurs métier; porte le code HTTP et les détails de diagnostic."""

    status_code = 500

    def __init__(self, message: str, details: Any = None, status_code: int | None = None):
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(PaymentBridgeError):
    status_code = 400


class ConfigurationError(PaymentBridgeError):
    status_code = 500


class GatewayError(PaymentBridgeError):
    """details: payload d'erreur brut de la passerelle, ou message d'erreur transport."""

    status_code = 500


class StoreError(PaymentBridgeError):
    status_code = 500
