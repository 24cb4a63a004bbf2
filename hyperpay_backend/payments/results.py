"""
Classification des codes résultat HyperPay.
"""
from enum import Enum

# module hyperpay_backend.payments.results
APPROVED_CODES = frozenset({"000.000.000", "000.100.110", "000.100.112"})


class PaymentOutcome(str, Enum):
    APPROVED = "approved"
    DECLINED = "declined"


def classify_result(code: str) -> PaymentOutcome:
    """
    Fonction totale: tout code hors liste blanche est « declined »,
    y compris les plages pending/revue manuelle de la passerelle.
    """
    return PaymentOutcome.APPROVED if code in APPROVED_CODES else PaymentOutcome.DECLINED


def is_approved(code: str) -> bool:
    return classify_result(code) is PaymentOutcome.APPROVED
