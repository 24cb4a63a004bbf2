# hyperpay_backend.config
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
import os
from dotenv import load_dotenv

from hyperpay_backend.errors import ConfigurationError

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH)

"""
Configuration centrale du backend HyperPay.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Construit un objet Settings immuable, une seule fois au démarrage
- Les handlers ne lisent jamais l'environnement: ils reçoivent Settings par injection
"""

GATEWAY_ORIGINS = {
    "prod": "https://eu-prod.oppwa.com",
    "test": "https://eu-test.oppwa.com",
}

DEFAULT_CURRENCY = "SAR"
DEFAULT_FRONTEND_URL = "https://marsos.vercel.app"
DEFAULT_PORT = 5002
DEFAULT_TIMEOUT_SECONDS = 15.0


def _clean_env(v: Optional[str]) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")


@dataclass(frozen=True)
class Settings:
    """
    Configuration résolue du service.
    - hyperpay_env: "prod" ou "test" (sélectionne l'origine de la passerelle)
    - access_token / entity_id: identifiants marchand HyperPay (obligatoires)
    - supabase_url / supabase_service_key: store des commandes et paniers (obligatoires)
    """
    hyperpay_env: str = "test"
    access_token: str = ""
    entity_id: str = ""
    currency: str = DEFAULT_CURRENCY
    frontend_url: str = DEFAULT_FRONTEND_URL
    port: int = DEFAULT_PORT
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    supabase_url: str = ""
    supabase_service_key: str = ""
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @property
    def gateway_origin(self) -> str:
        return GATEWAY_ORIGINS["prod"] if self.hyperpay_env == "prod" else GATEWAY_ORIGINS["test"]

    @property
    def checkouts_url(self) -> str:
        return f"{self.gateway_origin}/v1/checkouts"

    def missing(self) -> List[str]:
        """Noms des variables obligatoires absentes."""
        required = {
            "HYPERPAY_ACCESS_TOKEN": self.access_token,
            "HYPERPAY_ENTITY_ID": self.entity_id,
            "SUPABASE_URL": self.supabase_url,
            "SUPABASE_SERVICE_KEY": self.supabase_service_key,
        }
        return [name for name, value in required.items() if not value]

    def validate(self) -> "Settings":
        """
        Vérification de démarrage: lève ConfigurationError si une valeur obligatoire manque.
        Retourne self pour permettre `load_settings().validate()`.
        """
        missing = self.missing()
        if missing:
            raise ConfigurationError(f"Configuration manquante: {', '.join(missing)}")
        return self


def _float_env(name: str, default: float) -> float:
    raw = _clean_env(os.getenv(name))
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} invalide: {raw!r}")


def _int_env(name: str, default: int) -> int:
    raw = _clean_env(os.getenv(name))
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} invalide: {raw!r}")


def load_settings() -> Settings:
    """
    Lit l'environnement et construit Settings.
    - SUPABASE_URL peut être sans schéma: on préfixe en https:// si nécessaire
    - FRONTEND_URL est normalisée sans slash final
    Ne valide pas la présence des secrets: voir Settings.validate().
    """
    supabase_url = _clean_env(os.getenv("SUPABASE_URL"))
    if supabase_url and not supabase_url.startswith("http"):
        supabase_url = "https://" + supabase_url
    supabase_url = supabase_url.rstrip("/")

    frontend_url = _clean_env(os.getenv("FRONTEND_URL")) or DEFAULT_FRONTEND_URL

    return Settings(
        hyperpay_env=_clean_env(os.getenv("HYPERPAY_ENV")).lower() or "test",
        access_token=_clean_env(os.getenv("HYPERPAY_ACCESS_TOKEN")),
        entity_id=_clean_env(os.getenv("HYPERPAY_ENTITY_ID")),
        currency=_clean_env(os.getenv("CURRENCY")) or DEFAULT_CURRENCY,
        frontend_url=frontend_url.rstrip("/"),
        port=_int_env("PORT", DEFAULT_PORT),
        timeout_seconds=_float_env("HYPERPAY_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        supabase_url=supabase_url,
        supabase_service_key=_clean_env(os.getenv("SUPABASE_SERVICE_KEY")),
        cors_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()],
    )
