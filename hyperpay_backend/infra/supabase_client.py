from supabase import create_client, Client

from hyperpay_backend.config import Settings
from hyperpay_backend.errors import ConfigurationError


def create_service_supabase(settings: Settings) -> Client:
    """
    Client Supabase service-role (bypass RLS), construit une fois au démarrage.
    Les écritures de commandes se font au nom de l'acheteur sans sa session,
    d'où la clé service plutôt que la clé anon.
    """
    if not settings.supabase_url or not settings.supabase_service_key:
        raise ConfigurationError("SUPABASE_URL ou SUPABASE_SERVICE_KEY manquant")
    return create_client(settings.supabase_url, settings.supabase_service_key)
