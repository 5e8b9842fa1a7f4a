"""
Configuration pour le module de gestion des stocks.
"""
from pydantic_settings import BaseSettings

class StockSettings(BaseSettings):
    """Paramètres de configuration pour la gestion des stocks."""

    # Concurrence optimiste: nombre de tentatives avant ConcurrencyConflictError
    MAX_CONFLICT_RETRIES: int = 5
    # Délai de base (secondes) entre deux tentatives, multiplié par un tirage aléatoire
    RETRY_BASE_DELAY: float = 0.01

    # Politique de stock négatif pour les pertes (False = contrôlée comme une sortie)
    ALLOW_NEGATIVE_PERTE: bool = False

    # Paramètres de pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    class Config:
        env_prefix = "STOCK_"
        env_file = ".env"
        extra = "ignore"

# Instance des paramètres
settings = StockSettings()
