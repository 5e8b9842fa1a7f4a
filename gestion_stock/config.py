import logging
from dotenv import load_dotenv
from pydantic_settings import BaseSettings
from typing import Optional, List

logger = logging.getLogger(__name__)

# Charger les variables d'environnement AVANT de définir la classe Settings
load_dotenv()

# Classe de configuration utilisant Pydantic BaseSettings
class Settings(BaseSettings):
    # --- Pagination ---
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 200

    # --- Base de Données ---
    # DATABASE_URL prend le pas sur les composants POSTGRES_* s'il est défini
    DATABASE_URL: Optional[str] = None
    POSTGRES_DB: str = "gestion_stock"
    POSTGRES_USER: str = "stock"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: str = "5432"
    DB_ECHO_LOG: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    # --- Application ---
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # --- Messages Génériques ---
    DB_CONNECT_ERROR_MSG: str = "Connexion à la base de données impossible pour le moment. Veuillez réessayer."

    class Config:
        # Charger depuis les variables d'environnement (respecte load_dotenv)
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = 'ignore' # Ignorer les variables d'env non définies dans le modèle

    @property
    def database_url(self) -> str:
        """URL SQLAlchemy effective (asyncpg par défaut)."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

# Instancier la classe de configuration
settings = Settings()

if not settings.DATABASE_URL and not settings.POSTGRES_PASSWORD:
    logger.warning("POSTGRES_PASSWORD n'est pas défini. La connexion PostgreSQL risque d'échouer.")

logger.info(f"Configuration chargée: DB={settings.POSTGRES_DB}@{settings.POSTGRES_HOST}, API={settings.API_V1_PREFIX}")
