import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
# Importer SQLModel pour utiliser ses métadonnées
from sqlmodel import SQLModel

from gestion_stock.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url


def build_engine(url: str, echo: bool = False):
    """Crée le moteur asynchrone; les options de pool ne concernent que PostgreSQL."""
    options = {"echo": echo, "future": True}
    if url.startswith("postgresql"):
        options["pool_size"] = settings.DB_POOL_SIZE
        options["max_overflow"] = settings.DB_MAX_OVERFLOW
        options["pool_pre_ping"] = True
    return create_async_engine(url, **options)


def build_session_factory(bind) -> sessionmaker:
    return sessionmaker(
        bind=bind,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False # Empêche les objets d'expirer après commit
    )


try:
    # Créer le moteur de base de données asynchrone
    engine = build_engine(DATABASE_URL, echo=settings.DB_ECHO_LOG)
    # Créer une classe de session asynchrone
    AsyncSessionLocal = build_session_factory(engine)
    logger.info("Moteur et Session Factory SQLAlchemy Async configurés.")
except Exception as e:
    logger.critical(f"Erreur lors de la configuration de SQLAlchemy Async: {e}", exc_info=True)
    engine = None
    AsyncSessionLocal = None


# Fonction dépendance pour obtenir une session de base de données asynchrone
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Dépendance FastAPI fournissant une session DB asynchrone (lectures et CRUD articles)."""
    if AsyncSessionLocal is None:
        logger.error("La factory de session SQLAlchemy n'est pas initialisée.")
        raise RuntimeError("Database session factory is not initialized.")

    async with AsyncSessionLocal() as session:
        try:
            yield session
            # Les commits sont gérés par les services
        except Exception as e:
            logger.error(f"Erreur durant la session DB, rollback: {e}", exc_info=True)
            await session.rollback()
            raise


def get_session_factory() -> sessionmaker:
    """Dépendance FastAPI fournissant la factory de sessions.

    Le registre de stock ouvre une session (et une transaction) par tentative
    d'écriture; il reçoit donc la factory plutôt qu'une session.
    """
    if AsyncSessionLocal is None:
        logger.error("La factory de session SQLAlchemy n'est pas initialisée.")
        raise RuntimeError("Database session factory is not initialized.")
    return AsyncSessionLocal


async def create_tables():
    """Crée toutes les tables SQLModel."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def drop_tables():
    """Supprime toutes les tables SQLModel."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
