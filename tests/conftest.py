# Standard Library
from decimal import Decimal
from typing import AsyncGenerator, Optional

# Third-Party Libraries
import pytest
import pytest_asyncio

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

# First-Party Libraries
from gestion_stock.main import app
from gestion_stock.database import get_db_session, get_session_factory, build_session_factory
from gestion_stock.articles.models import Article, ArticleRead
from gestion_stock.fournisseurs.models import Fournisseur, FournisseurRead
from gestion_stock.stock.config import StockSettings
from gestion_stock.stock.dependencies import get_stock_service
from gestion_stock.stock.reconciliation import InventoryService
from gestion_stock.stock.service import StockService
from gestion_stock.stock.unit_of_work import SQLAlchemyUnitOfWork

# --- Fixtures de Base ---

@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Base SQLite sur fichier, propre à chaque test.

    Un fichier (et non :memory:) est nécessaire: chaque unité de travail
    ouvre sa propre connexion et les tests de concurrence en ouvrent plusieurs.
    """
    engine: AsyncEngine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test_stock.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()

@pytest.fixture(scope="function")
def session_factory(engine: AsyncEngine) -> sessionmaker:
    return build_session_factory(engine)

@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory: sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session

# --- Fixtures Registre de stock ---

@pytest.fixture(scope="function")
def stock_settings() -> StockSettings:
    return StockSettings(MAX_CONFLICT_RETRIES=5, RETRY_BASE_DELAY=0.001, ALLOW_NEGATIVE_PERTE=False)

@pytest.fixture(scope="function")
def uow_factory(session_factory: sessionmaker):
    return lambda: SQLAlchemyUnitOfWork(session_factory)

@pytest.fixture(scope="function")
def stock_service(uow_factory, stock_settings: StockSettings) -> StockService:
    return StockService(uow_factory=uow_factory, settings=stock_settings)

@pytest.fixture(scope="function")
def inventory_service(stock_service: StockService) -> InventoryService:
    return InventoryService(stock_service=stock_service)

# --- Fixtures Fournisseurs ---

async def make_fournisseur(session_factory: sessionmaker, code: str = "FRS-001", nom: str = "Fournisseur A") -> FournisseurRead:
    """Insère un fournisseur directement en base et le retourne."""
    async with session_factory() as session:
        fournisseur = Fournisseur(code=code, nom=nom, ville="Lyon", delai_livraison=7)
        session.add(fournisseur)
        await session.commit()
        await session.refresh(fournisseur)
        return FournisseurRead.model_validate(fournisseur)

@pytest_asyncio.fixture(scope="function")
async def fournisseur(session_factory: sessionmaker) -> FournisseurRead:
    """Premier fournisseur de la base (ID 1), référencé par les entrées de stock des tests."""
    return await make_fournisseur(session_factory)

# --- Fixtures Articles ---

async def make_article(
    session_factory: sessionmaker,
    code: str = "ART-001",
    stock_min: Optional[int] = None,
    stock_max: Optional[int] = None,
    prix_unitaire: Optional[Decimal] = None
) -> ArticleRead:
    """Insère un article directement en base et le retourne."""
    async with session_factory() as session:
        article = Article(
            code=code,
            designation=f"Article {code}",
            stock_min=stock_min,
            stock_max=stock_max,
            prix_unitaire=prix_unitaire,
        )
        session.add(article)
        await session.commit()
        await session.refresh(article)
        return ArticleRead.model_validate(article)

@pytest.fixture(scope="function")
def article_factory(session_factory: sessionmaker, fournisseur: FournisseurRead):
    """Fabrique d'articles: `await article_factory(code=..., stock_min=...)`."""
    async def factory(**kwargs) -> ArticleRead:
        return await make_article(session_factory, **kwargs)
    return factory

@pytest_asyncio.fixture(scope="function")
async def article(session_factory: sessionmaker, fournisseur: FournisseurRead) -> ArticleRead:
    """Article sans seuils."""
    return await make_article(session_factory)

@pytest_asyncio.fixture(scope="function")
async def article_with_thresholds(session_factory: sessionmaker, fournisseur: FournisseurRead) -> ArticleRead:
    """Article avec stock_min=10 et stock_max=100."""
    return await make_article(session_factory, code="ART-SEUILS", stock_min=10, stock_max=100)

# --- Client HTTP ---

@pytest_asyncio.fixture(scope="function")
async def test_client(
    session_factory: sessionmaker, stock_service: StockService
) -> AsyncGenerator[AsyncClient, None]:
    """Fournit un AsyncClient httpx branché sur la base de test."""
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_stock_service] = lambda: stock_service
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
