import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from gestion_stock.stock.config import StockSettings
from gestion_stock.stock.exceptions import ConcurrencyConflictError, PersistenceUnavailableError
from gestion_stock.stock.repositories import SQLAlchemyStockRepository
from gestion_stock.stock.service import StockService
from gestion_stock.stock_movements.constants import TypeMouvement
from gestion_stock.stock_movements.models import StockMovementCreate
from gestion_stock.stock_movements.repositories import SQLAlchemyStockMovementRepository

# Fournisseur créé par la fixture `fournisseur` (premier de la base)
FOURNISSEUR_ID = 1


def receipt(quantite: int, prix: str = "5.00") -> StockMovementCreate:
    return StockMovementCreate(
        type_mouvement=TypeMouvement.ENTREE, quantite=quantite, prix_unitaire=Decimal(prix),
        fournisseur_id=FOURNISSEUR_ID, utilisateur="magasinier"
    )


@pytest.mark.asyncio
async def test_concurrent_receipts_are_all_applied(uow_factory, article, db_session):
    """N entrées concurrentes: aucune mise à jour perdue, journal ordonné sans trou."""
    service = StockService(uow_factory, settings=StockSettings(MAX_CONFLICT_RETRIES=30, RETRY_BASE_DELAY=0.001))
    await service.initialize_stock(article.id)

    await asyncio.gather(*(service.apply_movement(article.id, receipt(1)) for _ in range(10)))

    stock = await service.get_snapshot(article.id)
    assert stock.quantite_actuelle == 10
    assert stock.version == 11

    entries = await SQLAlchemyStockMovementRepository(db_session).list_for_article(article.id)
    assert [e.sequence for e in entries] == list(range(2, 12))
    assert [e.stock_apres for e in entries] == list(range(1, 11))


@pytest.mark.asyncio
async def test_concurrent_lazy_creation(uow_factory, article):
    """Deux premières entrées simultanées: une seule fiche, les deux quantités comptées."""
    service = StockService(uow_factory, settings=StockSettings(MAX_CONFLICT_RETRIES=10, RETRY_BASE_DELAY=0.001))

    await asyncio.gather(service.apply_movement(article.id, receipt(3)), service.apply_movement(article.id, receipt(4)))

    stock = await service.get_snapshot(article.id)
    assert stock.quantite_actuelle == 7
    assert stock.version == 2


@pytest.mark.asyncio
async def test_conflict_exhaustion(stock_service: StockService, stock_settings, article, db_session):
    """Une écriture conditionnelle toujours refusée épuise les tentatives sans rien modifier."""
    await stock_service.apply_movement(article.id, receipt(5))

    with patch.object(SQLAlchemyStockRepository, "save", new=AsyncMock(return_value=False)) as save_mock:
        with pytest.raises(ConcurrencyConflictError) as exc_info:
            await stock_service.apply_movement(article.id, receipt(1))

    assert exc_info.value.attempts == stock_settings.MAX_CONFLICT_RETRIES
    assert save_mock.await_count == stock_settings.MAX_CONFLICT_RETRIES

    stock = await stock_service.get_snapshot(article.id)
    assert stock.quantite_actuelle == 5
    assert stock.version == 1
    entries = await SQLAlchemyStockMovementRepository(db_session).list_for_article(article.id)
    assert len(entries) == 1


@pytest.mark.asyncio
async def test_conflict_then_success(stock_service: StockService, article):
    """Un conflit isolé est absorbé par une nouvelle tentative."""
    await stock_service.apply_movement(article.id, receipt(5))
    real_save = SQLAlchemyStockRepository.save
    calls = []

    async def flaky_save(self, stock, expected_version):
        calls.append(expected_version)
        if len(calls) == 1:
            return False
        return await real_save(self, stock, expected_version)

    with patch.object(SQLAlchemyStockRepository, "save", new=flaky_save):
        stock = await stock_service.apply_movement(article.id, receipt(5))

    assert len(calls) == 2
    assert stock.quantite_actuelle == 10
    assert stock.version == 2


@pytest.mark.asyncio
async def test_database_failure_is_reported_as_unavailable(stock_service: StockService, article):
    failure = OperationalError("SELECT", {}, Exception("connection refused"))
    with patch.object(SQLAlchemyStockRepository, "load", new=AsyncMock(side_effect=failure)):
        with pytest.raises(PersistenceUnavailableError):
            await stock_service.apply_movement(article.id, receipt(1))
