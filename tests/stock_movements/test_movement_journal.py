from datetime import timedelta
from decimal import Decimal

import pytest
from fastcrud import FastCRUD

from gestion_stock.core.utils import utcnow
from gestion_stock.stock_movements.constants import TypeMouvement
from gestion_stock.stock_movements.exceptions import (
    StockMovementNotFoundException,
    InvalidStockMovementOperationException
)
from gestion_stock.stock_movements.models import StockMovement, StockMovementCreate
from gestion_stock.stock_movements.service import StockMovementService

# Fournisseur créé par la fixture `fournisseur` (premier de la base)
FOURNISSEUR_ID = 1


@pytest.fixture
def movement_service(db_session) -> StockMovementService:
    return StockMovementService(db=db_session, movement_crud=FastCRUD(StockMovement))


async def feed(stock_service, article_id: int):
    """Entrée de 10 (bon BL-1) puis sortie de 4 (bon BS-1)."""
    await stock_service.apply_movement(article_id, StockMovementCreate(
        type_mouvement=TypeMouvement.ENTREE, quantite=10, prix_unitaire=Decimal("2.50"),
        fournisseur_id=FOURNISSEUR_ID, utilisateur="magasinier", numero_bon="BL-1", numero_facture="FA-77"
    ))
    await stock_service.apply_movement(article_id, StockMovementCreate(
        type_mouvement=TypeMouvement.SORTIE, quantite=4, contrepartie="Client B",
        utilisateur="magasinier", numero_bon="BS-1"
    ))


@pytest.mark.asyncio
async def test_history_in_commit_order(stock_service, movement_service: StockMovementService, article):
    await feed(stock_service, article.id)

    entries = await movement_service.list_for_article(article.id)

    assert [e.sequence for e in entries] == [1, 2]
    assert [e.type_mouvement for e in entries] == [TypeMouvement.ENTREE, TypeMouvement.SORTIE]
    assert entries[0].valeur_totale == Decimal("25.00")
    assert entries[0].numero_facture == "FA-77"
    assert entries[0].fournisseur_id == FOURNISSEUR_ID
    assert entries[0].contrepartie == "Fournisseur A"
    assert entries[1].contrepartie == "Client B"
    assert (entries[1].stock_avant, entries[1].stock_apres) == (10, 6)


@pytest.mark.asyncio
async def test_list_movements_filters(stock_service, movement_service: StockMovementService, article_factory):
    first = await article_factory(code="J1")
    second = await article_factory(code="J2")
    await feed(stock_service, first.id)
    await feed(stock_service, second.id)

    page = await movement_service.list_movements()
    assert page.total == 4
    # Les plus récents d'abord
    assert page.items[0].id > page.items[-1].id

    by_article = await movement_service.list_movements(article_id=second.id)
    assert by_article.total == 2
    assert {m.article_id for m in by_article.items} == {second.id}

    by_type = await movement_service.list_movements(type_mouvement=TypeMouvement.SORTIE)
    assert by_type.total == 2

    by_fournisseur = await movement_service.list_movements(fournisseur_id=FOURNISSEUR_ID)
    assert [m.type_mouvement for m in by_fournisseur.items] == [TypeMouvement.ENTREE, TypeMouvement.ENTREE]

    by_bon = await movement_service.list_movements(numero_bon="BL-1", article_id=first.id)
    assert [m.type_mouvement for m in by_bon.items] == [TypeMouvement.ENTREE]

    paged = await movement_service.list_movements(limit=1, offset=1)
    assert len(paged.items) == 1
    assert paged.total == 4


@pytest.mark.asyncio
async def test_date_range(stock_service, movement_service: StockMovementService, article):
    start = utcnow() - timedelta(minutes=1)
    await feed(stock_service, article.id)
    end = utcnow() + timedelta(minutes=1)

    entries = await movement_service.list_between(start, end, article_id=article.id)
    assert [e.sequence for e in entries] == [1, 2]

    assert await movement_service.list_between(end, end + timedelta(hours=1)) == []
    page = await movement_service.list_movements(date_debut=start, date_fin=end)
    assert page.total == 2

    with pytest.raises(InvalidStockMovementOperationException):
        await movement_service.list_between(end, start)


@pytest.mark.asyncio
async def test_get_movement(stock_service, movement_service: StockMovementService, article):
    await feed(stock_service, article.id)
    recent = await movement_service.list_recent(limit=1)

    movement = await movement_service.get_movement(recent[0].id)
    assert movement.type_mouvement == TypeMouvement.SORTIE

    with pytest.raises(StockMovementNotFoundException):
        await movement_service.get_movement(9999)
