from typing import Annotated
from fastapi import Depends
from sqlalchemy.orm import sessionmaker

# Import de la factory de sessions
from gestion_stock.database import get_session_factory

# Import des services Stock
from gestion_stock.stock.service import StockService, UnitOfWorkFactory
from gestion_stock.stock.reconciliation import InventoryService
from gestion_stock.stock.unit_of_work import SQLAlchemyUnitOfWork

def get_uow_factory(
    session_factory: Annotated[sessionmaker, Depends(get_session_factory)]
) -> UnitOfWorkFactory:
    """
    Fournit une fabrique d'unités de travail.

    Chaque appel ouvre une nouvelle session: une tentative d'écriture du
    registre correspond à une transaction.

    Args:
        session_factory: Factory de sessions asynchrones

    Returns:
        UnitOfWorkFactory: Callable retournant une SQLAlchemyUnitOfWork
    """
    return lambda: SQLAlchemyUnitOfWork(session_factory)

def get_stock_service(
    uow_factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)]
) -> StockService:
    """Fournit une instance du registre de stock."""
    return StockService(uow_factory=uow_factory)

StockServiceDep = Annotated[StockService, Depends(get_stock_service)]

def get_inventory_service(stock_service: StockServiceDep) -> InventoryService:
    """Fournit une instance du service d'inventaire physique."""
    return InventoryService(stock_service=stock_service)

InventoryServiceDep = Annotated[InventoryService, Depends(get_inventory_service)]
