import logging
from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from fastcrud import FastCRUD

from gestion_stock.database import get_db_session
from gestion_stock.stock_movements.models import StockMovement
from gestion_stock.stock_movements.service import StockMovementService

logger = logging.getLogger(__name__)

# CRUD pour StockMovement
def get_movement_crud() -> FastCRUD:
    """Fournit une instance de FastCRUD pour les mouvements de stock."""
    logger.debug("Providing FastCRUD[StockMovement]")
    return FastCRUD(StockMovement)

MovementCRUDDep = Annotated[FastCRUD, Depends(get_movement_crud)]

# Service StockMovement
def get_stock_movement_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    movement_crud: MovementCRUDDep
) -> StockMovementService:
    """
    Fournit une instance du service de consultation du journal.

    Args:
        db: Session de base de données asynchrone
        movement_crud: Instance de FastCRUD pour les mouvements de stock

    Returns:
        StockMovementService: Instance du service des mouvements de stock
    """
    logger.debug("Providing StockMovementService")
    return StockMovementService(db=db, movement_crud=movement_crud)

StockMovementServiceDep = Annotated[StockMovementService, Depends(get_stock_movement_service)]
