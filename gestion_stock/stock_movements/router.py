import logging
from datetime import datetime
from typing import List, Optional, Annotated, Tuple

from fastapi import APIRouter, Depends, Query, Path, HTTPException, status

from .service import PaginatedStockMovementResponse
from .dependencies import StockMovementServiceDep
from .constants import TypeMouvement
from .models import StockMovementRead
from .exceptions import (
    StockMovementNotFoundException,
    InvalidStockMovementOperationException
)

logger = logging.getLogger(__name__)

# --- Router Definition ---
router = APIRouter(
    # prefix="/stock-movements", # Préfixe défini dans main.py
    tags=["Stock Movements"]
)

# --- Pagination Helper ---
def get_pagination_params(
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0)
) -> Tuple[int, int]:
    return limit, offset

PaginationParams = Annotated[Tuple[int, int], Depends(get_pagination_params)]

# --- Error Handling Helper ---
def handle_stock_movement_service_errors(e: Exception):
    if isinstance(e, StockMovementNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    elif isinstance(e, InvalidStockMovementOperationException):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    else:
        logger.error(f"[StockMovement API] Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne lors de la consultation des mouvements.")

# --- Stock Movement Endpoints --- #

@router.get("/", response_model=PaginatedStockMovementResponse)
async def list_stock_movements(
    service: StockMovementServiceDep,
    pagination: PaginationParams,
    article_id: Optional[int] = Query(None, description="Filtrer par article"),
    type_mouvement: Optional[TypeMouvement] = Query(None, description="Filtrer par type de mouvement"),
    fournisseur_id: Optional[int] = Query(None, description="Filtrer par fournisseur"),
    numero_bon: Optional[str] = Query(None, description="Filtrer par numéro de bon"),
    date_debut: Optional[datetime] = Query(None, description="Début de période (inclus)"),
    date_fin: Optional[datetime] = Query(None, description="Fin de période (exclue)")
):
    """Liste les mouvements de stock avec filtres et pagination."""
    limit, offset = pagination
    logger.info(f"API list_stock_movements: limit={limit}, offset={offset}, article={article_id}, type={type_mouvement}, bon={numero_bon}")
    try:
        return await service.list_movements(
            limit=limit,
            offset=offset,
            article_id=article_id,
            type_mouvement=type_mouvement,
            fournisseur_id=fournisseur_id,
            numero_bon=numero_bon,
            date_debut=date_debut,
            date_fin=date_fin
        )
    except Exception as e:
        handle_stock_movement_service_errors(e)

@router.get("/article/{article_id}", response_model=List[StockMovementRead])
async def list_article_movements(
    service: StockMovementServiceDep,
    pagination: PaginationParams,
    article_id: int = Path(..., ge=1)
):
    """Historique d'un article dans l'ordre de validation."""
    limit, offset = pagination
    logger.info(f"API list_article_movements: article={article_id}")
    try:
        return await service.list_for_article(article_id, limit=limit, offset=offset)
    except Exception as e:
        handle_stock_movement_service_errors(e)

@router.get("/{movement_id}", response_model=StockMovementRead)
async def read_stock_movement(
    service: StockMovementServiceDep,
    movement_id: int = Path(..., ge=1)
):
    """Récupère un mouvement de stock spécifique par son ID."""
    logger.info(f"API read_stock_movement: ID={movement_id}")
    try:
        return await service.get_movement(movement_id=movement_id)
    except Exception as e:
        handle_stock_movement_service_errors(e)

# Pas d'endpoint POST/PUT/DELETE: les mouvements sont immuables et créés par le registre de stock.
