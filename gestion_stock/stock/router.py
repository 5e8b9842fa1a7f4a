import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Path, status

from gestion_stock.articles.exceptions import ArticleNotFoundException
from gestion_stock.fournisseurs.exceptions import FournisseurNotFoundException
from gestion_stock.stock_movements.models import StockMovementCreate
from .config import settings as stock_settings
from .constants import StatutStock
from .dependencies import StockServiceDep, InventoryServiceDep
from .exceptions import (
    MovementValidationError,
    InsufficientStockError,
    StockAlreadyInitializedError,
    ConcurrencyConflictError,
    PersistenceUnavailableError
)
from .models import (
    StockRead,
    PaginatedStockResponse,
    QuantityRequest,
    InventoryRequest,
    InventoryResult,
    BatchMovementRequest,
    BatchMovementResult,
    AvailabilityRead
)

logger = logging.getLogger(__name__)

# Création du routeur API pour le stock
router = APIRouter(
    # prefix="/stock", # Préfixe défini dans main.py
    tags=["Stock"]
)

# Délai suggéré au client quand la base est indisponible (secondes)
RETRY_AFTER_SECONDS = "1"

# --- Error Handling Helper ---
def handle_stock_service_errors(e: Exception):
    if isinstance(e, HTTPException):
        raise e
    if isinstance(e, MovementValidationError):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": str(e),
                "violations": [v.model_dump(mode="json") for v in e.violations],
            }
        )
    elif isinstance(e, (ArticleNotFoundException, FournisseurNotFoundException)):
        # Couvre aussi StockNotFoundError
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    elif isinstance(e, (InsufficientStockError, StockAlreadyInitializedError, ConcurrencyConflictError)):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    elif isinstance(e, PersistenceUnavailableError):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.message,
            headers={"Retry-After": RETRY_AFTER_SECONDS}
        )
    else:
        logger.error(f"[API Stock] Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne lors du traitement du stock.")

# --- Endpoints API ---

@router.get("/", response_model=PaginatedStockResponse, summary="Lister les fiches de stock")
async def list_stocks(
    stock_service: StockServiceDep,
    statut: Optional[StatutStock] = Query(None, description="Filtrer par statut (alertes de réapprovisionnement)"),
    sur_reservation: Optional[bool] = Query(None, description="Filtrer les fiches sur-réservées"),
    limit: int = Query(stock_settings.DEFAULT_PAGE_SIZE, ge=1, le=stock_settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0)
):
    logger.info(f"[API Stock] Requête list_stocks: statut={statut}, sur_reservation={sur_reservation}, limit={limit}, offset={offset}")
    try:
        return await stock_service.list_stocks(statut=statut, sur_reservation=sur_reservation, limit=limit, offset=offset)
    except Exception as e:
        handle_stock_service_errors(e)

@router.post("/reservations/reinitialisation", summary="Remettre toutes les réservations à zéro")
async def reset_reservations(stock_service: StockServiceDep):
    logger.info("[API Stock] Requête reset_reservations")
    try:
        count = await stock_service.reset_all_reservations()
        return {"fiches_modifiees": count}
    except Exception as e:
        handle_stock_service_errors(e)

@router.get("/{article_id}", response_model=StockRead, summary="Obtenir la fiche de stock d'un article")
async def get_stock(stock_service: StockServiceDep, article_id: int = Path(..., ge=1)):
    try:
        return await stock_service.get_snapshot(article_id)
    except Exception as e:
        handle_stock_service_errors(e)

@router.post(
    "/{article_id}/initialisation",
    response_model=StockRead,
    status_code=status.HTTP_201_CREATED,
    summary="Initialiser la fiche de stock d'un article"
)
async def initialize_stock(stock_service: StockServiceDep, article_id: int = Path(..., ge=1)):
    logger.info(f"[API Stock] Requête initialize_stock pour l'article {article_id}")
    try:
        return await stock_service.initialize_stock(article_id)
    except Exception as e:
        handle_stock_service_errors(e)

@router.post("/{article_id}/mouvements", response_model=StockRead, summary="Enregistrer un mouvement de stock")
async def apply_movement(
    stock_service: StockServiceDep,
    intent: StockMovementCreate,
    article_id: int = Path(..., ge=1)
):
    logger.info(f"[API Stock] Requête apply_movement: article={article_id}, type={intent.type_mouvement.value}, quantite={intent.quantite}")
    try:
        return await stock_service.apply_movement(article_id, intent)
    except Exception as e:
        handle_stock_service_errors(e)

@router.post("/{article_id}/mouvements/lot", response_model=List[BatchMovementResult], summary="Enregistrer un lot de mouvements")
async def apply_movements(
    stock_service: StockServiceDep,
    batch: BatchMovementRequest,
    article_id: int = Path(..., ge=1)
):
    logger.info(f"[API Stock] Requête apply_movements: article={article_id}, {len(batch.mouvements)} mouvement(s)")
    try:
        return await stock_service.apply_movements(article_id, batch.mouvements)
    except Exception as e:
        handle_stock_service_errors(e)

@router.post("/{article_id}/reservations", response_model=StockRead, summary="Réserver une quantité")
async def reserve(
    stock_service: StockServiceDep,
    request: QuantityRequest,
    article_id: int = Path(..., ge=1)
):
    logger.info(f"[API Stock] Requête reserve: article={article_id}, quantite={request.quantite}")
    try:
        return await stock_service.reserve(article_id, request.quantite)
    except Exception as e:
        handle_stock_service_errors(e)

@router.post("/{article_id}/liberations", response_model=StockRead, summary="Libérer une quantité réservée")
async def release(
    stock_service: StockServiceDep,
    request: QuantityRequest,
    article_id: int = Path(..., ge=1)
):
    logger.info(f"[API Stock] Requête release: article={article_id}, quantite={request.quantite}")
    try:
        return await stock_service.release(article_id, request.quantite)
    except Exception as e:
        handle_stock_service_errors(e)

@router.post("/{article_id}/inventaire", response_model=InventoryResult, summary="Saisir un inventaire physique")
async def reconcile(
    inventory_service: InventoryServiceDep,
    request: InventoryRequest,
    article_id: int = Path(..., ge=1)
):
    logger.info(f"[API Stock] Requête reconcile: article={article_id}, quantite_physique={request.quantite_physique}")
    try:
        return await inventory_service.reconcile(
            article_id, request.quantite_physique, request.utilisateur, observations=request.observations
        )
    except Exception as e:
        handle_stock_service_errors(e)

@router.get("/{article_id}/disponibilite", response_model=AvailabilityRead, summary="Vérifier la disponibilité")
async def check_availability(
    stock_service: StockServiceDep,
    article_id: int = Path(..., ge=1),
    quantite: int = Query(..., description="Quantité demandée")
):
    try:
        disponible = await stock_service.check_availability(article_id, quantite)
        return AvailabilityRead(article_id=article_id, quantite_demandee=quantite, disponible=disponible)
    except Exception as e:
        handle_stock_service_errors(e)
