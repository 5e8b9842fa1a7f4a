import logging
from typing import Optional, Annotated, Tuple

from fastapi import APIRouter, Depends, HTTPException, status, Query, Path

from .service import PaginatedFournisseurResponse
from .models import FournisseurRead, FournisseurCreate, FournisseurUpdate
from .dependencies import FournisseurServiceDep
from .exceptions import FournisseurNotFoundException, DuplicateFournisseurCodeException

logger = logging.getLogger(__name__)

# --- Router Definition ---
router = APIRouter(
    # prefix="/fournisseurs", # Préfixe défini dans main.py
    tags=["Fournisseurs"]
)

def get_pagination_params(
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0)
) -> Tuple[int, int]:
    return limit, offset

PaginationParams = Annotated[Tuple[int, int], Depends(get_pagination_params)]

# --- Error Handling Helper ---
def handle_fournisseur_service_errors(e: Exception):
    if isinstance(e, FournisseurNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    elif isinstance(e, DuplicateFournisseurCodeException):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    else:
        logger.error(f"[Fournisseur API] Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne lors du traitement du fournisseur.")

# --- Fournisseur Endpoints ---

@router.post("/", response_model=FournisseurRead, status_code=status.HTTP_201_CREATED, summary="Créer un fournisseur")
async def create_fournisseur(service: FournisseurServiceDep, fournisseur_data: FournisseurCreate):
    logger.info(f"API create_fournisseur: code={fournisseur_data.code}")
    try:
        return await service.create_fournisseur(fournisseur_data)
    except Exception as e:
        handle_fournisseur_service_errors(e)

@router.get("/", response_model=PaginatedFournisseurResponse, summary="Lister les fournisseurs")
async def list_fournisseurs(
    service: FournisseurServiceDep,
    pagination: PaginationParams,
    actif: Optional[bool] = Query(None, description="Filtrer sur les fournisseurs actifs/inactifs"),
    ville: Optional[str] = Query(None),
    pays: Optional[str] = Query(None)
):
    limit, offset = pagination
    try:
        return await service.list_fournisseurs(limit=limit, offset=offset, actif=actif, ville=ville, pays=pays)
    except Exception as e:
        handle_fournisseur_service_errors(e)

@router.get("/{fournisseur_id}", response_model=FournisseurRead, summary="Obtenir un fournisseur")
async def read_fournisseur(service: FournisseurServiceDep, fournisseur_id: int = Path(..., ge=1)):
    try:
        return await service.get_fournisseur(fournisseur_id)
    except Exception as e:
        handle_fournisseur_service_errors(e)

@router.patch("/{fournisseur_id}", response_model=FournisseurRead, summary="Modifier un fournisseur")
async def update_fournisseur(
    service: FournisseurServiceDep,
    fournisseur_update: FournisseurUpdate,
    fournisseur_id: int = Path(..., ge=1)
):
    logger.info(f"API update_fournisseur: ID={fournisseur_id}")
    try:
        return await service.update_fournisseur(fournisseur_id, fournisseur_update)
    except Exception as e:
        handle_fournisseur_service_errors(e)

@router.delete("/{fournisseur_id}", response_model=FournisseurRead, summary="Désactiver un fournisseur")
async def deactivate_fournisseur(service: FournisseurServiceDep, fournisseur_id: int = Path(..., ge=1)):
    logger.info(f"API deactivate_fournisseur: ID={fournisseur_id}")
    try:
        return await service.set_actif(fournisseur_id, False)
    except Exception as e:
        handle_fournisseur_service_errors(e)

@router.post("/{fournisseur_id}/reactivation", response_model=FournisseurRead, summary="Réactiver un fournisseur")
async def reactivate_fournisseur(service: FournisseurServiceDep, fournisseur_id: int = Path(..., ge=1)):
    logger.info(f"API reactivate_fournisseur: ID={fournisseur_id}")
    try:
        return await service.set_actif(fournisseur_id, True)
    except Exception as e:
        handle_fournisseur_service_errors(e)
