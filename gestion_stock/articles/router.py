import logging
from typing import Optional, Annotated, Tuple

from fastapi import APIRouter, Depends, HTTPException, status, Query, Path

from .service import PaginatedArticleResponse
from .models import ArticleRead, ArticleCreate, ArticleUpdate
from .dependencies import ArticleServiceDep
from gestion_stock.stock.exceptions import ConcurrencyConflictError, PersistenceUnavailableError
from .exceptions import (
    ArticleNotFoundException,
    DuplicateArticleCodeException,
    InvalidArticleDataException
)

logger = logging.getLogger(__name__)

# --- Router Definition ---
router = APIRouter(
    # prefix="/articles", # Préfixe défini dans main.py
    tags=["Articles"]
)

def get_pagination_params(
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0)
) -> Tuple[int, int]:
    return limit, offset

PaginationParams = Annotated[Tuple[int, int], Depends(get_pagination_params)]

# --- Error Handling Helper ---
def handle_article_service_errors(e: Exception):
    if isinstance(e, ArticleNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    elif isinstance(e, DuplicateArticleCodeException):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    elif isinstance(e, InvalidArticleDataException):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    elif isinstance(e, ConcurrencyConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    elif isinstance(e, PersistenceUnavailableError):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message, headers={"Retry-After": "1"})
    else:
        logger.error(f"[Article API] Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne lors du traitement de l'article.")

# --- Article Endpoints ---

@router.post("/", response_model=ArticleRead, status_code=status.HTTP_201_CREATED, summary="Créer un article")
async def create_article(service: ArticleServiceDep, article_data: ArticleCreate):
    logger.info(f"API create_article: code={article_data.code}")
    try:
        return await service.create_article(article_data)
    except Exception as e:
        handle_article_service_errors(e)

@router.get("/", response_model=PaginatedArticleResponse, summary="Lister les articles")
async def list_articles(
    service: ArticleServiceDep,
    pagination: PaginationParams,
    actif: Optional[bool] = Query(None, description="Filtrer sur les articles actifs/inactifs"),
    categorie: Optional[str] = Query(None, description="Filtrer par catégorie")
):
    limit, offset = pagination
    logger.info(f"API list_articles: limit={limit}, offset={offset}, actif={actif}, categorie={categorie}")
    try:
        return await service.list_articles(limit=limit, offset=offset, actif=actif, categorie=categorie)
    except Exception as e:
        handle_article_service_errors(e)

@router.get("/{article_id}", response_model=ArticleRead, summary="Obtenir un article")
async def read_article(service: ArticleServiceDep, article_id: int = Path(..., ge=1)):
    try:
        return await service.get_article(article_id)
    except Exception as e:
        handle_article_service_errors(e)

@router.patch("/{article_id}", response_model=ArticleRead, summary="Modifier un article ou ses seuils")
async def update_article(
    service: ArticleServiceDep,
    article_update: ArticleUpdate,
    article_id: int = Path(..., ge=1)
):
    logger.info(f"API update_article: ID={article_id}, données={article_update.model_dump(exclude_unset=True)}")
    try:
        return await service.update_article(article_id, article_update)
    except Exception as e:
        handle_article_service_errors(e)
