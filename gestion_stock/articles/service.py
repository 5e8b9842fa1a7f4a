import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from fastcrud import FastCRUD

from gestion_stock.core.schemas import PaginatedResponse
from gestion_stock.core.utils import utcnow
from gestion_stock.stock.service import StockService
from .models import Article, ArticleCreate, ArticleRead, ArticleUpdate
from .exceptions import (
    ArticleNotFoundException,
    DuplicateArticleCodeException,
    InvalidArticleDataException
)

logger = logging.getLogger(__name__)

class PaginatedArticleResponse(PaginatedResponse[ArticleRead]): pass


def _check_thresholds(stock_min: Optional[int], stock_max: Optional[int]) -> None:
    if stock_min is not None and stock_max is not None and stock_max < stock_min:
        raise InvalidArticleDataException(
            f"stock_max ({stock_max}) doit être supérieur ou égal à stock_min ({stock_min})"
        )


class ArticleService:
    """Service applicatif pour la gestion du référentiel articles."""

    def __init__(self, db: AsyncSession, article_crud: FastCRUD, stock_service: Optional[StockService] = None):
        self.db = db
        self.article_crud = article_crud
        self.stock_service = stock_service
        logger.info("ArticleService initialized.")

    async def create_article(self, article_data: ArticleCreate) -> ArticleRead:
        """Crée un nouvel article après vérification de l'unicité du code."""
        logger.info(f"[ArticleService] Création de l'article {article_data.code}")
        _check_thresholds(article_data.stock_min, article_data.stock_max)

        if await self.article_crud.exists(self.db, code=article_data.code):
            raise DuplicateArticleCodeException(article_data.code)

        try:
            created = await self.article_crud.create(
                self.db, article_data, schema_to_select=ArticleRead, return_as_model=True
            )
        except IntegrityError:
            await self.db.rollback()
            logger.warning(f"[ArticleService] Code {article_data.code} inséré en concurrence.")
            raise DuplicateArticleCodeException(article_data.code)

        logger.info(f"[ArticleService] Article ID {created.id} créé.")
        return created

    async def get_article(self, article_id: int) -> ArticleRead:
        """Récupère un article par son ID."""
        logger.debug(f"[ArticleService] Get Article ID: {article_id}")
        article = await self.article_crud.get(
            self.db, schema_to_select=ArticleRead, return_as_model=True, id=article_id
        )
        if not article:
            raise ArticleNotFoundException(article_id=article_id)
        return article

    async def list_articles(
        self,
        limit: int = 100,
        offset: int = 0,
        actif: Optional[bool] = None,
        categorie: Optional[str] = None,
    ) -> PaginatedArticleResponse:
        """Liste les articles, triés par code."""
        filters = {}
        if actif is not None: filters["actif"] = actif
        if categorie: filters["categorie"] = categorie

        logger.debug(f"[ArticleService] List Articles: filters={filters}, limit={limit}, offset={offset}")
        result = await self.article_crud.get_multi(
            self.db,
            offset=offset,
            limit=limit,
            schema_to_select=ArticleRead,
            return_as_model=True,
            sort_columns="code",
            sort_orders="asc",
            **filters
        )
        return PaginatedArticleResponse(items=result["data"], total=result["total_count"])

    async def update_article(self, article_id: int, article_update: ArticleUpdate) -> ArticleRead:
        """Met à jour les champs fournis d'un article (seuils compris).

        Une modification de stock_min ou stock_max reclasse la fiche de stock
        via le registre, une fois l'article enregistré.
        """
        current = await self.get_article(article_id)
        update_data = article_update.model_dump(exclude_unset=True)
        if not update_data:
            return current

        _check_thresholds(
            update_data.get("stock_min", current.stock_min),
            update_data.get("stock_max", current.stock_max),
        )
        update_data["date_modification"] = utcnow()

        logger.info(f"[ArticleService] Mise à jour de l'article {article_id}: {list(update_data)}")
        await self.article_crud.update(self.db, update_data, id=article_id)
        if self.stock_service is not None and ({"stock_min", "stock_max"} & update_data.keys()):
            await self.stock_service.refresh_status(article_id)
        return await self.get_article(article_id)
