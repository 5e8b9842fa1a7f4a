import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from fastcrud import FastCRUD

from gestion_stock.core.schemas import PaginatedResponse
from .constants import TypeMouvement
from .models import StockMovementRead
from .repositories import SQLAlchemyStockMovementRepository
from .exceptions import (
    StockMovementNotFoundException,
    InvalidStockMovementOperationException
)

logger = logging.getLogger(__name__)

class PaginatedStockMovementResponse(PaginatedResponse[StockMovementRead]): pass


class StockMovementService:
    """Service de consultation du journal des mouvements (lecture seule).

    Les mouvements sont créés exclusivement par le registre de stock, dans la
    transaction qui modifie la fiche.
    """

    def __init__(self, db: AsyncSession, movement_crud: FastCRUD):
        self.db = db
        self.movement_crud = movement_crud
        self.repository = SQLAlchemyStockMovementRepository(db)
        logger.info("StockMovementService initialized.")

    async def list_movements(
        self,
        limit: int = 100,
        offset: int = 0,
        article_id: Optional[int] = None,
        type_mouvement: Optional[TypeMouvement] = None,
        fournisseur_id: Optional[int] = None,
        numero_bon: Optional[str] = None,
        date_debut: Optional[datetime] = None,
        date_fin: Optional[datetime] = None,
        sort_desc: bool = True
    ) -> PaginatedStockMovementResponse:
        """Liste les mouvements avec filtres et pagination, les plus récents d'abord."""
        if date_debut and date_fin and date_debut >= date_fin:
            raise InvalidStockMovementOperationException("La date de début doit précéder la date de fin")

        filters = {}
        if article_id is not None: filters["article_id"] = article_id
        if type_mouvement is not None: filters["type_mouvement"] = type_mouvement
        if fournisseur_id is not None: filters["fournisseur_id"] = fournisseur_id
        if numero_bon: filters["numero_bon"] = numero_bon
        if date_debut is not None: filters["date_mouvement__gte"] = date_debut
        if date_fin is not None: filters["date_mouvement__lt"] = date_fin

        logger.debug(f"[StockMovementService] List Movements: filters={filters}, limit={limit}, offset={offset}")
        result = await self.movement_crud.get_multi(
            self.db,
            offset=offset,
            limit=limit,
            schema_to_select=StockMovementRead,
            return_as_model=True,
            sort_columns="id",
            sort_orders="desc" if sort_desc else "asc",
            **filters
        )
        return PaginatedStockMovementResponse(items=result["data"], total=result["total_count"])

    async def get_movement(self, movement_id: int) -> StockMovementRead:
        """Récupère un mouvement de stock par ID."""
        logger.debug(f"[StockMovementService] Get Movement ID: {movement_id}")
        movement = await self.movement_crud.get(
            self.db, schema_to_select=StockMovementRead, return_as_model=True, id=movement_id
        )
        if not movement:
            raise StockMovementNotFoundException(movement_id)
        return movement

    async def list_for_article(
        self, article_id: int, limit: Optional[int] = None, offset: int = 0
    ) -> List[StockMovementRead]:
        """Historique d'un article dans l'ordre de validation (sequence croissante)."""
        return await self.repository.list_for_article(article_id, limit=limit, offset=offset)

    async def list_between(
        self, start: datetime, end: datetime, article_id: Optional[int] = None
    ) -> List[StockMovementRead]:
        """Mouvements de la période [start, end), par date puis ID."""
        if start >= end:
            raise InvalidStockMovementOperationException("La date de début doit précéder la date de fin")
        return await self.repository.list_between(start, end, article_id=article_id)

    async def list_recent(self, limit: int = 20) -> List[StockMovementRead]:
        """Derniers mouvements enregistrés, tous articles confondus."""
        page = await self.list_movements(limit=limit, offset=0)
        return page.items
