"""
Implémentation SQLAlchemy du journal des mouvements de stock.
"""
import logging
from datetime import datetime
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from gestion_stock.stock_movements.models import StockMovement, StockMovementRead
from gestion_stock.stock_movements.interfaces.repositories import AbstractStockMovementRepository

logger = logging.getLogger(__name__)


class SQLAlchemyStockMovementRepository(AbstractStockMovementRepository):
    """Implémentation SQLAlchemy du journal des mouvements."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(self, entry: StockMovement) -> StockMovementRead:
        self.session.add(entry)
        await self.session.flush()
        logger.debug(
            f"Mouvement {entry.type_mouvement.value} journalisé pour l'article {entry.article_id} "
            f"(sequence {entry.sequence}, {entry.stock_avant} -> {entry.stock_apres})"
        )
        return StockMovementRead.model_validate(entry)

    async def list_for_article(
        self, article_id: int, limit: Optional[int] = None, offset: int = 0
    ) -> List[StockMovementRead]:
        stmt = (
            select(StockMovement)
            .where(StockMovement.article_id == article_id)
            .order_by(StockMovement.sequence.asc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return [StockMovementRead.model_validate(m) for m in result.scalars().all()]

    async def list_between(
        self, start: datetime, end: datetime, article_id: Optional[int] = None
    ) -> List[StockMovementRead]:
        stmt = select(StockMovement).where(
            StockMovement.date_mouvement >= start,
            StockMovement.date_mouvement < end,
        )
        if article_id is not None:
            stmt = stmt.where(StockMovement.article_id == article_id)
        stmt = stmt.order_by(StockMovement.date_mouvement.asc(), StockMovement.id.asc())
        result = await self.session.execute(stmt)
        return [StockMovementRead.model_validate(m) for m in result.scalars().all()]
