"""
Implémentation SQLAlchemy du repository des fiches de stock.

L'écriture d'une fiche existante est conditionnelle à sa version: une
mise à jour qui ne touche aucune ligne signale un conflit de concurrence.
"""
import logging
from typing import Optional, List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, update

from gestion_stock.articles.models import Article, ArticleSeuils
from gestion_stock.fournisseurs.models import Fournisseur, FournisseurRead
from gestion_stock.core.utils import utcnow
from gestion_stock.stock.constants import StatutStock
from gestion_stock.stock.models import Stock, StockRead
from gestion_stock.stock.interfaces.repositories import AbstractStockRepository

logger = logging.getLogger(__name__)


class SQLAlchemyStockRepository(AbstractStockRepository):
    """Implémentation SQLAlchemy du repository des fiches de stock."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def load(self, article_id: int) -> Optional[StockRead]:
        result = await self.session.execute(select(Stock).where(Stock.article_id == article_id))
        stock = result.scalar_one_or_none()
        if not stock:
            logger.debug(f"Aucune fiche de stock pour l'article {article_id}.")
            return None
        return StockRead.model_validate(stock)

    async def load_article_thresholds(self, article_id: int) -> Optional[ArticleSeuils]:
        result = await self.session.execute(select(Article).where(Article.id == article_id))
        article = result.scalar_one_or_none()
        if not article:
            return None
        return ArticleSeuils.model_validate(article)

    async def load_fournisseur(self, fournisseur_id: int) -> Optional[FournisseurRead]:
        fournisseur = await self.session.get(Fournisseur, fournisseur_id)
        if not fournisseur:
            logger.debug(f"Fournisseur {fournisseur_id} introuvable.")
            return None
        return FournisseurRead.model_validate(fournisseur)

    async def insert(self, stock: StockRead) -> StockRead:
        db_stock = Stock(**stock.model_dump(exclude={"id", "version"}), version=1)
        self.session.add(db_stock)
        await self.session.flush()
        logger.debug(f"Fiche de stock créée pour l'article {stock.article_id}.")
        return StockRead.model_validate(db_stock)

    async def save(self, stock: StockRead, expected_version: int) -> bool:
        values = stock.model_dump(exclude={"id", "article_id", "version"})
        stmt = (
            update(Stock)
            .where(Stock.article_id == stock.article_id, Stock.version == expected_version)
            .values(**values, version=expected_version + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            logger.debug(
                f"Écriture conditionnelle refusée pour l'article {stock.article_id} "
                f"(version attendue {expected_version})."
            )
            return False
        return True

    async def list_stocks(
        self,
        statut: Optional[StatutStock] = None,
        sur_reservation: Optional[bool] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[StockRead], int]:
        conditions = []
        if statut is not None:
            conditions.append(Stock.statut_stock == statut)
        if sur_reservation is not None:
            conditions.append(Stock.sur_reservation == sur_reservation)

        stmt = select(Stock)
        count_stmt = select(func.count(Stock.id))
        if conditions:
            stmt = stmt.where(*conditions)
            count_stmt = count_stmt.where(*conditions)

        stmt = stmt.order_by(Stock.article_id.asc()).limit(limit).offset(offset)
        result = await self.session.execute(stmt)
        stocks = [StockRead.model_validate(s) for s in result.scalars().all()]

        total_result = await self.session.execute(count_stmt)
        total_count = total_result.scalar_one() or 0
        return stocks, total_count

    async def reset_reservations(self) -> int:
        stmt = (
            update(Stock)
            .where(Stock.quantite_reservee != 0)
            .values(
                quantite_reservee=0,
                quantite_disponible=Stock.quantite_actuelle,
                sur_reservation=False,
                version=Stock.version + 1,
                date_modification=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount
