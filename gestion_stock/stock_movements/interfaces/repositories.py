"""
Interfaces pour le repository du journal des mouvements.

Le journal est en ajout seul: aucune méthode de mise à jour ou de suppression.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List

from gestion_stock.stock_movements.models import StockMovement, StockMovementRead


class AbstractStockMovementRepository(ABC):
    """Interface pour le repository du journal des mouvements de stock."""

    @abstractmethod
    async def record(self, entry: StockMovement) -> StockMovementRead:
        """Ajoute un mouvement (avec son stock avant/après) au journal."""
        raise NotImplementedError

    @abstractmethod
    async def list_for_article(
        self, article_id: int, limit: Optional[int] = None, offset: int = 0
    ) -> List[StockMovementRead]:
        """Liste les mouvements d'un article dans l'ordre de validation (sequence)."""
        raise NotImplementedError

    @abstractmethod
    async def list_between(
        self, start: datetime, end: datetime, article_id: Optional[int] = None
    ) -> List[StockMovementRead]:
        """Liste les mouvements de l'intervalle [start, end[ par date puis ID."""
        raise NotImplementedError
