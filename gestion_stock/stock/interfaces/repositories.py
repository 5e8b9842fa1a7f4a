"""
Interfaces pour les repositories du registre de stock.

Ce fichier contient les interfaces (classes abstraites) pour le repository
des fiches de stock et pour l'unité de travail qui regroupe, dans une même
transaction, l'écriture du stock et l'ajout au journal.
"""
from abc import ABC, abstractmethod
from typing import Optional, List, Tuple

from gestion_stock.articles.models import ArticleSeuils
from gestion_stock.fournisseurs.models import FournisseurRead
from gestion_stock.stock.constants import StatutStock
from gestion_stock.stock.models import StockRead
from gestion_stock.stock_movements.interfaces.repositories import AbstractStockMovementRepository


class AbstractStockRepository(ABC):
    """Interface pour le repository des fiches de stock."""

    @abstractmethod
    async def load(self, article_id: int) -> Optional[StockRead]:
        """Charge la fiche de stock d'un article, avec sa version."""
        raise NotImplementedError

    @abstractmethod
    async def load_article_thresholds(self, article_id: int) -> Optional[ArticleSeuils]:
        """Charge les seuils (stock_min, stock_max) de l'article."""
        raise NotImplementedError

    @abstractmethod
    async def load_fournisseur(self, fournisseur_id: int) -> Optional[FournisseurRead]:
        """Charge le fournisseur référencé par un mouvement."""
        raise NotImplementedError

    @abstractmethod
    async def insert(self, stock: StockRead) -> StockRead:
        """Crée la fiche (version 1). Lève IntegrityError si elle existe déjà."""
        raise NotImplementedError

    @abstractmethod
    async def save(self, stock: StockRead, expected_version: int) -> bool:
        """Écrit la fiche si sa version en base vaut expected_version.

        Returns:
            bool: False si la version a changé entre-temps (conflit).
        """
        raise NotImplementedError

    @abstractmethod
    async def list_stocks(
        self,
        statut: Optional[StatutStock] = None,
        sur_reservation: Optional[bool] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[StockRead], int]:
        """Liste les fiches filtrées et retourne le total."""
        raise NotImplementedError

    @abstractmethod
    async def reset_reservations(self) -> int:
        """Remet toutes les réservations à zéro; retourne le nombre de fiches modifiées."""
        raise NotImplementedError


class AbstractUnitOfWork(ABC):
    """Unité de travail: une session, une transaction, annulée sauf commit explicite."""

    stocks: AbstractStockRepository
    movements: AbstractStockMovementRepository

    async def __aenter__(self) -> "AbstractUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.rollback()

    @abstractmethod
    async def commit(self):
        raise NotImplementedError

    @abstractmethod
    async def rollback(self):
        raise NotImplementedError
