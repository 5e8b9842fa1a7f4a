"""
Exceptions personnalisées pour le module de gestion des stocks.
"""
from typing import List

from gestion_stock.articles.exceptions import ArticleNotFoundException
from gestion_stock.stock_movements.validation import Violation


class StockError(Exception):
    """Classe de base pour les exceptions liées au stock."""
    pass

class StockNotFoundError(ArticleNotFoundException, StockError):
    """Levée lorsque l'article n'a pas encore de fiche de stock."""
    def __init__(self, article_id: int):
        self.article_id = article_id
        self.code = None
        Exception.__init__(self, f"Aucune fiche de stock pour l'article {article_id}")

class StockAlreadyInitializedError(StockError):
    """Levée lors d'une initialisation explicite d'un stock déjà existant."""
    def __init__(self, article_id: int):
        self.article_id = article_id
        super().__init__(f"Le stock de l'article {article_id} est déjà initialisé")

class InsufficientStockError(StockError):
    """Levée lorsque le stock est insuffisant pour un mouvement sortant."""
    def __init__(self, article_id: int, requested: int, available: int):
        self.article_id = article_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Stock insuffisant pour l'article {article_id}. "
            f"Demandé: {requested}, Disponible: {available}"
        )

class MovementValidationError(StockError):
    """Levée lorsque l'intention de mouvement est invalide."""
    def __init__(self, violations: List[Violation]):
        self.violations = violations
        details = ", ".join(f"{v.field}: {v.code.value}" for v in violations)
        super().__init__(f"Mouvement de stock invalide ({details})")

class ConcurrencyConflictError(StockError):
    """Levée lorsque l'écriture conditionnelle a perdu la course après toutes les tentatives."""
    def __init__(self, article_id: int, attempts: int):
        self.article_id = article_id
        self.attempts = attempts
        super().__init__(
            f"Conflit de mise à jour concurrente sur le stock de l'article {article_id} "
            f"après {attempts} tentative(s)"
        )

class PersistenceUnavailableError(StockError):
    """Levée lorsque la base de données est indisponible. L'appelant peut réessayer."""
    def __init__(self, message: str = "Base de données indisponible, veuillez réessayer"):
        self.message = message
        super().__init__(message)
