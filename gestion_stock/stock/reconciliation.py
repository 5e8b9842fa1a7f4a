"""
Inventaire physique: rapprochement du comptage avec la quantité système.
"""
import logging
from typing import Optional

from gestion_stock.core.utils import utcnow
from gestion_stock.stock_movements.constants import TypeMouvement, Direction, MOTIF_INVENTAIRE
from gestion_stock.stock_movements.models import StockMovementCreate
from gestion_stock.stock_movements.validation import validate_count
from .exceptions import MovementValidationError
from .interfaces.repositories import AbstractUnitOfWork
from .models import InventoryResult
from .service import StockService

logger = logging.getLogger(__name__)


class InventoryService:
    """Ajuste le stock d'un article sur un comptage physique."""

    def __init__(self, stock_service: StockService):
        self.stock_service = stock_service

    async def reconcile(
        self,
        article_id: int,
        quantite_physique: int,
        utilisateur: str,
        observations: Optional[str] = None
    ) -> InventoryResult:
        """
        Rapproche le comptage physique de la quantité système.

        Un écart positif génère un mouvement INVENTAIRE, un écart négatif une
        CORRECTION sortante, sans contrôle de stock négatif. Un écart nul met
        seulement à jour les informations d'inventaire.

        Raises:
            MovementValidationError: comptage négatif ou utilisateur absent
            ArticleNotFoundException: article inexistant
        """
        validation = validate_count(quantite_physique, utilisateur)
        if not validation.is_valid:
            raise MovementValidationError(validation.violations)

        logger.info(
            f"[InventoryService] Inventaire de l'article {article_id}: "
            f"{quantite_physique} compté(s) par {utilisateur}"
        )
        ledger = self.stock_service

        async def operation(uow: AbstractUnitOfWork) -> InventoryResult:
            stock, seuils = await ledger.load_stock(uow, article_id, create=True)
            ecart = quantite_physique - stock.quantite_actuelle
            inventory_fields = {
                "date_dernier_inventaire": utcnow(),
                "quantite_inventaire": quantite_physique,
                "ecart_inventaire": ecart,
            }

            if ecart == 0:
                updated = stock.model_copy(update=inventory_fields)
                updated = await ledger.save_stock(uow, updated, stock.version)
                return InventoryResult(stock=updated, ecart=0)

            intent = StockMovementCreate(
                type_mouvement=TypeMouvement.INVENTAIRE if ecart > 0 else TypeMouvement.CORRECTION,
                quantite=abs(ecart),
                sens=None if ecart > 0 else Direction.SORTANT,
                quantite_physique=quantite_physique,
                motif=MOTIF_INVENTAIRE,
                utilisateur=utilisateur,
                observations=observations,
            )

            updated, movement = await ledger.apply_to_stock(
                uow, stock, seuils, intent,
                enforce_stock_check=False, extra_updates=inventory_fields
            )
            return InventoryResult(stock=updated, ecart=ecart, mouvement=movement)

        result = await ledger.run_atomic(article_id, operation)
        logger.info(
            f"[InventoryService] Article {article_id}: écart {result.ecart}, "
            f"stock {result.stock.quantite_actuelle}"
        )
        return result
