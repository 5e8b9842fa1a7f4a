"""
Registre de stock.

Chaque opération publique s'exécute comme une unité atomique sur la fiche de
stock d'un article: chargement, calcul pur, écriture conditionnelle à la
version, ajout au journal, dans une seule transaction. Un conflit de version
provoque une nouvelle tentative complète, dans la limite configurée.
"""
import asyncio
import logging
import random
from typing import Awaitable, Callable, List, Optional, Tuple, TypeVar

from sqlalchemy.exc import IntegrityError, OperationalError, InterfaceError, TimeoutError as PoolTimeoutError

from gestion_stock.articles.exceptions import ArticleNotFoundException
from gestion_stock.articles.models import ArticleSeuils
from gestion_stock.core.utils import utcnow
from gestion_stock.fournisseurs.exceptions import FournisseurNotFoundException
from gestion_stock.stock_movements.constants import Direction, StockCheck, MovementRule, get_movement_rule
from gestion_stock.stock_movements.models import StockMovement, StockMovementCreate, StockMovementRead
from gestion_stock.stock_movements.validation import (
    Violation, ViolationCode, validate_movement
)
from .config import StockSettings, settings as stock_settings
from .constants import StatutStock, ERROR_INVALID_QUANTITY
from .exceptions import (
    StockError,
    StockNotFoundError,
    StockAlreadyInitializedError,
    InsufficientStockError,
    MovementValidationError,
    ConcurrencyConflictError,
    PersistenceUnavailableError
)
from .interfaces.repositories import AbstractUnitOfWork
from .models import StockRead, PaginatedStockResponse, BatchMovementResult
from .utils import apply_quantity, adjust_reservation, recompute_stock, round_amount

logger = logging.getLogger(__name__)

T = TypeVar('T')

UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]


class VersionConflict(Exception):
    """Écriture conditionnelle refusée: la fiche a changé depuis sa lecture."""
    pass


class StockService:
    """Service applicatif du registre de stock."""

    def __init__(self, uow_factory: UnitOfWorkFactory, settings: Optional[StockSettings] = None):
        self.uow_factory = uow_factory
        self.settings = settings or stock_settings
        logger.debug("StockService initialized.")

    # ------------------------------------------------------------------
    # Mécanique transactionnelle
    # ------------------------------------------------------------------

    async def run_atomic(self, article_id: Optional[int], operation: Callable[[AbstractUnitOfWork], Awaitable[T]]) -> T:
        """Exécute `operation` dans une unité de travail, avec nouvelle tentative sur conflit.

        Raises:
            ConcurrencyConflictError: toutes les tentatives ont perdu la course.
            PersistenceUnavailableError: la base est injoignable.
        """
        max_attempts = max(1, self.settings.MAX_CONFLICT_RETRIES)
        for attempt in range(1, max_attempts + 1):
            try:
                async with self.uow_factory() as uow:
                    result = await operation(uow)
                    await uow.commit()
                    return result
            except VersionConflict:
                logger.warning(f"[StockService] Conflit de version sur l'article {article_id} (tentative {attempt}/{max_attempts}).")
            except IntegrityError:
                # Création paresseuse concurrente de la même fiche
                logger.warning(f"[StockService] Fiche de l'article {article_id} créée en concurrence (tentative {attempt}/{max_attempts}).")
            except (OperationalError, InterfaceError, PoolTimeoutError, OSError) as e:
                logger.error(f"[StockService] Base de données indisponible pour l'article {article_id}: {e}", exc_info=True)
                raise PersistenceUnavailableError() from e

            if attempt < max_attempts:
                await asyncio.sleep(self.settings.RETRY_BASE_DELAY * attempt * random.uniform(0.5, 1.5))

        logger.error(f"[StockService] Abandon après {max_attempts} conflit(s) sur l'article {article_id}.")
        raise ConcurrencyConflictError(article_id, max_attempts)

    async def load_stock(
        self, uow: AbstractUnitOfWork, article_id: int, create: bool = True
    ) -> Tuple[StockRead, ArticleSeuils]:
        """Charge la fiche et les seuils; crée un instantané vide (version 0) si besoin."""
        seuils = await uow.stocks.load_article_thresholds(article_id)
        if seuils is None:
            raise ArticleNotFoundException(article_id=article_id)
        stock = await uow.stocks.load(article_id)
        if stock is None:
            if not create:
                raise StockNotFoundError(article_id)
            # Quantité nulle, PMP inconnu
            stock = recompute_stock(StockRead(article_id=article_id, version=0), seuils)
        return stock, seuils

    async def save_stock(self, uow: AbstractUnitOfWork, updated: StockRead, expected_version: int) -> StockRead:
        """Insère (version 0) ou écrit conditionnellement la fiche; retourne la nouvelle version."""
        if expected_version == 0:
            return await uow.stocks.insert(updated)
        if not await uow.stocks.save(updated, expected_version):
            raise VersionConflict()
        return updated.model_copy(update={"version": expected_version + 1})

    def _stock_check_required(self, rule: MovementRule) -> bool:
        if rule.stock_check == StockCheck.EXEMPT:
            return False
        if rule.stock_check == StockCheck.CONFIGURABLE:
            return not self.settings.ALLOW_NEGATIVE_PERTE
        return True

    async def apply_to_stock(
        self,
        uow: AbstractUnitOfWork,
        stock: StockRead,
        seuils: ArticleSeuils,
        intent: StockMovementCreate,
        enforce_stock_check: bool = True,
        extra_updates: Optional[dict] = None
    ) -> Tuple[StockRead, StockMovementRead]:
        """Applique un mouvement validé à une fiche chargée dans `uow` et le journalise."""
        rule = get_movement_rule(intent.type_mouvement)
        direction = intent.sens or rule.direction

        fournisseur = None
        if intent.fournisseur_id is not None:
            fournisseur = await uow.stocks.load_fournisseur(intent.fournisseur_id)
            if fournisseur is None:
                raise FournisseurNotFoundException(intent.fournisseur_id)

        if (direction == Direction.SORTANT and enforce_stock_check
                and self._stock_check_required(rule) and intent.quantite > stock.quantite_actuelle):
            logger.warning(
                f"[StockService] Stock insuffisant pour l'article {stock.article_id}: "
                f"demandé {intent.quantite}, disponible {stock.quantite_actuelle}"
            )
            raise InsufficientStockError(stock.article_id, requested=intent.quantite, available=stock.quantite_actuelle)

        moment = utcnow()
        updated, stock_avant, stock_apres = apply_quantity(
            stock, direction, intent.quantite, intent.prix_unitaire, seuils, moment
        )
        if extra_updates:
            updated = updated.model_copy(update=extra_updates)
        updated = await self.save_stock(uow, updated, stock.version)

        # Sans prix explicite, le mouvement est valorisé au PMP courant
        prix = intent.prix_unitaire if intent.prix_unitaire is not None else stock.prix_moyen_pondere
        entry = StockMovement(
            article_id=stock.article_id,
            fournisseur_id=intent.fournisseur_id,
            type_mouvement=intent.type_mouvement,
            sens=direction,
            quantite=intent.quantite,
            prix_unitaire=prix,
            valeur_totale=round_amount(prix * intent.quantite) if prix is not None else None,
            contrepartie=intent.contrepartie or (fournisseur.nom if fournisseur else None),
            motif=intent.motif or rule.label,
            numero_bon=intent.numero_bon,
            numero_facture=intent.numero_facture,
            observations=intent.observations,
            utilisateur=intent.utilisateur.strip(),
            stock_avant=stock_avant,
            stock_apres=stock_apres,
            sequence=updated.version,
            date_mouvement=moment,
        )
        movement = await uow.movements.record(entry)
        return updated, movement

    @staticmethod
    def _validate(intent: StockMovementCreate) -> None:
        result = validate_movement(intent)
        if not result.is_valid:
            logger.info(f"[StockService] Mouvement rejeté: {[v.code.value for v in result.violations]}")
            raise MovementValidationError(result.violations)

    @staticmethod
    def _validate_quantity(quantite: int) -> None:
        if quantite is None or quantite <= 0:
            raise MovementValidationError([
                Violation(field="quantite", code=ViolationCode.QUANTITE_NON_POSITIVE, message=ERROR_INVALID_QUANTITY)
            ])

    # ------------------------------------------------------------------
    # Opérations publiques
    # ------------------------------------------------------------------

    async def apply_movement(self, article_id: int, intent: StockMovementCreate) -> StockRead:
        """Valide puis applique un mouvement à la fiche de l'article.

        Raises:
            MovementValidationError, ArticleNotFoundException, FournisseurNotFoundException,
            InsufficientStockError, ConcurrencyConflictError, PersistenceUnavailableError
        """
        stock, _ = await self.record_movement(article_id, intent)
        return stock

    async def record_movement(
        self, article_id: int, intent: StockMovementCreate
    ) -> Tuple[StockRead, StockMovementRead]:
        """Comme apply_movement, retourne aussi l'entrée de journal créée."""
        logger.info(
            f"[StockService] Mouvement {intent.type_mouvement.value} x{intent.quantite} "
            f"sur l'article {article_id} par {intent.utilisateur}"
        )
        self._validate(intent)

        async def operation(uow: AbstractUnitOfWork):
            stock, seuils = await self.load_stock(uow, article_id, create=True)
            return await self.apply_to_stock(uow, stock, seuils, intent)

        stock, movement = await self.run_atomic(article_id, operation)
        logger.info(
            f"[StockService] Article {article_id}: {movement.stock_avant} -> {movement.stock_apres}, "
            f"PMP={stock.prix_moyen_pondere}, statut={stock.statut_stock.value}"
        )
        return stock, movement

    async def apply_movements(self, article_id: int, intents: List[StockMovementCreate]) -> List[BatchMovementResult]:
        """Applique un lot de mouvements dans l'ordre, chacun de façon atomique.

        Les erreurs métier sont collectées par mouvement; une indisponibilité
        de la base interrompt le lot.
        """
        results = []
        for index, intent in enumerate(intents):
            try:
                stock = await self.apply_movement(article_id, intent)
                results.append(BatchMovementResult(index=index, succes=True, stock=stock))
            except PersistenceUnavailableError:
                raise
            except (StockError, ArticleNotFoundException, FournisseurNotFoundException) as e:
                logger.warning(f"[StockService] Lot article {article_id}, mouvement {index} rejeté: {e}")
                results.append(BatchMovementResult(index=index, succes=False, erreur=str(e)))
        return results

    async def reserve(self, article_id: int, quantite: int) -> StockRead:
        """Réserve une quantité. La sur-réservation est tolérée mais signalée."""
        self._validate_quantity(quantite)

        async def operation(uow: AbstractUnitOfWork):
            stock, seuils = await self.load_stock(uow, article_id, create=False)
            return await self.save_stock(uow, adjust_reservation(stock, quantite, seuils, utcnow()), stock.version)

        stock = await self.run_atomic(article_id, operation)
        if stock.sur_reservation:
            logger.warning(
                f"[StockService] Sur-réservation sur l'article {article_id}: "
                f"réservé {stock.quantite_reservee}, en stock {stock.quantite_actuelle}"
            )
        return stock

    async def release(self, article_id: int, quantite: int) -> StockRead:
        """Libère une quantité réservée (la réservation ne descend pas sous 0)."""
        self._validate_quantity(quantite)

        async def operation(uow: AbstractUnitOfWork):
            stock, seuils = await self.load_stock(uow, article_id, create=False)
            return await self.save_stock(uow, adjust_reservation(stock, -quantite, seuils, utcnow()), stock.version)

        return await self.run_atomic(article_id, operation)

    async def get_snapshot(self, article_id: int) -> StockRead:
        """Lecture seule de la fiche de stock."""
        async def operation(uow: AbstractUnitOfWork):
            stock = await uow.stocks.load(article_id)
            if stock is None:
                raise StockNotFoundError(article_id)
            return stock

        return await self.run_atomic(article_id, operation)

    async def initialize_stock(self, article_id: int) -> StockRead:
        """Crée explicitement une fiche vide, valorisée au prix de référence de l'article."""
        async def operation(uow: AbstractUnitOfWork):
            seuils = await uow.stocks.load_article_thresholds(article_id)
            if seuils is None:
                raise ArticleNotFoundException(article_id=article_id)
            if await uow.stocks.load(article_id) is not None:
                raise StockAlreadyInitializedError(article_id)
            stock = StockRead(article_id=article_id, prix_moyen_pondere=seuils.prix_unitaire,
                              date_modification=utcnow())
            return await uow.stocks.insert(recompute_stock(stock, seuils))

        stock = await self.run_atomic(article_id, operation)
        logger.info(f"[StockService] Stock initialisé pour l'article {article_id}.")
        return stock

    async def refresh_status(self, article_id: int) -> Optional[StockRead]:
        """Reclasse la fiche après une modification des seuils de l'article.

        Returns:
            Optional[StockRead]: la fiche à jour, None si l'article n'a pas encore de fiche.
        """
        async def operation(uow: AbstractUnitOfWork):
            stock, seuils = await self.load_stock(uow, article_id, create=True)
            if stock.version == 0:
                return None
            updated = recompute_stock(stock, seuils)
            if updated.statut_stock == stock.statut_stock:
                return stock
            updated = updated.model_copy(update={"date_modification": utcnow()})
            return await self.save_stock(uow, updated, stock.version)

        stock = await self.run_atomic(article_id, operation)
        if stock is not None:
            logger.info(f"[StockService] Article {article_id}: statut {stock.statut_stock.value} après modification des seuils.")
        return stock

    async def check_availability(self, article_id: int, quantite: int) -> bool:
        """Indique si la quantité disponible couvre la demande."""
        self._validate_quantity(quantite)

        async def operation(uow: AbstractUnitOfWork):
            return await uow.stocks.load(article_id)

        stock = await self.run_atomic(article_id, operation)
        return stock is not None and stock.quantite_disponible >= quantite

    async def reset_all_reservations(self) -> int:
        """Remet toutes les réservations à zéro en une seule écriture."""
        async def operation(uow: AbstractUnitOfWork):
            return await uow.stocks.reset_reservations()

        count = await self.run_atomic(None, operation)
        logger.info(f"[StockService] Réservations remises à zéro sur {count} fiche(s).")
        return count

    async def list_stocks(
        self,
        statut: Optional[StatutStock] = None,
        sur_reservation: Optional[bool] = None,
        limit: int = 50,
        offset: int = 0
    ) -> PaginatedStockResponse:
        """Liste les fiches, filtrables par statut et sur-réservation (alertes)."""
        async def operation(uow: AbstractUnitOfWork):
            return await uow.stocks.list_stocks(statut=statut, sur_reservation=sur_reservation, limit=limit, offset=offset)

        stocks, total = await self.run_atomic(None, operation)
        return PaginatedStockResponse(items=stocks, total=total)
