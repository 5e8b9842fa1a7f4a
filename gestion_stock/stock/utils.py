"""
Calculs du registre de stock.

Fonctions pures: elles reçoivent un instantané et retournent un nouvel
instantané, sans accès à la base de données.
"""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from gestion_stock.articles.models import ArticleSeuils
from gestion_stock.stock_movements.constants import Direction
from .constants import StatutStock, RATIO_SEUIL_CRITIQUE, PRECISION_MONETAIRE
from .models import StockRead

QUANTUM = Decimal(PRECISION_MONETAIRE)


def round_amount(amount: Decimal) -> Decimal:
    """Arrondit un montant à 2 décimales, au demi supérieur."""
    return Decimal(amount).quantize(QUANTUM, rounding=ROUND_HALF_UP)


def calculate_stock_status(
    quantity: int,
    stock_min: Optional[int] = None,
    stock_max: Optional[int] = None
) -> StatutStock:
    """
    Calcule le statut du stock à partir des seuils de l'article.

    Sans stock minimum, seule la règle quantité <= 0 (CRITIQUE) s'applique.

    Args:
        quantity: Quantité actuelle en stock
        stock_min: Seuil minimum de l'article (optionnel)
        stock_max: Seuil maximum de l'article (optionnel)

    Returns:
        StatutStock: NORMAL, FAIBLE, CRITIQUE ou EXCESSIF
    """
    if quantity <= 0:
        return StatutStock.CRITIQUE
    if stock_min is None:
        return StatutStock.NORMAL
    if quantity < stock_min * RATIO_SEUIL_CRITIQUE:
        return StatutStock.CRITIQUE
    if quantity <= stock_min:
        return StatutStock.FAIBLE
    if stock_max is not None and quantity > stock_max:
        return StatutStock.EXCESSIF
    return StatutStock.NORMAL


def calculate_stock_value(quantity: int, average_cost: Optional[Decimal]) -> Decimal:
    """
    Calcule la valeur totale du stock.

    Args:
        quantity: Quantité en stock
        average_cost: PMP, None tant qu'aucune entrée valorisée n'a eu lieu

    Returns:
        Decimal: Valeur du stock (0.00 si le PMP est inconnu)
    """
    if average_cost is None:
        return round_amount(Decimal("0"))
    return round_amount(average_cost * quantity)


def calculate_average_cost(
    old_quantity: int,
    old_cost: Optional[Decimal],
    quantity_in: int,
    unit_price: Optional[Decimal]
) -> Optional[Decimal]:
    """
    Recalcule le prix moyen pondéré après une entrée.

    Sur un stock vide (ou négatif après correction), ou si le PMP est encore
    inconnu, le nouveau PMP est directement le prix d'entrée. Une entrée sans
    prix laisse le PMP inchangé.
    """
    if unit_price is None:
        return old_cost
    if old_quantity <= 0 or old_cost is None:
        return round_amount(unit_price)
    total_value = old_cost * old_quantity + unit_price * quantity_in
    return round_amount(total_value / (old_quantity + quantity_in))


def recompute_stock(stock: StockRead, seuils: Optional[ArticleSeuils]) -> StockRead:
    """Recalcule les champs dérivés d'un instantané (disponible, valeur, statut)."""
    stock_min = seuils.stock_min if seuils else None
    stock_max = seuils.stock_max if seuils else None
    return stock.model_copy(update={
        "quantite_disponible": stock.quantite_actuelle - stock.quantite_reservee,
        "sur_reservation": stock.quantite_reservee > stock.quantite_actuelle,
        "valeur_stock": calculate_stock_value(stock.quantite_actuelle, stock.prix_moyen_pondere),
        "statut_stock": calculate_stock_status(stock.quantite_actuelle, stock_min, stock_max),
    })


def apply_quantity(
    stock: StockRead,
    direction: Direction,
    quantity: int,
    unit_price: Optional[Decimal],
    seuils: Optional[ArticleSeuils],
    moment: datetime
) -> Tuple[StockRead, int, int]:
    """
    Applique un mouvement déjà validé et autorisé à un instantané.

    Returns:
        Tuple[StockRead, int, int]: nouvel instantané, stock avant, stock après
    """
    stock_avant = stock.quantite_actuelle
    if direction == Direction.ENTRANT:
        changes = {
            "prix_moyen_pondere": calculate_average_cost(stock_avant, stock.prix_moyen_pondere, quantity, unit_price),
            "quantite_actuelle": stock_avant + quantity,
            "derniere_entree": moment,
        }
    else:
        # Une sortie ne modifie pas le PMP
        changes = {
            "quantite_actuelle": stock_avant - quantity,
            "derniere_sortie": moment,
        }
    changes["date_modification"] = moment
    updated = recompute_stock(stock.model_copy(update=changes), seuils)
    return updated, stock_avant, updated.quantite_actuelle


def adjust_reservation(
    stock: StockRead,
    delta: int,
    seuils: Optional[ArticleSeuils],
    moment: datetime
) -> StockRead:
    """Ajuste la quantité réservée (bornée à 0) et recalcule les champs dérivés."""
    reservee = max(0, stock.quantite_reservee + delta)
    return recompute_stock(
        stock.model_copy(update={"quantite_reservee": reservee, "date_modification": moment}),
        seuils,
    )
