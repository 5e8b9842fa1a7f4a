from datetime import datetime, timezone
from decimal import Decimal

import pytest

from gestion_stock.articles.models import ArticleSeuils
from gestion_stock.stock.constants import StatutStock
from gestion_stock.stock.models import StockRead
from gestion_stock.stock.utils import (
    calculate_stock_status,
    calculate_stock_value,
    calculate_average_cost,
    recompute_stock,
    apply_quantity,
    adjust_reservation,
)
from gestion_stock.stock_movements.constants import Direction

MOMENT = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
SEUILS = ArticleSeuils(id=1, stock_min=10, stock_max=100)


@pytest.mark.parametrize("quantity, expected", [
    (-2, StatutStock.CRITIQUE),
    (0, StatutStock.CRITIQUE),
    (4, StatutStock.CRITIQUE),    # < 10 * 0.5
    (5, StatutStock.FAIBLE),      # = 10 * 0.5
    (10, StatutStock.FAIBLE),     # = stock_min
    (11, StatutStock.NORMAL),
    (100, StatutStock.NORMAL),    # = stock_max
    (101, StatutStock.EXCESSIF),
])
def test_status_boundaries(quantity, expected):
    assert calculate_stock_status(quantity, stock_min=10, stock_max=100) == expected


def test_status_without_thresholds():
    assert calculate_stock_status(0) == StatutStock.CRITIQUE
    assert calculate_stock_status(1) == StatutStock.NORMAL
    assert calculate_stock_status(10_000) == StatutStock.NORMAL


def test_status_without_maximum():
    assert calculate_stock_status(500, stock_min=10) == StatutStock.NORMAL


def test_stock_value_unknown_cost():
    assert calculate_stock_value(12, None) == Decimal("0.00")
    assert calculate_stock_value(3, Decimal("2.50")) == Decimal("7.50")


def test_average_cost():
    # 10 @ 5.00 + 10 @ 7.00 -> 6.00
    assert calculate_average_cost(10, Decimal("5.00"), 10, Decimal("7.00")) == Decimal("6.00")


def test_average_cost_rounds_half_up():
    # (1 * 1.00 + 2 * 1.01) / 3 = 1.00666...
    assert calculate_average_cost(1, Decimal("1.00"), 2, Decimal("1.01")) == Decimal("1.01")
    # (1 * 0.01 + 1 * 0.02) / 2 = 0.015
    assert calculate_average_cost(1, Decimal("0.01"), 1, Decimal("0.02")) == Decimal("0.02")


def test_average_cost_on_empty_or_unknown_stock():
    assert calculate_average_cost(0, Decimal("5.00"), 4, Decimal("8.00")) == Decimal("8.00")
    assert calculate_average_cost(-3, Decimal("5.00"), 4, Decimal("8.00")) == Decimal("8.00")
    assert calculate_average_cost(7, None, 4, Decimal("8.00")) == Decimal("8.00")


def test_average_cost_without_price_is_unchanged():
    assert calculate_average_cost(10, Decimal("5.00"), 4, None) == Decimal("5.00")
    assert calculate_average_cost(0, None, 4, None) is None


def test_recompute_stock_derived_fields():
    stock = StockRead(article_id=1, quantite_actuelle=8, quantite_reservee=10, prix_moyen_pondere=Decimal("2.00"))
    result = recompute_stock(stock, SEUILS)
    assert result.quantite_disponible == -2
    assert result.sur_reservation is True
    assert result.valeur_stock == Decimal("16.00")
    assert result.statut_stock == StatutStock.FAIBLE
    # Instantané d'origine inchangé
    assert stock.quantite_disponible == 0


def test_apply_inbound_quantity():
    stock = recompute_stock(
        StockRead(article_id=1, quantite_actuelle=10, prix_moyen_pondere=Decimal("5.00"), version=3), SEUILS
    )
    updated, avant, apres = apply_quantity(stock, Direction.ENTRANT, 10, Decimal("7.00"), SEUILS, MOMENT)

    assert (avant, apres) == (10, 20)
    assert updated.quantite_actuelle == 20
    assert updated.prix_moyen_pondere == Decimal("6.00")
    assert updated.valeur_stock == Decimal("120.00")
    assert updated.derniere_entree == MOMENT
    assert updated.derniere_sortie is None
    assert updated.statut_stock == StatutStock.NORMAL
    # La version est gérée par l'écriture conditionnelle
    assert updated.version == 3


def test_apply_outbound_quantity_keeps_cost():
    stock = recompute_stock(
        StockRead(article_id=1, quantite_actuelle=20, quantite_reservee=5, prix_moyen_pondere=Decimal("6.00")), SEUILS
    )
    updated, avant, apres = apply_quantity(stock, Direction.SORTANT, 12, None, SEUILS, MOMENT)

    assert (avant, apres) == (20, 8)
    assert updated.prix_moyen_pondere == Decimal("6.00")
    assert updated.quantite_disponible == 3
    assert updated.valeur_stock == Decimal("48.00")
    assert updated.derniere_sortie == MOMENT
    assert updated.statut_stock == StatutStock.FAIBLE


def test_adjust_reservation_clamps_at_zero():
    stock = recompute_stock(StockRead(article_id=1, quantite_actuelle=10, quantite_reservee=3), SEUILS)
    released = adjust_reservation(stock, -8, SEUILS, MOMENT)
    assert released.quantite_reservee == 0
    assert released.quantite_disponible == 10

    reserved = adjust_reservation(stock, 9, SEUILS, MOMENT)
    assert reserved.quantite_reservee == 12
    assert reserved.quantite_disponible == -2
    assert reserved.sur_reservation is True
