"""
Constantes pour les mouvements de stock.

La classification des types de mouvement (sens, prix requis, contrepartie
requise, contrôle du stock négatif) est une table de correspondance consultée
par le validateur et par le registre de stock.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict


class TypeMouvement(str, Enum):
    ENTREE = "ENTREE"
    SORTIE = "SORTIE"
    INVENTAIRE = "INVENTAIRE"
    RETOUR_CLIENT = "RETOUR_CLIENT"
    RETOUR_FOURNISSEUR = "RETOUR_FOURNISSEUR"
    PERTE = "PERTE"
    TRANSFERT_ENTREE = "TRANSFERT_ENTREE"
    TRANSFERT_SORTIE = "TRANSFERT_SORTIE"
    CORRECTION = "CORRECTION"


class Direction(str, Enum):
    ENTRANT = "ENTRANT"
    SORTANT = "SORTANT"


class StockCheck(str, Enum):
    """Politique de stock négatif appliquée à un mouvement sortant."""
    STRICT = "STRICT"              # refus si quantité > stock actuel
    CONFIGURABLE = "CONFIGURABLE"  # dépend de StockSettings.ALLOW_NEGATIVE_PERTE
    EXEMPT = "EXEMPT"              # jamais contrôlé


@dataclass(frozen=True)
class MovementRule:
    direction: Direction
    label: str
    price_required: bool = False
    supplier_required: bool = False
    counterpart_required: bool = False
    stock_check: StockCheck = StockCheck.STRICT
    direction_overridable: bool = False
    is_count: bool = False

    @property
    def inbound(self) -> bool:
        return self.direction == Direction.ENTRANT


MOVEMENT_RULES: Dict[TypeMouvement, MovementRule] = {
    TypeMouvement.ENTREE: MovementRule(
        direction=Direction.ENTRANT, label="Entrée de stock",
        price_required=True, supplier_required=True,
    ),
    TypeMouvement.RETOUR_CLIENT: MovementRule(direction=Direction.ENTRANT, label="Retour client"),
    TypeMouvement.TRANSFERT_ENTREE: MovementRule(direction=Direction.ENTRANT, label="Transfert entrant"),
    # INVENTAIRE et CORRECTION sont classés entrants par convention
    TypeMouvement.INVENTAIRE: MovementRule(
        direction=Direction.ENTRANT, label="Ajustement inventaire", is_count=True,
    ),
    TypeMouvement.CORRECTION: MovementRule(
        direction=Direction.ENTRANT, label="Correction manuelle", is_count=True,
        stock_check=StockCheck.EXEMPT, direction_overridable=True,
    ),
    TypeMouvement.SORTIE: MovementRule(
        direction=Direction.SORTANT, label="Sortie de stock", counterpart_required=True,
    ),
    TypeMouvement.RETOUR_FOURNISSEUR: MovementRule(
        direction=Direction.SORTANT, label="Retour fournisseur", counterpart_required=True,
    ),
    TypeMouvement.PERTE: MovementRule(
        direction=Direction.SORTANT, label="Perte/Casse", counterpart_required=True,
        stock_check=StockCheck.CONFIGURABLE,
    ),
    TypeMouvement.TRANSFERT_SORTIE: MovementRule(
        direction=Direction.SORTANT, label="Transfert sortant", counterpart_required=True,
    ),
}


def get_movement_rule(type_mouvement: TypeMouvement) -> MovementRule:
    return MOVEMENT_RULES[TypeMouvement(type_mouvement)]


# Motif des mouvements générés par un inventaire physique
MOTIF_INVENTAIRE = "Ajustement inventaire"
