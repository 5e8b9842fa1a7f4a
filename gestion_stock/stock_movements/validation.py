"""
Validation métier des mouvements de stock.

Fonctions pures, sans accès base de données. Les règles sont évaluées dans
l'ordre; l'évaluation s'arrête à la première règle qui produit des violations.
"""
from enum import Enum
from typing import Callable, List, Optional

from pydantic import BaseModel

from .constants import MovementRule, get_movement_rule
from .models import StockMovementCreate


class ViolationCode(str, Enum):
    QUANTITE_NON_POSITIVE = "QUANTITE_NON_POSITIVE"
    PRIX_REQUIS = "PRIX_REQUIS"
    PRIX_NON_POSITIF = "PRIX_NON_POSITIF"
    FOURNISSEUR_REQUIS = "FOURNISSEUR_REQUIS"
    CONTREPARTIE_REQUISE = "CONTREPARTIE_REQUISE"
    QUANTITE_PHYSIQUE_NEGATIVE = "QUANTITE_PHYSIQUE_NEGATIVE"
    UTILISATEUR_REQUIS = "UTILISATEUR_REQUIS"
    SENS_NON_MODIFIABLE = "SENS_NON_MODIFIABLE"


class Violation(BaseModel):
    field: str
    code: ViolationCode
    message: str


class ValidationResult(BaseModel):
    violations: List[Violation] = []

    @property
    def is_valid(self) -> bool:
        return not self.violations


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _check_quantity(intent: StockMovementCreate, rule: MovementRule) -> List[Violation]:
    if intent.quantite is None or intent.quantite <= 0:
        return [Violation(field="quantite", code=ViolationCode.QUANTITE_NON_POSITIVE,
                          message="La quantité doit être strictement positive")]
    return []


def _check_price_and_supplier(intent: StockMovementCreate, rule: MovementRule) -> List[Violation]:
    violations = []
    if rule.price_required and intent.prix_unitaire is None:
        violations.append(Violation(field="prix_unitaire", code=ViolationCode.PRIX_REQUIS,
                                    message="Le prix unitaire est obligatoire pour une entrée"))
    elif intent.prix_unitaire is not None and intent.prix_unitaire <= 0:
        violations.append(Violation(field="prix_unitaire", code=ViolationCode.PRIX_NON_POSITIF,
                                    message="Le prix unitaire doit être strictement positif"))
    if rule.supplier_required and intent.fournisseur_id is None:
        violations.append(Violation(field="fournisseur_id", code=ViolationCode.FOURNISSEUR_REQUIS,
                                    message="Le fournisseur est obligatoire pour une entrée"))
    return violations


def _check_counterpart(intent: StockMovementCreate, rule: MovementRule) -> List[Violation]:
    if rule.counterpart_required and _is_blank(intent.contrepartie):
        return [Violation(field="contrepartie", code=ViolationCode.CONTREPARTIE_REQUISE,
                          message="Le client ou la contrepartie est obligatoire pour une sortie")]
    return []


def _check_physical_count(intent: StockMovementCreate, rule: MovementRule) -> List[Violation]:
    if rule.is_count and intent.quantite_physique is not None and intent.quantite_physique < 0:
        return [Violation(field="quantite_physique", code=ViolationCode.QUANTITE_PHYSIQUE_NEGATIVE,
                          message="La quantité inventoriée ne peut pas être négative")]
    return []


def _check_user(intent: StockMovementCreate, rule: MovementRule) -> List[Violation]:
    if _is_blank(intent.utilisateur):
        return [Violation(field="utilisateur", code=ViolationCode.UTILISATEUR_REQUIS,
                          message="L'utilisateur est obligatoire")]
    return []


def _check_direction(intent: StockMovementCreate, rule: MovementRule) -> List[Violation]:
    if intent.sens is not None and intent.sens != rule.direction and not rule.direction_overridable:
        return [Violation(field="sens", code=ViolationCode.SENS_NON_MODIFIABLE,
                          message=f"Le sens d'un mouvement {intent.type_mouvement.value} ne peut pas être modifié")]
    return []


CHECKS: List[Callable[[StockMovementCreate, MovementRule], List[Violation]]] = [
    _check_quantity,
    _check_price_and_supplier,
    _check_counterpart,
    _check_physical_count,
    _check_user,
    _check_direction,
]


def validate_movement(intent: StockMovementCreate) -> ValidationResult:
    """Valide une intention de mouvement.

    Returns:
        ValidationResult: vide si le mouvement est valide, sinon les
        violations (champ + code) de la première règle en échec.
    """
    rule = get_movement_rule(intent.type_mouvement)
    for check in CHECKS:
        violations = check(intent, rule)
        if violations:
            return ValidationResult(violations=violations)
    return ValidationResult()


def validate_count(quantite_physique: Optional[int], utilisateur: Optional[str]) -> ValidationResult:
    """Valide une demande d'inventaire physique (comptage >= 0, utilisateur)."""
    if quantite_physique is None or quantite_physique < 0:
        return ValidationResult(violations=[
            Violation(field="quantite_physique", code=ViolationCode.QUANTITE_PHYSIQUE_NEGATIVE,
                      message="La quantité inventoriée ne peut pas être négative")
        ])
    if _is_blank(utilisateur):
        return ValidationResult(violations=[
            Violation(field="utilisateur", code=ViolationCode.UTILISATEUR_REQUIS,
                      message="L'utilisateur est obligatoire")
        ])
    return ValidationResult()
