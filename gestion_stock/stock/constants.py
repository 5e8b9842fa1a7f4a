"""
Constantes pour le module de gestion des stocks.
"""
from enum import Enum


class StatutStock(str, Enum):
    NORMAL = "NORMAL"
    FAIBLE = "FAIBLE"
    CRITIQUE = "CRITIQUE"
    EXCESSIF = "EXCESSIF"


# Le stock est critique sous cette fraction du stock minimum
RATIO_SEUIL_CRITIQUE = 0.5

# Précision monétaire (PMP, valeurs)
PRECISION_MONETAIRE = "0.01"

# Messages d'erreur
ERROR_INVALID_QUANTITY = "La quantité doit être strictement positive"
