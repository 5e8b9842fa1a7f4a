from typing import Optional
from decimal import Decimal
from datetime import datetime
from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import SQLModel, Field
from pydantic import ConfigDict

from gestion_stock.core.utils import utcnow
from .constants import TypeMouvement, Direction

# --- Modèle StockMovement SQLModel ---

class StockMovementBase(SQLModel):
    type_mouvement: TypeMouvement
    quantite: int
    prix_unitaire: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)
    # Nom du fournisseur pour les types entrants, client ou destinataire pour les sortants
    contrepartie: Optional[str] = Field(default=None, max_length=200)
    motif: Optional[str] = Field(default=None, max_length=200)
    numero_bon: Optional[str] = Field(default=None, max_length=50, index=True)
    numero_facture: Optional[str] = Field(default=None, max_length=50)
    observations: Optional[str] = Field(default=None)
    utilisateur: str = Field(max_length=100)

class StockMovement(StockMovementBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    article_id: int = Field(foreign_key="articles.id", index=True)
    fournisseur_id: Optional[int] = Field(default=None, foreign_key="fournisseurs.id", index=True)
    # Sens appliqué: distingue une CORRECTION sortante d'une CORRECTION entrante
    sens: Direction
    valeur_totale: Optional[Decimal] = Field(default=None, max_digits=14, decimal_places=2)
    stock_avant: int
    stock_apres: int
    # Version du stock produite par ce mouvement: ordre de validation par article
    sequence: int
    date_mouvement: datetime = Field(default_factory=utcnow, nullable=False, index=True, sa_type=DateTime(timezone=True))

    __tablename__ = "stock_movements"
    __table_args__ = (
        UniqueConstraint("article_id", "sequence", name="uq_stock_movements_article_sequence"),
    )

# Schémas API pour StockMovement

class StockMovementCreate(SQLModel):
    """Intention de mouvement soumise au registre.

    Les contraintes métier (quantité positive, prix, contrepartie, utilisateur)
    sont vérifiées par le validateur de mouvements, pas par le schéma.
    """
    type_mouvement: TypeMouvement
    quantite: int
    prix_unitaire: Optional[Decimal] = None
    # Fournisseur référencé, obligatoire pour une ENTREE
    fournisseur_id: Optional[int] = None
    contrepartie: Optional[str] = Field(default=None, max_length=200)
    utilisateur: Optional[str] = Field(default=None, max_length=100)
    motif: Optional[str] = Field(default=None, max_length=200)
    numero_bon: Optional[str] = Field(default=None, max_length=50)
    numero_facture: Optional[str] = Field(default=None, max_length=50)
    observations: Optional[str] = None
    # Comptage physique associé (INVENTAIRE / CORRECTION)
    quantite_physique: Optional[int] = None
    # Sens imposé, accepté uniquement pour les types à sens modifiable (CORRECTION)
    sens: Optional[Direction] = None

class StockMovementRead(StockMovementBase):
    id: int
    article_id: int
    fournisseur_id: Optional[int] = None
    sens: Direction
    valeur_totale: Optional[Decimal] = None
    stock_avant: int
    stock_apres: int
    sequence: int
    date_mouvement: datetime
    model_config = ConfigDict(from_attributes=True)

# Pas de StockMovementUpdate: les mouvements sont immuables

# --- Fin Modèle StockMovement SQLModel ---
