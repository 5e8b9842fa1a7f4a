from typing import Optional, List
from decimal import Decimal
from datetime import datetime
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from pydantic import ConfigDict

from gestion_stock.core.schemas import PaginatedResponse
from gestion_stock.stock_movements.models import StockMovementCreate, StockMovementRead
from .constants import StatutStock

# --- Modèle Stock ---

# 1. Modèle de base (données communes)
class StockBase(SQLModel):
    quantite_actuelle: int = Field(default=0)
    quantite_reservee: int = Field(default=0)
    quantite_disponible: int = Field(default=0)
    sur_reservation: bool = Field(default=False)
    prix_moyen_pondere: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)
    valeur_stock: Decimal = Field(default=Decimal("0.00"), max_digits=14, decimal_places=2)
    statut_stock: StatutStock = Field(default=StatutStock.CRITIQUE)
    derniere_entree: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    derniere_sortie: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    date_dernier_inventaire: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    quantite_inventaire: Optional[int] = Field(default=None)
    ecart_inventaire: Optional[int] = Field(default=None)
    date_modification: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

# 2. Modèle de table (hérite de Base)
class Stock(StockBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    article_id: int = Field(foreign_key="articles.id", unique=True, index=True)
    # Incrémentée à chaque écriture; sert de garde pour l'écriture conditionnelle
    version: int = Field(default=1, nullable=False)

    __tablename__ = "stocks"
    model_config = ConfigDict(from_attributes=True)

# 3. Schémas API pour Stock
class StockRead(StockBase):
    """Instantané d'une fiche de stock."""
    id: Optional[int] = None
    article_id: int
    version: int = 0
    model_config = ConfigDict(from_attributes=True)

class PaginatedStockResponse(PaginatedResponse[StockRead]): pass

# Pas de StockCreate/StockUpdate: la fiche évolue uniquement via le registre


# --- Schémas de requête ---

class QuantityRequest(SQLModel):
    quantite: int

class InventoryRequest(SQLModel):
    quantite_physique: int
    utilisateur: Optional[str] = Field(default=None, max_length=100)
    observations: Optional[str] = None

class BatchMovementRequest(SQLModel):
    mouvements: List[StockMovementCreate]

# --- Schémas de réponse ---

class InventoryResult(SQLModel):
    stock: StockRead
    ecart: int
    mouvement: Optional[StockMovementRead] = None

class BatchMovementResult(SQLModel):
    """Résultat d'un mouvement d'un lot: instantané ou message d'erreur."""
    index: int
    succes: bool
    stock: Optional[StockRead] = None
    erreur: Optional[str] = None

class AvailabilityRead(SQLModel):
    article_id: int
    quantite_demandee: int
    disponible: bool
