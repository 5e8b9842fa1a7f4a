from typing import Optional
from datetime import datetime
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from pydantic import ConfigDict, EmailStr

from gestion_stock.core.utils import utcnow

# --- Modèle Fournisseur ---

# 1. Modèle de base (données communes)
class FournisseurBase(SQLModel):
    code: str = Field(max_length=50, unique=True, index=True)
    nom: str = Field(min_length=1, max_length=200, index=True)
    raison_sociale: Optional[str] = Field(default=None, max_length=250)
    adresse: Optional[str] = Field(default=None)
    ville: Optional[str] = Field(default=None, max_length=100)
    code_postal: Optional[str] = Field(default=None, max_length=20)
    pays: Optional[str] = Field(default=None, max_length=100)
    telephone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = Field(default=None, max_length=150)
    contact_principal: Optional[str] = Field(default=None, max_length=150)
    conditions_paiement: Optional[str] = Field(default=None, max_length=100) # 30 jours, comptant, etc.
    delai_livraison: Optional[int] = Field(default=None, ge=0, le=365) # en jours
    actif: bool = Field(default=True)
    notes: Optional[str] = Field(default=None)

# 2. Modèle de table (hérite de Base)
class Fournisseur(FournisseurBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    date_creation: datetime = Field(default_factory=utcnow, nullable=False, sa_type=DateTime(timezone=True))
    date_modification: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    __tablename__ = "fournisseurs"
    model_config = ConfigDict(from_attributes=True)

# 3. Schémas API pour Fournisseur
class FournisseurCreate(FournisseurBase):
    pass

class FournisseurRead(FournisseurBase):
    id: int
    date_creation: datetime
    date_modification: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class FournisseurUpdate(SQLModel):
    # Le code identifie le fournisseur et n'est pas modifiable
    nom: Optional[str] = Field(default=None, min_length=1, max_length=200)
    raison_sociale: Optional[str] = Field(default=None, max_length=250)
    adresse: Optional[str] = None
    ville: Optional[str] = Field(default=None, max_length=100)
    code_postal: Optional[str] = Field(default=None, max_length=20)
    pays: Optional[str] = Field(default=None, max_length=100)
    telephone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = Field(default=None, max_length=150)
    contact_principal: Optional[str] = Field(default=None, max_length=150)
    conditions_paiement: Optional[str] = Field(default=None, max_length=100)
    delai_livraison: Optional[int] = Field(default=None, ge=0, le=365)
    notes: Optional[str] = None

# L'activation passe par les opérations dédiées (désactivation / réactivation)
