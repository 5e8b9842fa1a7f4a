from typing import Optional
from datetime import datetime
from decimal import Decimal
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from pydantic import ConfigDict

from gestion_stock.core.utils import utcnow

# --- Modèle Article ---

# 1. Modèle de base (données communes)
class ArticleBase(SQLModel):
    code: str = Field(max_length=50, unique=True, index=True)
    designation: str = Field(max_length=200)
    description: Optional[str] = Field(default=None)
    categorie: Optional[str] = Field(default=None, max_length=100)
    unite: str = Field(default="pcs", max_length=20)
    # Prix de référence, sert de PMP initial lors d'une initialisation explicite du stock
    prix_unitaire: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2, ge=0)
    stock_min: Optional[int] = Field(default=None, ge=0)
    stock_max: Optional[int] = Field(default=None, ge=0)
    actif: bool = Field(default=True)

# 2. Modèle de table (hérite de Base)
class Article(ArticleBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    date_creation: datetime = Field(default_factory=utcnow, nullable=False, sa_type=DateTime(timezone=True))
    date_modification: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    __tablename__ = "articles"
    model_config = ConfigDict(from_attributes=True)

# 3. Schémas API pour Article
class ArticleCreate(ArticleBase):
    pass

class ArticleRead(ArticleBase):
    id: int
    date_creation: datetime
    date_modification: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class ArticleUpdate(SQLModel):
    # Le code reste l'identité de l'article et n'est pas modifiable
    designation: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    categorie: Optional[str] = Field(default=None, max_length=100)
    unite: Optional[str] = Field(default=None, max_length=20)
    prix_unitaire: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2, ge=0)
    stock_min: Optional[int] = Field(default=None, ge=0)
    stock_max: Optional[int] = Field(default=None, ge=0)
    actif: Optional[bool] = None

# Seuils lus par le registre de stock pour classer le statut
class ArticleSeuils(SQLModel):
    id: int
    stock_min: Optional[int] = None
    stock_max: Optional[int] = None
    prix_unitaire: Optional[Decimal] = None
    model_config = ConfigDict(from_attributes=True)
