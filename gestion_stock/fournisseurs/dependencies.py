import logging
from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from fastcrud import FastCRUD

from gestion_stock.database import get_db_session
from gestion_stock.fournisseurs.models import Fournisseur
from gestion_stock.fournisseurs.service import FournisseurService

logger = logging.getLogger(__name__)

def get_fournisseur_crud() -> FastCRUD:
    """Fournit une instance de FastCRUD pour les fournisseurs."""
    logger.debug("Providing FastCRUD[Fournisseur]")
    return FastCRUD(Fournisseur)

FournisseurCRUDDep = Annotated[FastCRUD, Depends(get_fournisseur_crud)]

def get_fournisseur_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    fournisseur_crud: FournisseurCRUDDep
) -> FournisseurService:
    """Fournit une instance du service fournisseurs."""
    return FournisseurService(db=db, fournisseur_crud=fournisseur_crud)

FournisseurServiceDep = Annotated[FournisseurService, Depends(get_fournisseur_service)]
