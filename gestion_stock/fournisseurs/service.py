import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from fastcrud import FastCRUD

from gestion_stock.core.schemas import PaginatedResponse
from gestion_stock.core.utils import utcnow
from .models import FournisseurCreate, FournisseurRead, FournisseurUpdate
from .exceptions import FournisseurNotFoundException, DuplicateFournisseurCodeException

logger = logging.getLogger(__name__)

class PaginatedFournisseurResponse(PaginatedResponse[FournisseurRead]): pass


class FournisseurService:
    """Service applicatif pour le référentiel fournisseurs."""

    def __init__(self, db: AsyncSession, fournisseur_crud: FastCRUD):
        self.db = db
        self.fournisseur_crud = fournisseur_crud
        logger.info("FournisseurService initialized.")

    async def create_fournisseur(self, fournisseur_data: FournisseurCreate) -> FournisseurRead:
        """Crée un fournisseur; le code doit être unique."""
        logger.info(f"[FournisseurService] Création du fournisseur {fournisseur_data.code} ({fournisseur_data.nom})")
        if await self.fournisseur_crud.exists(self.db, code=fournisseur_data.code):
            raise DuplicateFournisseurCodeException(fournisseur_data.code)

        try:
            created = await self.fournisseur_crud.create(
                self.db, fournisseur_data, schema_to_select=FournisseurRead, return_as_model=True
            )
        except IntegrityError:
            await self.db.rollback()
            logger.warning(f"[FournisseurService] Code {fournisseur_data.code} inséré en concurrence.")
            raise DuplicateFournisseurCodeException(fournisseur_data.code)

        logger.info(f"[FournisseurService] Fournisseur ID {created.id} créé.")
        return created

    async def get_fournisseur(self, fournisseur_id: int) -> FournisseurRead:
        """Récupère un fournisseur par son ID."""
        logger.debug(f"[FournisseurService] Get Fournisseur ID: {fournisseur_id}")
        fournisseur = await self.fournisseur_crud.get(
            self.db, schema_to_select=FournisseurRead, return_as_model=True, id=fournisseur_id
        )
        if not fournisseur:
            raise FournisseurNotFoundException(fournisseur_id)
        return fournisseur

    async def list_fournisseurs(
        self,
        limit: int = 100,
        offset: int = 0,
        actif: Optional[bool] = None,
        ville: Optional[str] = None,
        pays: Optional[str] = None,
    ) -> PaginatedFournisseurResponse:
        """Liste les fournisseurs, triés par nom."""
        filters = {}
        if actif is not None: filters["actif"] = actif
        if ville: filters["ville"] = ville
        if pays: filters["pays"] = pays

        logger.debug(f"[FournisseurService] List Fournisseurs: filters={filters}, limit={limit}, offset={offset}")
        result = await self.fournisseur_crud.get_multi(
            self.db,
            offset=offset,
            limit=limit,
            schema_to_select=FournisseurRead,
            return_as_model=True,
            sort_columns="nom",
            sort_orders="asc",
            **filters
        )
        return PaginatedFournisseurResponse(items=result["data"], total=result["total_count"])

    async def update_fournisseur(self, fournisseur_id: int, fournisseur_update: FournisseurUpdate) -> FournisseurRead:
        """Met à jour les champs fournis d'un fournisseur."""
        current = await self.get_fournisseur(fournisseur_id)
        update_data = fournisseur_update.model_dump(exclude_unset=True)
        if not update_data:
            return current
        return await self._update(fournisseur_id, update_data)

    async def set_actif(self, fournisseur_id: int, actif: bool) -> FournisseurRead:
        """Désactive (suppression logique) ou réactive un fournisseur.

        Les mouvements déjà journalisés gardent leur référence au fournisseur.
        """
        await self.get_fournisseur(fournisseur_id)
        return await self._update(fournisseur_id, {"actif": actif})

    async def _update(self, fournisseur_id: int, update_data: dict) -> FournisseurRead:
        update_data["date_modification"] = utcnow()
        logger.info(f"[FournisseurService] Mise à jour du fournisseur {fournisseur_id}: {list(update_data)}")
        await self.fournisseur_crud.update(self.db, update_data, id=fournisseur_id)
        return await self.get_fournisseur(fournisseur_id)
