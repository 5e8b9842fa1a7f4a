from sqlalchemy.orm import sessionmaker

from gestion_stock.stock.interfaces.repositories import AbstractUnitOfWork
from gestion_stock.stock.repositories import SQLAlchemyStockRepository
from gestion_stock.stock_movements.repositories import SQLAlchemyStockMovementRepository


class SQLAlchemyUnitOfWork(AbstractUnitOfWork):
    """Ouvre une session par unité de travail; stock et journal partagent la transaction."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        self.session = self.session_factory()
        self.stocks = SQLAlchemyStockRepository(self.session)
        self.movements = SQLAlchemyStockMovementRepository(self.session)
        return await super().__aenter__()

    async def __aexit__(self, exc_type, exc, tb):
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            await self.session.close()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
