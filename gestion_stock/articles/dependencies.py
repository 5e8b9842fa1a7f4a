import logging
from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from fastcrud import FastCRUD

from gestion_stock.database import get_db_session
from gestion_stock.articles.models import Article
from gestion_stock.articles.service import ArticleService
from gestion_stock.stock.dependencies import StockServiceDep

logger = logging.getLogger(__name__)

def get_article_crud() -> FastCRUD:
    """Fournit une instance de FastCRUD pour les articles."""
    logger.debug("Providing FastCRUD[Article]")
    return FastCRUD(Article)

ArticleCRUDDep = Annotated[FastCRUD, Depends(get_article_crud)]

def get_article_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    article_crud: ArticleCRUDDep,
    stock_service: StockServiceDep
) -> ArticleService:
    """Fournit une instance du service articles, reliée au registre de stock."""
    return ArticleService(db=db, article_crud=article_crud, stock_service=stock_service)

ArticleServiceDep = Annotated[ArticleService, Depends(get_article_service)]
