"""
Module principal de l'application FastAPI de gestion de stock.

Ce module configure et initialise l'instance FastAPI, ajoute le middleware
CORS et inclut les routeurs des articles, des fournisseurs, du registre de
stock et du journal des mouvements.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gestion_stock.config import settings
from gestion_stock.database import create_tables

# --- Importer les routeurs ---
from gestion_stock.articles.router import router as article_router
from gestion_stock.fournisseurs.router import router as fournisseur_router
from gestion_stock.stock.router import router as stock_router
from gestion_stock.stock_movements.router import router as stock_movement_router

# Configurer le logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Démarrage: création des tables si nécessaire.")
    await create_tables()
    yield


app = FastAPI(
    title="Gestion de Stock API",
    description="API de gestion des articles, du registre de stock et des mouvements.",
    version="1.0.0",
    lifespan=lifespan
)

# Configurer CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ======================================================
# Inclure les routeurs
# ======================================================
app.include_router(article_router, prefix=f"{settings.API_V1_PREFIX}/articles", tags=["Articles"])
app.include_router(fournisseur_router, prefix=f"{settings.API_V1_PREFIX}/fournisseurs", tags=["Fournisseurs"])
app.include_router(stock_router, prefix=f"{settings.API_V1_PREFIX}/stock", tags=["Stock"])
app.include_router(stock_movement_router, prefix=f"{settings.API_V1_PREFIX}/stock-movements", tags=["Stock Movements"])


@app.get("/")
async def root():
    return {"message": "API Gestion de Stock"}
