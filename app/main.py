"""FastAPI application — main entry point."""

import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.config import get_settings
from app.infrastructure.database import engine, Base
from app.core.logging import configure_logging
from app.core.middleware import setup_middleware
from app.core.exceptions import AppError, global_exception_handler

# Import all models so SQLAlchemy knows about them
from app.domain.models.ticket import Ticket
from app.domain.models.import_log import ImportLog

# Import routers
from app.interfaces.api.tickets import router as tickets_router
from app.interfaces.api.imports import router as imports_router
from app.interfaces.api.reports import router as reports_router

settings = get_settings()

configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown events."""
    logger.info("Starting Logística Manager...", env=settings.ENVIRONMENT)

    # No migrations yet: tables are created on startup
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    yield

    logger.info("Logística Manager stopped")


app = FastAPI(
    title="Logística Manager — Gestão de Tickets de Entrega",
    description="API Backend — importação inteligente de CSV, filtros e status internos",
    version="1.0.0",
    lifespan=lifespan,
)

setup_middleware(app)

# Domain and database errors are answered as JSON; anything else still gets logged
app.add_exception_handler(AppError, global_exception_handler)
app.add_exception_handler(SQLAlchemyError, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(tickets_router)
app.include_router(imports_router)
app.include_router(reports_router)


@app.get("/")
def root():
    return {
        "name": "Logística Manager",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}
