import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, status

from stockroom.api.v1.export import router as export_router
from stockroom.api.v1.items import router as items_router
from stockroom.api.v1.options import router as options_router
from stockroom.api.v1.sales import router as sales_router
from stockroom.core.config import DB_URL, EXPORT_DIR, PROJECT_NAME, VERSION
from stockroom.core.db import Database
from stockroom.core.exception_handlers import setup_exception_handlers

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("uvicorn")


def create_app(database: Optional[Database] = None, export_dir: Optional[str] = None) -> FastAPI:
    """Composition root: one storage handle per app, shared by every route."""
    db = database or Database(DB_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Handles startup and shutdown events."""
        log.info(f"Starting {PROJECT_NAME} v{VERSION}...")
        await db.open()  # Open the store and bring the schema up to date
        yield
        await db.close()
        log.info(f"{PROJECT_NAME} stopped.")

    app = FastAPI(
        title=PROJECT_NAME,
        version=VERSION,
        lifespan=lifespan,
        # Configure API documentation and paths
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.db = db
    app.state.export_dir = export_dir or EXPORT_DIR

    # Include routers for modular API structure
    app.include_router(items_router, prefix="/api/v1/items", tags=["Inventory Items"])
    app.include_router(options_router, prefix="/api/v1/options", tags=["Options"])
    app.include_router(sales_router, prefix="/api/v1/sales", tags=["Sales Ledger"])
    app.include_router(export_router, prefix="/api/v1/export", tags=["Export"])

    setup_exception_handlers(app)

    @app.get("/health", status_code=status.HTTP_200_OK)
    async def health_check():
        """Simple health check endpoint."""
        return {"status": "ok", "app_name": PROJECT_NAME, "database": "open" if db.is_open else "closed"}

    return app


app = create_app()
