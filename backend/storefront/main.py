"""
Storefront - Backend API
Product catalog and order placement
"""
import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

# Load environment variables before settings are read
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from storefront.api import orders, products
from storefront.core.config import Settings, settings as default_settings
from storefront.core.database import Database
from storefront.core.exceptions import InvalidInput, StorageFailure, describe_errors

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application

    The database handle is opened when the app starts serving and closed
    when it shuts down; routers reach it through app.state.
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
        database = Database(settings.DATABASE_URL, echo=settings.DATABASE_ECHO).open()
        database.create_schema()
        app.state.database = database
        try:
            yield
        finally:
            database.close()

    app = FastAPI(
        title=settings.API_TITLE,
        version=settings.API_VERSION,
        description=settings.API_DESCRIPTION,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed paths and bodies get the same error body as service rejections"""
        error = InvalidInput(describe_errors(exc.errors()))
        logger.info(f"Rejected {request.method} {request.url.path}: {error.message}")
        return JSONResponse(status_code=400, content={"detail": error.to_dict()})

    # Include API routers
    app.include_router(products.router, prefix="/api/v1/products", tags=["Products"])
    app.include_router(orders.router, prefix="/api/v1/orders", tags=["Orders"])

    # The directory is created on startup
    app.mount(
        "/uploads",
        StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
        name="uploads",
    )

    @app.get("/")
    def root():
        """Endpoint raíz - Verificación de estado de la API"""
        return {
            "message": settings.API_TITLE,
            "status": "online",
            "version": settings.API_VERSION,
        }

    @app.get("/health")
    def health():
        """Health check endpoint para monitoreo - tests database connectivity"""
        start_time = time.time()
        db_error = None

        try:
            app.state.database.ping()
            db_status = "connected"
        except StorageFailure as e:
            db_status = "disconnected"
            db_error = e.message

        return {
            "status": "healthy" if db_status == "connected" else "degraded",
            "version": settings.API_VERSION,
            "database": {
                "status": db_status,
                "error": db_error,
            },
            "total_latency_ms": round((time.time() - start_time) * 1000, 2),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=default_settings.API_HOST, port=default_settings.API_PORT)
