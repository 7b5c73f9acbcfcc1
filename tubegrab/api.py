"""
Aplicación FastAPI principal.
Define la app y configura los routers, los manejadores de error y los lifecycle hooks.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .core.config import settings
from .core.constants import ERROR_VALIDATION
from .core.exceptions import TubeGrabException
from .core.log_config import setup_logging
from .routes.health import router as health_router
from .routes.youtube import router as youtube_router

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestión del ciclo de vida de la aplicación.
    Startup: Inicia el scheduler de limpieza de temporales
    Shutdown: Detiene el scheduler y termina las descargas en curso
    """
    logger.info("Starting application...")

    from .managers.cleanup_scheduler import cleanup_scheduler
    try:
        cleanup_scheduler.start()
    except Exception as e:
        logger.error(f"Failed to start cleanup scheduler: {str(e)}")

    yield

    logger.info("Shutting down application...")
    cleanup_scheduler.stop()

    from .managers import job_manager
    job_manager.terminate_all()
    logger.info("All jobs terminated")


app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan
)


@app.exception_handler(TubeGrabException)
async def tubegrab_exception_handler(request: Request, exc: TubeGrabException):
    """Presenta los errores de dominio como {error, details?}."""
    content = {"error": exc.message}
    if exc.details and (settings.DEBUG or exc.expose_details):
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Errores de validación del cuerpo o la query como 422 {error, details}."""
    return JSONResponse(
        status_code=422,
        content={"error": ERROR_VALIDATION, "details": jsonable_encoder(exc.errors())},
    )


# Incluir routers principales
app.include_router(health_router)
app.include_router(youtube_router)
