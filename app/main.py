import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.engine.errores import (
    NotFoundError,
    StructuralGuardError,
    TransientIOError,
    WorkflowValidationError,
)
from app.schemas.common import HealthResponse

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _seed_default_templates() -> None:
    """Create the bundled template of every service category that has none."""
    try:
        from app.database import SessionLocal
        from app.services.plantilla_store import SqlTemplateStore

        db = SessionLocal()
        try:
            creadas = SqlTemplateStore(db).seed_defaults()
            db.commit()
            logger.info("Plantillas por defecto: %d creadas", creadas)
        finally:
            db.close()
    except Exception as exc:
        logger.warning("Could not seed default templates on startup: %s", exc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.SEED_DEFAULT_TEMPLATES:
        _seed_default_templates()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Domain error → HTTP mapping
# ---------------------------------------------------------------------------


@app.exception_handler(WorkflowValidationError)
def _validation_error_handler(request: Request, exc: WorkflowValidationError) -> JSONResponse:
    logger.info("%s %s: validación rechazada (%d errores)", request.method, request.url.path, len(exc.errores))
    return JSONResponse(
        status_code=422,
        content={
            "detail": str(exc),
            "errores": [
                {"mensaje": e.mensaje, "fase_id": e.fase_id, "campo": e.campo}
                for e in exc.errores
            ],
        },
    )


@app.exception_handler(StructuralGuardError)
def _guard_error_handler(request: Request, exc: StructuralGuardError) -> JSONResponse:
    logger.warning("%s %s: %s (fase=%s)", request.method, request.url.path, exc.motivo, exc.fase_id)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": exc.motivo, "fase_id": exc.fase_id},
    )


@app.exception_handler(NotFoundError)
def _not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(TransientIOError)
def _transient_io_handler(request: Request, exc: TransientIOError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)},
        headers={"Retry-After": "5"},
    )


@app.get("/api/health", response_model=HealthResponse)
def health_check():
    return {"status": "ok", "app": settings.APP_NAME}


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

# Workflow configuration (templates + order exceptions)
from app.routers import workflows  # noqa: E402

app.include_router(
    workflows.router,
    prefix="/api/workflows",
    tags=["Workflows"],
)

# Phase execution
from app.routers import ordenes  # noqa: E402

app.include_router(
    ordenes.router,
    prefix="/api/ordenes",
    tags=["Ejecución de fases"],
)
