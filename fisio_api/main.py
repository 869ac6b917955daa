import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fisio_api.config import AUTH_REQUIRED, CORS_ORIGINS, LOG_LEVEL
from fisio_api.database import close_db, get_db, init_db
from fisio_api.errors import register_exception_handlers
from fisio_api.routers import diagnosticos, historial, pacientes

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Fisio API (auth %s)", "required" if AUTH_REQUIRED else "disabled")
    try:
        await init_db()
        logger.info("Database initialized")
    except Exception:
        # Keep serving; get_db() retries on the next request
        logger.error("Could not connect to the database", exc_info=True)
    yield
    await close_db()
    logger.info("Fisio API shut down")


app = FastAPI(
    title="Fisio API",
    description="Patients and medical history for a physiotherapy practice",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(pacientes.router)
app.include_router(historial.router)
app.include_router(diagnosticos.router)


@app.get("/health")
async def health_check():
    """Liveness probe; reports whether the database answers."""
    try:
        db = await get_db()
        await db.execute("SELECT 1")
    except Exception as e:
        logger.warning("Health check could not reach the database: %s", e)
        return {"status": "healthy", "database": "unavailable"}
    return {"status": "healthy", "database": "connected"}
