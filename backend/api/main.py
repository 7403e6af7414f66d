import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import load_settings

settings = load_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(levelname)s:%(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

from .routes import router
from matching.profiles import get_profile
from store.database import Database
from store.equipment import EquipmentRepository
from store.quotes import QuoteStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup ---
    app.state.settings = settings
    app.state.matching_profile = get_profile(settings.matching_profile)
    logger.info("Matching profile: %s", app.state.matching_profile.name)

    try:
        db = await Database.connect(settings.db_path)
        app.state.equipment_repo = EquipmentRepository(db)
        app.state.quote_store = QuoteStore(db)
        app.state.db = db
        logger.info("Database connected: %s", settings.db_path)
    except FileNotFoundError as e:
        logger.warning("%s -- running without a database", e)
        app.state.equipment_repo = None
        app.state.quote_store = None
        app.state.db = None

    yield

    # --- Shutdown ---
    if getattr(app.state, "db", None):
        await app.state.db.close()


app = FastAPI(
    title="Quote Intake",
    description="Manufacturing quote intake with equipment capability matching",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")
