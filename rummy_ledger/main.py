"""
FastAPI main application
Rummy Ledger - round ledger and scoring engine for elimination Rummy

Routers in rummy_ledger/api/:
- health.py: Health check and persistence status
- game.py: Game commands (start, rounds, roster changes, pause/resume, end)
- scoreboard.py: Standings and round history
- configs.py: Rule presets
- players.py: Saved players

All routers access shared state via rummy_ledger.state.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from rummy_ledger import state
from rummy_ledger.config import load_settings
from rummy_ledger.services import game_service
from rummy_ledger.services.config_catalogue import ConfigCatalogue
from rummy_ledger.services.storage import JsonFileStore

from rummy_ledger.api import health, game, scoreboard, configs, players


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup: settings, presets, then whatever was persisted last time
    try:
        state.SETTINGS = load_settings()
    except Exception as e:
        logger.error(f"❌ Failed to load settings: {e}")
        raise

    state.CATALOGUE = ConfigCatalogue(state.SETTINGS.presets, state.SETTINGS.default_config_id)
    state.STORE = JsonFileStore(state.SETTINGS.storage_dir)
    game_service.restore()
    logger.info(f"✅ Server started | game {state.GAME.status.value} | {len(state.CATALOGUE.list())} presets")

    yield

    # Shutdown: last save
    game_service.persist()
    logger.info("🛑 Server shutting down")


# Create FastAPI app
app = FastAPI(
    title="Rummy Ledger",
    description="Round ledger, elimination tracking and score recomputation for Rummy games",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware (allow all origins for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== INCLUDE ROUTERS ====================

app.include_router(health.router)
app.include_router(game.router)
app.include_router(scoreboard.router)
app.include_router(configs.router)
app.include_router(players.router)


# ==================== RUN SERVER ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
