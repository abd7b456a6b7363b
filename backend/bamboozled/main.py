import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bamboozled.api.game import router as game_router
from bamboozled.api.health import router as health_router
from bamboozled.api.stats import router as stats_router
from bamboozled.api.users import router as users_router
from bamboozled.config import get_settings
from bamboozled.database.init import initialize_database
from bamboozled.database.providers.factory import close_database_provider
from bamboozled.monitoring.logging_config import setup_logging
from bamboozled.monitoring.middleware import RequestLoggingMiddleware
from bamboozled.websocket.chat_handler import router as chat_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect and migrate the database on startup, disconnect on shutdown"""
    result = await initialize_database()
    logger.info(f"Database ready ({result['provider']}, {result['action']})")
    yield
    await close_database_provider()


def create_app() -> FastAPI:
    load_dotenv()
    settings = get_settings()
    setup_logging(
        settings.log_level,
        enable_json=settings.log_format == "json"
    )

    app = FastAPI(
        title="Bamboozled API",
        description="""
    Weekly picture-puzzle game with a moody chat bot.

    ## Features

    * **Weekly Puzzles**: One active puzzle at a time, rotated weekly
    * **Guesses**: Submit answers; correct solves earn hint coins and achievements
    * **Hints**: Spend coins on three levels of hints
    * **Leaderboards**: Weekly and all-time rankings
    * **Chat**: WebSocket chat at `/ws` with slash commands
    """,
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "game", "description": "Puzzle retrieval, guesses and hints"},
            {"name": "users", "description": "User management"},
            {"name": "stats", "description": "Statistics, leaderboards, mood and achievements"},
            {"name": "health", "description": "Health check endpoint"},
        ]
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin", "X-Correlation-ID"],
        max_age=600,
    )

    app.include_router(users_router)
    app.include_router(game_router)
    app.include_router(stats_router)
    app.include_router(health_router)
    app.include_router(chat_router)

    @app.get("/")
    async def root():
        return {"message": "Bamboozled API is running"}

    return app


app = create_app()
