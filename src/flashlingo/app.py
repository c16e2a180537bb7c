import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .config import Settings, settings as default_settings
from .context import AppContext
from .database import init_db
from .errors import LoadError
from .log_handler import SQLiteHandler
from .router import router

logger = logging.getLogger("flashlingo")


# --- Logging Setup ---
def setup_logging(settings: Settings):
    logger.setLevel(logging.INFO)
    if logger.handlers:
        return

    if not os.path.exists(settings.LOG_DIR):
        os.makedirs(settings.LOG_DIR, exist_ok=True)
    log_path = os.path.join(settings.LOG_DIR, settings.LOG_FILE)
    file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(file_handler)

    if settings.LOG_TO_DB:
        init_db(settings.db_path)
        db_handler = SQLiteHandler(settings.db_path)
        db_handler.setLevel(logging.WARNING)
        logger.addHandler(db_handler)

    # Also configure root logger to see logs from other libraries
    logging.basicConfig(level=logging.INFO)


# --- App Factory ---
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(settings.db_path)
        context = AppContext(settings)
        context.restore()
        try:
            context.vocabulary.load()
        except LoadError as e:
            logger.error(f"Failed to load vocabulary: {e}")
        app.state.context = context
        yield

    app = FastAPI(
        title=settings.PROJECT_NAME,
        debug=settings.DEBUG,
        lifespan=lifespan,
        root_path=settings.ROOT_PATH,
    )

    app.include_router(router)

    if os.path.isdir(settings.STATIC_DIR):
        app.mount("/static", StaticFiles(directory=settings.STATIC_DIR), name="static")

    return app
