# stockwatch/main.py

import logging
import os
import subprocess
from contextlib import asynccontextmanager

from fastapi import FastAPI

from stockwatch import __version__
from stockwatch.core.logging_config import configure_logging
from stockwatch.routes import admin, health, webhooks

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()

    # Run migrations on startup
    if os.getenv('RUN_MIGRATIONS', 'false').lower() == 'true':
        logger.info("Running database migrations...")
        result = subprocess.run(['alembic', 'upgrade', 'head'], capture_output=True, text=True)
        if result.returncode == 0:
            logger.info("Migrations completed successfully")
        else:
            logger.error(f"Migration failed: {result.stderr}")

    yield


app = FastAPI(
    title="Stockwatch",
    version=__version__,
    lifespan=lifespan
)

app.include_router(health.router)
app.include_router(webhooks.router)
app.include_router(admin.router)
