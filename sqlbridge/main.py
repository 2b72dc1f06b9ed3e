import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from sqlbridge.core.config import settings
from sqlbridge.core.database import engine, Base
from sqlbridge.core import models  # noqa: F401  registers tables on Base
from sqlbridge.api.router import api_router

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


# Close the engine once everything is done and close all the sessions
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Make sure the sample users table exists before the first request
    if settings.CREATE_TABLES_ON_STARTUP:
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Connected to PostgreSQL, tables are ready")
        except Exception as e:
            logger.error(f"Failed to connect to database: {e}")
            raise

    yield
    await engine.dispose()


app = FastAPI(title="SQL Bridge - Natural Language to SQL", lifespan=lifespan)

# Include the master router containing all our endpoints
app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "SQL Bridge server is running"}
