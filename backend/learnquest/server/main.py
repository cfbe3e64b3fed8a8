"""LearnQuest sandbox backend - FastAPI application."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from learnquest import __version__
from learnquest.config import settings
from learnquest.server.db import async_session, init_db
from learnquest.server.routers import decks_router, learning_sessions_router
from learnquest.server.services.content import ContentService

logger = logging.getLogger(__name__)


async def seed_content():
    """Seed the database with sample decks if it is empty."""
    if os.getenv("SKIP_SEEDING", "").lower() == "true":
        logger.info("SKIP_SEEDING is set. Skipping database seed.")
        return

    async with async_session() as session:
        service = ContentService(session)
        count = await service.deck_count()
        if count > 0:
            logger.info(f"Database already has {count} decks. Skipping seed.")
            return

        logger.info("Seeding database with sample content...")
        imported = await service.load_from_json()
        await session.commit()
        logger.info(f"Imported {imported} questions.")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Initializing database...")
    await init_db()
    await seed_content()
    logger.info("Startup complete.")
    yield
    logger.info("Shutting down...")


def create_app() -> FastAPI:
    app = FastAPI(
        title=f"{settings.app_name} Sandbox",
        description="Local learning sessions backend for the LearnQuest session engine",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(learning_sessions_router)
    app.include_router(decks_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8000)
