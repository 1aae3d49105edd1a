"""
Student Registry API Server
Student records over REST, backed by a single PostgreSQL table
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from config.settings import ALLOWED_ORIGINS
from database.connection import init_database, close_database
from api.routes import health, students
from services.credential_hasher import CredentialHasher, ScryptCredentialHasher
from services.students_service import StudentsService
from utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


def create_app(
    students_service: Optional[StudentsService] = None,
    credential_hasher: Optional[CredentialHasher] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    When no students_service is given, the lifespan opens the asyncpg pool
    and constructs one; tests inject their own and no pool is opened.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager"""
        db_pool = None
        if students_service is None:
            db_pool = await init_database()
            app.state.students_service = StudentsService(db_pool)
        yield
        if db_pool is not None:
            await close_database(db_pool)

    app = FastAPI(
        title="Student Registry Backend",
        description="REST API for registering and managing student records",
        version="1.0.0",
        lifespan=lifespan
    )

    if students_service is not None:
        app.state.students_service = students_service
    app.state.credential_hasher = credential_hasher or ScryptCredentialHasher()

    # CORS middleware - the UI may be hosted separately
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials="*" not in ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Setup centralized error handling
    setup_error_handling(app)

    # Include API routes
    app.include_router(health.router, tags=["Health"])
    app.include_router(students.router, prefix="/api/students", tags=["Students"])

    # Client UI
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @app.get("/", include_in_schema=False)
    async def index():
        return FileResponse(STATIC_DIR / "index.html")

    return app


# FastAPI app instance is exported for use by uvicorn
app = create_app()
