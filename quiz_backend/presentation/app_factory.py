import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from quiz_backend.config import Settings
from quiz_backend.infrastructure.db.session import create_db_engine, create_session_factory, init_db
from quiz_backend.presentation.api.routers.answers_router import router as answers_router
from quiz_backend.presentation.api.routers.questions_router import router as questions_router
from quiz_backend.presentation.api.routers.test_router import router as test_router

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    engine = engine or create_db_engine(settings)

    # Create tables
    init_db(engine)

    app = FastAPI(title="Quiz API")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.frontend_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global Exception Handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Global unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "An internal server error occurred."}
        )

    # Include routers
    app.include_router(questions_router, prefix=API_PREFIX)
    app.include_router(answers_router, prefix=API_PREFIX)
    app.include_router(test_router, prefix=API_PREFIX)

    @app.get(f"{API_PREFIX}/health", tags=["Health"])
    def health():
        return {"status": "ok"}

    logger.info(
        f"Quiz API ready (CORS allowed: {','.join(settings.frontend_origins)}, "
        f"test endpoint {'enabled' if settings.enable_test_endpoint else 'disabled'})"
    )
    return app
