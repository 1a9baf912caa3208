import logging

from quiz_backend.config import Settings
from quiz_backend.presentation.app_factory import create_app
from quiz_backend.utils.logging_config import configure_logging

settings = Settings.from_env()

# Configure logging
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Server running on port {settings.port}")
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port, reload=True)
