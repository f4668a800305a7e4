"""
Simulation Engine Service
Entry point for the FastAPI application
"""

import uvicorn
from simengine.api import app
from simengine.utils.logging_config import get_logger
from simengine.config import get_settings

# Get configuration (logging is set up when simengine.api is imported)
settings = get_settings()

logger = get_logger(__name__)

if __name__ == "__main__":
    logger.info("Starting Simulation Engine Service")
    logger.info(
        f"Environment: {settings.env}, "
        f"Log level: {settings.log_level}, "
        f"Format: {'JSON' if settings.log_format_json else 'Human-readable'}"
    )
    uvicorn.run(app, host=settings.host, port=settings.port)
