"""Main FastAPI application entry point."""

import logging

from app.api.dependencies import get_config
from app.application import create_app
from app.utils.logger import setup_logger

# Load configuration
config = get_config()

# Setup logging
setup_logger(config)
logger = logging.getLogger("wellness")

# Fails here, at startup, when JWT_SECRET is not set
app = create_app(config)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="localhost", port=8000, reload=config.app.debug)
