import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from app.core.config import settings


def setup_logging():
    """Configure logging for the application"""

    handlers = [
        # Console handler
        logging.StreamHandler(sys.stdout),
    ]

    if settings.LOG_DIR:
        # Create logs directory if it doesn't exist
        logs_dir = Path(settings.LOG_DIR)
        logs_dir.mkdir(exist_ok=True)
        handlers.append(
            # File handler with rotation
            RotatingFileHandler(
                logs_dir / "app.log",
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5
            )
        )

    # Configure root logger
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )

    # Set specific log levels for different modules
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.INFO)

    # Application loggers
    logging.getLogger("app.api").setLevel(logging.INFO)
    logging.getLogger("app.services").setLevel(logging.INFO)
    logging.getLogger("app.repositories").setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
