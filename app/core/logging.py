import logging
import sys
from app.core.config import settings


def setup_logging():
    """Configure root logging once for the API process."""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    # SQL echo is handled by the engine in dev mode; keep driver chatter down otherwise
    if not settings.is_dev:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
