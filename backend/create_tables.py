# create_tables.py - creates missing tables in DATABASE_URL (development helper)
import logging
import sys

from billtracker.core.config import settings
from billtracker.core.logging import configure_logging
from billtracker.db import models  # noqa: F401  registers the tables on Base
from billtracker.db.base import Base
from billtracker.db.session import make_engine

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

logger.info("Creating tables in the database (if not exist)...")
try:
    Base.metadata.create_all(bind=make_engine(settings.DATABASE_URL))
    logger.info("Done.")
except Exception:
    logger.exception("Error creating tables:")
    sys.exit(1)
