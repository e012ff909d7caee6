# billtracker/core/logging.py
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Root logging setup shared by the API process and the scheduler."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
