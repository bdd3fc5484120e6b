"""
Logging Configuration
"""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the service"""
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)

    # Uvicorn access lines duplicate the request logging middleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
