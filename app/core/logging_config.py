import logging

from app.core.config import get_settings

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = None) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    level_name = (level or get_settings().LOG_LEVEL or "INFO").upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=_FORMAT)
    else:
        root.setLevel(getattr(logging, level_name, logging.INFO))
