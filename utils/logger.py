import logging
from settings.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False

def _configure_root():
    global _configured
    if _configured:
        return
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root = logging.getLogger("app")
    root.setLevel(level)
    root.addHandler(handler)
    root.propagate = False
    _configured = True

def get_logger(name: str) -> logging.Logger:
    """
    Named logger under the "app" hierarchy, configured once per process.
    """
    _configure_root()
    return logging.getLogger(f"app.{name}")
