# Utility modules for TrackerWatch
from .logging import get_logger, app_logger
