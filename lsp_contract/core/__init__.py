from .logging import get_logger, set_debug
