from .logging import get_logger, is_debug, set_debug, setup_logging
