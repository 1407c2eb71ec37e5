from .config import LayoutSettings, load_settings
from .logger import configure_logging, get_logger
from .results import OperationResult

__all__ = ['LayoutSettings', 'load_settings', 'configure_logging', 'get_logger', 'OperationResult']
