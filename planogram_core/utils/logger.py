import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

LOGGER_NAME = 'planogram_core'


class PlanogramLogger:
    """Centralized logging system for the planogram layout core"""

    def __init__(self, log_dir: Optional[str] = None, console_level: str = "INFO", file_level: str = "DEBUG"):
        # Create logger
        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(logging.DEBUG)

        # Remove existing handlers
        for handler in self.logger.handlers:
            handler.close()
        self.logger.handlers = []

        # Console handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, console_level))
        console_format = logging.Formatter(
            '%(asctime)s | %(levelname)-8s | %(message)s',
            datefmt='%H:%M:%S'
        )
        console_handler.setFormatter(console_format)
        self.logger.addHandler(console_handler)

        # File handler, only when a log directory is configured
        self.log_file = None
        if log_dir:
            log_path = Path(log_dir)
            log_path.mkdir(parents=True, exist_ok=True)
            self.log_file = log_path / f"planogram_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(self.log_file)
            file_handler.setLevel(getattr(logging, file_level))
            file_format = logging.Formatter(
                '%(asctime)s | %(levelname)-8s | %(module)-15s | %(funcName)-20s | %(message)s'
            )
            file_handler.setFormatter(file_format)
            self.logger.addHandler(file_handler)
            self.logger.info(f"Logging initialized. Log file: {self.log_file}")

    def get_logger(self):
        return self.logger


# Global logger instance
_logger_instance = None


def configure_logging(log_dir: Optional[str] = None, console_level: str = "INFO", file_level: str = "DEBUG"):
    """(Re)build the shared logger with the given handlers"""
    global _logger_instance
    _logger_instance = PlanogramLogger(log_dir, console_level, file_level)
    return _logger_instance.get_logger()


def get_logger():
    """Get or create logger instance"""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = PlanogramLogger()
    return _logger_instance.get_logger()
