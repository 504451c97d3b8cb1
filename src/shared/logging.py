import logging
import sys
from typing import Dict, Optional

from src.const import LOG_FORMAT, LOG_DATE_FORMAT, LIBRARY_LOG_LEVELS


class LoggingManager:
    """Manager for logging setup and logger retrieval."""

    @classmethod
    def setup_logging(cls, level: str = "INFO", library_log_levels: Optional[Dict[str, str]] = None) -> None:
        """Setup structured logging for the harness.

        Args:
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            library_log_levels: Per-library level overrides; defaults to LIBRARY_LOG_LEVELS
        """
        # Convert string level to logging level
        numeric_level = getattr(logging, level.upper(), logging.INFO)

        # Create formatter
        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

        # Setup console handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(numeric_level)

        # Configure root logger
        root_logger = logging.getLogger()
        root_logger.setLevel(numeric_level)
        root_logger.addHandler(console_handler)

        # Set levels for noisy libraries
        levels = library_log_levels if library_log_levels is not None else LIBRARY_LOG_LEVELS
        for logger_name, library_level in levels.items():
            logging.getLogger(logger_name).setLevel(getattr(logging, library_level.upper(), logging.WARNING))

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger instance.

        Args:
            name: Logger name, typically __name__

        Returns:
            Configured logger instance
        """
        return logging.getLogger(name)
