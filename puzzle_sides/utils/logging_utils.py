"""
Logging helpers for the puzzle side matcher.
"""

import logging
import os
import sys
from datetime import datetime
from typing import Dict, Optional

from ..config.settings import DEFAULT_VERBOSITY, LOG_DIR, LOG_PREFIX


LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR
}


class LevelDependentFormatter(logging.Formatter):
    """Plain messages up to INFO, level-prefixed messages above."""

    def __init__(self):
        super().__init__()
        self.info_formatter = logging.Formatter('%(message)s')
        self.detail_formatter = logging.Formatter('%(levelname)s: %(message)s')

    def format(self, record):
        if record.levelno <= logging.INFO:
            return self.info_formatter.format(record)
        return self.detail_formatter.format(record)


class LogManager:
    """Central logging setup with a console verbosity switch."""

    def __init__(self):
        self.loggers: Dict[str, logging.Logger] = {}
        self.main_logger: Optional[logging.Logger] = None
        self.progress_logger: Optional[logging.Logger] = None
        self.console_handler: Optional[logging.Handler] = None
        self.log_file: Optional[str] = None
        self.verbosity = logging.INFO

    def setup(self, log_dir: str = LOG_DIR, verbosity: str = DEFAULT_VERBOSITY,
              log_prefix: str = LOG_PREFIX) -> str:
        """
        Configure file and console logging.

        Args:
            log_dir: Directory for log files
            verbosity: Console level ('DEBUG', 'INFO', 'WARNING', 'ERROR')
            log_prefix: Prefix of the log file name

        Returns:
            Path to the log file
        """
        self.verbosity = LEVELS.get(verbosity.upper(), logging.INFO)

        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        self.log_file = os.path.join(log_dir, f"{log_prefix}_{timestamp}.log")

        # The file always gets everything
        file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
        ))

        self.console_handler = logging.StreamHandler(sys.stdout)
        self.console_handler.setLevel(self.verbosity)
        self.console_handler.setFormatter(LevelDependentFormatter())

        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        root_logger.addHandler(file_handler)
        root_logger.addHandler(self.console_handler)

        # matplotlib is chatty at DEBUG
        logging.getLogger('matplotlib').setLevel(logging.WARNING)
        logging.getLogger('PIL').setLevel(logging.WARNING)

        self.progress_logger = logging.getLogger('progress')
        self.main_logger = root_logger

        self.progress_logger.info(f"Logging initialised. Level: {verbosity}")
        self.progress_logger.info(f"Log file: {self.log_file}")

        return self.log_file

    def get_logger(self, name: str) -> logging.Logger:
        """Return (and remember) the logger for a module."""
        if name not in self.loggers:
            self.loggers[name] = logging.getLogger(name)
        return self.loggers[name]

    def set_verbosity(self, verbosity: str) -> None:
        """Change the console level without touching the log file."""
        level = LEVELS.get(verbosity.upper(), logging.INFO)
        if self.console_handler is not None:
            self.console_handler.setLevel(level)
        self.verbosity = level
        logging.getLogger('progress').info(f"Verbosity changed to: {verbosity}")


# Global instance shared by all modules
log_manager = LogManager()
