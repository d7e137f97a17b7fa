"""
Logging Configuration for the Employee Vaccination Inventory
Console and rotating file logging plus timing helpers for multi-step operations
"""

import logging
import logging.handlers
import os
from datetime import datetime
from typing import Optional


class ColorLogFormatter(logging.Formatter):
    """Console formatter with color coded levels"""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        # Color a copy so file handlers keep the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, '')
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_console: bool = True,
    enable_file_rotation: bool = True
):
    """Setup logging configuration"""

    # Create logs directory if it doesn't exist
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

    # Set log level
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {log_level}')

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_formatter = ColorLogFormatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        if enable_file_rotation:
            # Rotating file handler (10MB max, keep 5 backups)
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5
            )
        else:
            file_handler = logging.FileHandler(log_file)

        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    loggers = [
        'app.employees.service',
        'app.vaccines.service',
        'app.auth.service',
        'app.people.service',
    ]

    for logger_name in loggers:
        logging.getLogger(logger_name).setLevel(numeric_level)

    return root_logger


class OperationLogger:
    """Context manager that logs the start, outcome and duration of an operation"""

    def __init__(
        self,
        operation: str,
        subject: Optional[str] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.operation = operation
        self.subject = subject
        self.logger = logger or logging.getLogger('app.employees.service')
        self.start_time = None
        self.success = False
        self.details = {}

    def __enter__(self):
        self.start_time = datetime.now().timestamp()
        self.logger.info(f"{self.operation.upper()}: started for {self.subject}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = datetime.now().timestamp() - self.start_time if self.start_time else 0

        if exc_type is None:
            self.success = True
        else:
            self.details['error'] = str(exc_val)

        parts = [f"{self.operation.upper()}: {'completed' if self.success else 'failed'}"]
        if self.subject:
            parts.append(f"subject: {self.subject}")
        parts.append(f"duration: {duration:.3f}s")
        for key, value in self.details.items():
            parts.append(f"{key}: {value}")

        message = " | ".join(parts)
        if self.success:
            self.logger.info(message)
        else:
            self.logger.error(message)

        # Never swallow the exception
        return False

    def add_detail(self, key: str, value):
        """Add additional details to the log"""
        self.details[key] = value
