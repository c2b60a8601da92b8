import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_NAME = "sis-records.log"

# Libraries that log every statement or checkout at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def _level(name: Optional[str], fallback: int) -> int:
    """Numeric level for a name such as "debug", or fallback when unknown."""
    if not name:
        return fallback
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else fallback


def _attach(
    logger: logging.Logger,
    handler: logging.Handler,
    level: int,
    formatter: logging.Formatter,
) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)


class LoggingConfig:
    """Centralized logging configuration for the SIS records tooling."""

    def __init__(self, logs_dir: Optional[str] = None):
        self.logs_dir = Path(logs_dir or "logs")
        self._configured = False

    @property
    def log_file(self) -> Path:
        return self.logs_dir / LOG_FILE_NAME

    def setup_logging(
        self,
        log_level: str = "INFO",
        console_level: Optional[str] = None,
        file_level: Optional[str] = None,
        max_file_size: int = 10 * 1024 * 1024,  # 10 MB
        backup_count: int = 5,
        log_format: Optional[str] = None,
        logs_dir: Optional[str] = None,
    ) -> None:
        """
        Set up console and rotating file logging once per process.

        Args:
            log_level: Default log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            console_level: Log level for console output (if different from log_level)
            file_level: Log level for file output (if different from log_level)
            max_file_size: Maximum size of log files before rotation (in bytes)
            backup_count: Number of backup files to keep
            log_format: Custom log format string
            logs_dir: Directory for log files (defaults to ./logs)
        """
        if self._configured:
            return
        if logs_dir:
            self.logs_dir = Path(logs_dir)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

        default = _level(log_level, logging.INFO)
        console = _level(console_level, default)
        to_file = _level(file_level, default)
        formatter = logging.Formatter(log_format or DEFAULT_FORMAT)

        root = logging.getLogger()
        root.handlers.clear()
        root.setLevel(min(console, to_file))
        _attach(root, logging.StreamHandler(), console, formatter)
        _attach(
            root,
            logging.handlers.RotatingFileHandler(
                self.log_file,
                maxBytes=max_file_size,
                backupCount=backup_count,
                encoding="utf-8",
            ),
            to_file,
            formatter,
        )
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        self._configured = True
        logging.getLogger(__name__).info(
            f"Logging to console at {logging.getLevelName(console)} and "
            f"{self.log_file.absolute()} at {logging.getLevelName(to_file)}"
        )

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)


# Global instance
_logging_config = LoggingConfig()


def setup_logging(**kwargs) -> None:
    """Convenience function to set up logging."""
    _logging_config.setup_logging(**kwargs)


def get_logger(name: str) -> logging.Logger:
    """Convenience function to get a logger."""
    return _logging_config.get_logger(name)


def configure_from_env() -> None:
    """Configure logging from environment variables."""
    setup_logging(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        console_level=os.getenv("CONSOLE_LOG_LEVEL"),
        file_level=os.getenv("FILE_LOG_LEVEL"),
        logs_dir=os.getenv("LOG_DIR"),
    )
