"""
Logging Configuration
"""

import logging
from pathlib import Path
from logging.handlers import RotatingFileHandler


# Logger family used by the preferences repository, service and store
PREFERENCES_LOGGER = "unitprefs.preferences"


def setup_logging(log_level: str = "INFO", log_dir: str = "logs"):
    """
    Setup logging configuration

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for rotating log files
    """
    # Create logs directory if it doesn't exist
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    # Convert log level string to logging constant
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    # Create formatters
    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    simple_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    # Main application log file (rotating)
    app_handler = RotatingFileHandler(
        log_path / "app.log",
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5
    )
    app_handler.setLevel(numeric_level)
    app_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(app_handler)

    # Error-only log file
    error_handler = RotatingFileHandler(
        log_path / "errors.log",
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(error_handler)

    # Preferences log file (repository, service and store)
    preferences_logger = logging.getLogger(PREFERENCES_LOGGER)
    preferences_handler = RotatingFileHandler(
        log_path / "preferences.log",
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=3
    )
    preferences_handler.setLevel(logging.DEBUG)
    preferences_handler.setFormatter(detailed_formatter)
    preferences_logger.addHandler(preferences_handler)

    # Reduce verbosity of some third-party loggers
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.info(f"Logging configured with level: {log_level}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger inside the preferences logger family

    Args:
        name: Logger name suffix (e.g. "service")

    Returns:
        Logger instance
    """
    return logging.getLogger(f"{PREFERENCES_LOGGER}.{name}")
