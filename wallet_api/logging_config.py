import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import List, Optional

APP_LOGGER_NAME = "wallet"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that are too chatty at INFO
NOISY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "sqlalchemy.dialects",
    "sqlalchemy.pool",
    "sqlalchemy.orm",
    "alembic",
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
    "faker",
)


def _resolve_level(value: Optional[str], env_var: str, default: int) -> int:
    name = value or os.getenv(env_var)
    if not name:
        return default
    return getattr(logging, name.upper(), default)


def _build_handlers(level: int, log_file: Optional[str], max_file_size: int, backup_count: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size,
            backupCount=backup_count,
        ))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    app_log_level: Optional[str] = None,
    third_party_log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Configure the ``wallet`` logger for the process.

    Levels and the optional log file fall back to the APP_LOG_LEVEL,
    THIRD_PARTY_LOG_LEVEL and LOG_FILE environment variables. Calling this
    again replaces the handlers installed by a previous call.
    """
    app_level = _resolve_level(app_log_level, "APP_LOG_LEVEL", logging.INFO)
    third_party_level = _resolve_level(third_party_log_level, "THIRD_PARTY_LOG_LEVEL", logging.WARNING)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(app_level)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    for handler in _build_handlers(app_level, log_file or os.getenv("LOG_FILE"), max_file_size, backup_count):
        app_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    app_logger.propagate = False
    return app_logger


def get_logger(name: str = APP_LOGGER_NAME) -> logging.Logger:
    """
    Logger for a module, placed under the ``wallet`` hierarchy.

    ``wallet_api.crud.crud_transaction`` becomes ``wallet.crud.crud_transaction``.
    """
    if name == APP_LOGGER_NAME or name.startswith(APP_LOGGER_NAME + "."):
        return logging.getLogger(name)
    if name.startswith("wallet_api."):
        name = name[len("wallet_api."):]
    return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")
