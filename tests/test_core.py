import logging

from sqlalchemy import create_engine, inspect

from wallet_api.db.core import init_db
from wallet_api.logging_config import get_logger, setup_logging


def test_init_db_runs_once_per_engine():
    engine = create_engine("sqlite://")
    init_db(engine)
    init_db(engine)
    assert set(inspect(engine).get_table_names()) == {
        "accounts", "budgets", "categories", "transactions", "user_settings"
    }


def test_module_loggers_live_under_wallet():
    assert get_logger("wallet_api.crud.crud_transaction").name == "wallet.crud.crud_transaction"
    assert get_logger("wallet.services").name == "wallet.services"


def test_setup_logging_writes_rotating_file(tmp_path):
    log_file = tmp_path / "logs" / "wallet.log"
    logger = setup_logging(app_log_level="DEBUG", log_file=str(log_file))
    try:
        get_logger("wallet_api.services.notifications").warning("over budget")
        for handler in logger.handlers:
            handler.flush()
        assert "over budget" in log_file.read_text()
        assert logger.level == logging.DEBUG
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
