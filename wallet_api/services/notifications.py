from decimal import Decimal

from wallet_api.logging_config import get_logger

logger = get_logger(__name__)


def send_budget_alert(user_id: str, category: str, current_amount: Decimal, budget_limit: Decimal) -> None:
    """Deliver a budget alert. Alerts are currently written to the application log."""
    logger.warning(
        f"Budget alert for user {user_id}, category {category}: spent {current_amount} of {budget_limit}"
    )
