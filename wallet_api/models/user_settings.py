from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from decimal import Decimal
from datetime import date
from enum import Enum


class AlertPeriodEnum(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class BudgetAlert(BaseModel):
    """Spending threshold for one category over a rolling calendar period"""
    category: str = Field(..., min_length=1, max_length=100)
    limit: Decimal = Field(..., gt=0)
    period: AlertPeriodEnum = AlertPeriodEnum.MONTHLY


class UserSettingsUpdate(BaseModel):
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    language: Optional[str] = Field(None, min_length=2, max_length=10)
    budget_alerts: Optional[List[BudgetAlert]] = Field(None, alias="budgetAlerts")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not v.isalpha():
            raise ValueError("Currency must be a 3-letter code")
        return v.upper()


class UserSettingsResponse(BaseModel):
    user_id: str
    currency: str
    language: str
    budget_alerts: List[BudgetAlert]

    model_config = ConfigDict(from_attributes=True)


class TriggeredBudgetAlert(BudgetAlert):
    """An alert whose limit was exceeded, with the amount spent in its period"""
    total: Decimal
    period_start: date
