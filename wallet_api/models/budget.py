from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime, date
from decimal import Decimal

from wallet_api.db.core import BudgetPeriod
from wallet_api.models.account import AccountRef

# ===== BUDGET PYDANTIC MODELS =====

class BudgetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Budget name")
    amount: Decimal = Field(..., gt=0, description="Target amount for the period")
    period: BudgetPeriod = Field(default=BudgetPeriod.MONTHLY)
    start_date: date = Field(..., description="Budget start date")
    end_date: date = Field(..., description="Budget end date")
    account_id: int = Field(..., description="Account this budget tracks")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        v = round(v, 2)
        if v <= 0:
            raise ValueError("amount must be at least 0.01")
        return v

    @field_validator("end_date")
    @classmethod
    def validate_end_date(cls, v: date, info) -> date:
        if "start_date" in info.data and v <= info.data["start_date"]:
            raise ValueError("end_date must be after start_date")
        return v


class BudgetUpdate(BaseModel):
    id: int
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    amount: Optional[Decimal] = Field(None, gt=0)
    period: Optional[BudgetPeriod] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    account_id: Optional[int] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is None:
            return v
        v = round(v, 2)
        if v <= 0:
            raise ValueError("amount must be at least 0.01")
        return v

    @model_validator(mode="after")
    def validate_date_range(self):
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class BudgetResponse(BaseModel):
    id: int
    name: str
    amount: Decimal
    current_amount: Decimal
    period: BudgetPeriod
    start_date: date
    end_date: date
    account_id: int
    account: Optional[AccountRef] = None
    remaining_amount: Optional[Decimal] = None
    percentage_used: Optional[float] = None
    is_active: Optional[bool] = None  # Whether budget period is current
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BudgetDelete(BaseModel):
    id: int
