from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Dict
from datetime import datetime
from decimal import Decimal

from wallet_api.db.core import AccountType


# ===== ACCOUNT PYDANTIC MODELS =====

class AccountCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Account name")
    account_type: AccountType = Field(..., alias="type", description="Type of account")
    balance: Decimal = Field(default=Decimal("0.00"), description="Opening balance")
    currency: str = Field(default="USD", min_length=3, max_length=3, description="ISO 4217 currency code")
    is_default: bool = False

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        if not v.isalpha():
            raise ValueError("Currency must be a 3-letter code")
        return v.upper()

    @field_validator("balance")
    @classmethod
    def validate_balance(cls, v: Decimal) -> Decimal:
        return round(v, 2)


class AccountUpdate(BaseModel):
    """Update account - identified by id, all other fields optional"""
    id: int
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    account_type: Optional[AccountType] = Field(None, alias="type")
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    is_default: Optional[bool] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not v.isalpha():
            raise ValueError("Currency must be a 3-letter code")
        return v.upper()


class AccountResponse(BaseModel):
    """Account data returned to client"""
    id: int
    user_id: str
    name: str
    account_type: AccountType = Field(..., validation_alias=AliasChoices("account_type", "type"), serialization_alias="type")
    balance: Decimal
    currency: str
    is_default: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AccountRef(BaseModel):
    """Lightweight account reference embedded in budgets and transactions"""
    id: int
    name: str
    account_type: AccountType = Field(..., validation_alias=AliasChoices("account_type", "type"), serialization_alias="type")

    model_config = ConfigDict(from_attributes=True)


class AccountSummary(BaseModel):
    """Account totals for the current user"""
    total_accounts: int
    accounts_by_type: Dict[str, int]
    balance_by_currency: Dict[str, Decimal]


class AccountDelete(BaseModel):
    id: int
