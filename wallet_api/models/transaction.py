from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal

from wallet_api.db.core import TransactionType, TransactionStatus
from wallet_api.models.account import AccountRef
from wallet_api.models.user_settings import TriggeredBudgetAlert

# ===== TRANSACTION PYDANTIC MODELS =====

class TransactionCategory(BaseModel):
    """Category embedded in a transaction. Its type always follows the transaction type."""
    name: str = Field(..., min_length=1, max_length=100)
    sub_category: Optional[str] = Field(None, alias="subCategory", max_length=100)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("sub_category")
    @classmethod
    def validate_sub_category(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        # The client sends "" when no subcategory was picked
        return v.strip() or None


class TransactionCreate(BaseModel):
    transaction_type: TransactionType = Field(..., alias="type", description="income or expense")
    amount: Decimal = Field(..., gt=0, description="Positive transaction amount")
    account_id: int = Field(..., description="Account the transaction is booked on")
    budget_id: Optional[int] = Field(None, description="Optional budget the transaction counts toward")
    category: TransactionCategory
    transaction_date: date = Field(default_factory=date.today, alias="date")
    description: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    status: TransactionStatus = TransactionStatus.COMPLETED

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        v = round(v, 2)
        if v <= 0:
            raise ValueError("amount must be at least 0.01")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class TransactionUpdate(BaseModel):
    """Update transaction - identified by id, all other fields optional"""
    id: int
    transaction_type: Optional[TransactionType] = Field(None, alias="type")
    amount: Optional[Decimal] = Field(None, gt=0)
    account_id: Optional[int] = None
    budget_id: Optional[int] = None
    category: Optional[TransactionCategory] = None
    transaction_date: Optional[date] = Field(None, alias="date")
    description: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    status: Optional[TransactionStatus] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is None:
            return v
        v = round(v, 2)
        if v <= 0:
            raise ValueError("amount must be at least 0.01")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class TransactionDelete(BaseModel):
    id: int


class TransactionCategoryResponse(BaseModel):
    name: str
    type: TransactionType
    sub_category: Optional[str] = None


class BudgetRef(BaseModel):
    id: int
    name: str
    amount: Decimal
    current_amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class TransactionResponse(BaseModel):
    """Transaction data returned to client"""
    id: int
    user_id: str
    transaction_type: TransactionType = Field(..., validation_alias=AliasChoices("transaction_type", "type"), serialization_alias="type")
    amount: Decimal
    transaction_date: date = Field(..., validation_alias=AliasChoices("transaction_date", "date"), serialization_alias="date")
    category: TransactionCategoryResponse
    account_id: Optional[int]
    budget_id: Optional[int]
    account: Optional[AccountRef] = None
    budget: Optional[BudgetRef] = None
    description: Optional[str]
    notes: Optional[str]
    status: TransactionStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_db(cls, db_transaction) -> "TransactionResponse":
        return cls(
            id=db_transaction.id,
            user_id=db_transaction.user_id,
            transaction_type=db_transaction.transaction_type,
            amount=db_transaction.amount,
            transaction_date=db_transaction.transaction_date,
            category=TransactionCategoryResponse(
                name=db_transaction.category_name,
                type=db_transaction.category_type,
                sub_category=db_transaction.sub_category,
            ),
            account_id=db_transaction.account_id,
            budget_id=db_transaction.budget_id,
            account=AccountRef.model_validate(db_transaction.account) if db_transaction.account else None,
            budget=BudgetRef.model_validate(db_transaction.budget) if db_transaction.budget else None,
            description=db_transaction.description,
            notes=db_transaction.notes,
            status=db_transaction.status,
            created_at=db_transaction.created_at,
            updated_at=db_transaction.updated_at,
        )


class TransactionFilter(BaseModel):
    """Filter parameters for transaction queries"""
    transaction_type: Optional[TransactionType] = None
    category_name: Optional[str] = None
    account_id: Optional[int] = None
    budget_id: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class TransactionCreateResponse(TransactionResponse):
    """Created transaction plus any budget alerts its category crossed"""
    budget_alerts: List[TriggeredBudgetAlert] = Field(default_factory=list)
