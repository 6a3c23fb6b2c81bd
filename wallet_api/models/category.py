from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import Optional, List
from decimal import Decimal

from wallet_api.db.core import TransactionType

# ===== CATEGORY PYDANTIC MODELS =====

class SubCategory(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    budget: Optional[Decimal] = Field(None, ge=0)


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Category name")
    category_type: TransactionType = Field(..., alias="type", description="income or expense")
    sub_categories: List[SubCategory] = Field(default_factory=list)
    budget: Optional[Decimal] = Field(None, ge=0)

    model_config = ConfigDict(populate_by_name=True)


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    id: int
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category_type: Optional[TransactionType] = Field(None, alias="type")
    sub_categories: Optional[List[SubCategory]] = None
    budget: Optional[Decimal] = Field(None, ge=0)

    model_config = ConfigDict(populate_by_name=True)


class CategoryResponse(BaseModel):
    id: int
    name: str
    category_type: TransactionType = Field(..., validation_alias=AliasChoices("category_type", "type"), serialization_alias="type")
    sub_categories: List[SubCategory]
    budget: Optional[Decimal] = None

    model_config = ConfigDict(from_attributes=True)


class CategoryDelete(BaseModel):
    id: int
