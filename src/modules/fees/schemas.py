from datetime import datetime
from decimal import Decimal

from pydantic import Field, field_validator, model_validator

from src.modules.fees.models import AppliesTo
from src.shared.schemas import BaseSchema


# --- Fee Item Schemas ---


class FeeItemCreate(BaseSchema):
    """Schema for creating a fee item definition."""

    name: str = Field(..., min_length=1, max_length=100)
    is_optional: bool = False
    applies_to: list[AppliesTo] = Field(default_factory=list)

    @model_validator(mode="after")
    def require_tags_for_mandatory(self):
        if not self.is_optional and not self.applies_to:
            raise ValueError("Mandatory fee items must apply to at least one of: new, term1, term2_3")
        return self


class FeeItemUpdate(BaseSchema):
    """Schema for updating a fee item definition."""

    name: str | None = Field(None, min_length=1, max_length=100)
    is_optional: bool | None = None
    applies_to: list[AppliesTo] | None = None


class FeeItemResponse(BaseSchema):
    id: int
    name: str
    is_optional: bool
    applies_to: list[str]
    created_at: datetime
    updated_at: datetime


# --- Fee Structure Schemas ---


class FeeStructureItemInput(BaseSchema):
    fee_item_id: int
    amount: Decimal

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Amount must be non-negative")
        return v


class FeeStructureUpsert(BaseSchema):
    """Replace the fee lines of the structure for one class and term."""

    class_id: int
    academic_term_id: int
    items: list[FeeStructureItemInput] = Field(default_factory=list)

    @field_validator("items")
    @classmethod
    def validate_unique_items(cls, v: list[FeeStructureItemInput]) -> list[FeeStructureItemInput]:
        ids = [i.fee_item_id for i in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Each fee item may appear only once in a structure")
        return v


class FeeStructureItemResponse(BaseSchema):
    fee_item_id: int
    fee_item_name: str | None
    amount: Decimal


class FeeStructureResponse(BaseSchema):
    id: int
    class_id: int
    academic_term_id: int
    items: list[FeeStructureItemResponse]
    total_amount: Decimal
