import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from acquisition.models.base import MONEY_PRECISION, MONEY_SCALE
from acquisition.models.listing import ListingStatus


def _strip_title(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Title is required")
    return v


class ListingCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    category: str | None = Field(default=None, max_length=120)
    tech_stack: list[str] | None = None
    asking_price: Decimal | None = Field(default=None, max_digits=MONEY_PRECISION, decimal_places=MONEY_SCALE)
    revenue_monthly: Decimal | None = Field(default=None, max_digits=MONEY_PRECISION, decimal_places=MONEY_SCALE)
    profit_monthly: Decimal | None = Field(default=None, max_digits=MONEY_PRECISION, decimal_places=MONEY_SCALE)
    status: ListingStatus = Field(default=ListingStatus.DRAFT, validate_default=True)

    strip_title = field_validator("title")(_strip_title)


class ListingUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    category: str | None = Field(default=None, max_length=120)
    tech_stack: list[str] | None = None
    asking_price: Decimal | None = Field(default=None, max_digits=MONEY_PRECISION, decimal_places=MONEY_SCALE)
    revenue_monthly: Decimal | None = Field(default=None, max_digits=MONEY_PRECISION, decimal_places=MONEY_SCALE)
    profit_monthly: Decimal | None = Field(default=None, max_digits=MONEY_PRECISION, decimal_places=MONEY_SCALE)
    status: ListingStatus | None = None

    strip_title = field_validator("title")(_strip_title)

    @model_validator(mode="after")
    def _at_least_one_field(self) -> "ListingUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        for name in ("title", "status"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class ListingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    seller_id: uuid.UUID
    title: str
    description: str | None
    category: str | None
    tech_stack: list[str] | None
    asking_price: Decimal | None
    revenue_monthly: Decimal | None
    profit_monthly: Decimal | None
    status: ListingStatus
    created_at: datetime
    updated_at: datetime


class DeletedListingOut(BaseModel):
    id: uuid.UUID
    title: str
