import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from acquisition.models.base import MONEY_PRECISION, MONEY_SCALE
from acquisition.models.deal import DealStatus


class DealCreate(BaseModel):
    listing_id: uuid.UUID
    amount: Decimal = Field(gt=0, max_digits=MONEY_PRECISION, decimal_places=MONEY_SCALE)


class DealUpdate(BaseModel):
    amount: Decimal | None = Field(default=None, gt=0, max_digits=MONEY_PRECISION, decimal_places=MONEY_SCALE)
    status: DealStatus | None = None

    @model_validator(mode="after")
    def _at_least_one_field(self) -> "DealUpdate":
        if self.amount is None and self.status is None:
            raise ValueError("At least one field must be provided for update")
        return self


class DealOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    listing_id: uuid.UUID
    buyer_id: uuid.UUID
    seller_id: uuid.UUID
    amount: Decimal
    status: DealStatus
    created_at: datetime
    updated_at: datetime


class DeletedDealOut(BaseModel):
    id: uuid.UUID
    amount: Decimal
