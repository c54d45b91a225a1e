import enum
import uuid
from decimal import Decimal

from sqlalchemy import JSON, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from acquisition.models.base import MONEY_PRECISION, MONEY_SCALE, Base, TimestampMixin


class ListingStatus(str, enum.Enum):
    DRAFT = "draft"
    LISTED = "listed"
    SOLD = "sold"
    WITHDRAWN = "withdrawn"


class Listing(TimestampMixin, Base):
    __tablename__ = "listings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    seller_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(120), nullable=True)
    tech_stack: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    asking_price: Mapped[Decimal | None] = mapped_column(Numeric(MONEY_PRECISION, MONEY_SCALE), nullable=True)
    revenue_monthly: Mapped[Decimal | None] = mapped_column(Numeric(MONEY_PRECISION, MONEY_SCALE), nullable=True)
    profit_monthly: Mapped[Decimal | None] = mapped_column(Numeric(MONEY_PRECISION, MONEY_SCALE), nullable=True)

    # only "listed" listings take new deals
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ListingStatus.DRAFT.value)
