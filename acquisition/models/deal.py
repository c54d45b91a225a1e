import enum
import uuid
from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from acquisition.models.base import MONEY_PRECISION, MONEY_SCALE, Base, TimestampMixin


class DealStatus(str, enum.Enum):
    PENDING = "pending"
    IN_ESCROW = "in_escrow"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Deal(TimestampMixin, Base):
    __tablename__ = "deals"
    __table_args__ = (
        Index("ix_deals_listing_status", "listing_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False
    )
    buyer_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # copied from the listing when the deal is created, never re-derived
    seller_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    amount: Mapped[Decimal] = mapped_column(Numeric(MONEY_PRECISION, MONEY_SCALE), nullable=False)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default=DealStatus.PENDING.value)
