from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from acquisition.core.errors import NotFound
from acquisition.models.base import utcnow
from acquisition.models.deal import Deal, DealStatus
from acquisition.models.listing import Listing


@dataclass(frozen=True)
class DealPatch:
    """The only fields a deal update may touch. None means "leave as is"."""

    amount: Decimal | None = None
    status: DealStatus | None = None

    def is_empty(self) -> bool:
        return self.amount is None and self.status is None


class DealRepository:
    """
    Typed persistence for deals.

    No cross-record rules live here: status checks, self-dealing and
    transition legality belong to `acquisition.services.deal_lifecycle`.
    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_all(self) -> list[Deal]:
        stmt = select(Deal).order_by(Deal.created_at.asc())
        return list((await self.db.execute(stmt)).scalars().all())

    async def get_by_id(self, deal_id: uuid.UUID) -> Deal | None:
        return await self.db.get(Deal, deal_id)

    async def list_by_listing(self, listing_id: uuid.UUID) -> list[Deal]:
        stmt = select(Deal).where(Deal.listing_id == listing_id).order_by(Deal.created_at.asc())
        return list((await self.db.execute(stmt)).scalars().all())

    async def insert(self, buyer_id: uuid.UUID, *, listing_id: uuid.UUID, amount: Decimal) -> Deal:
        listing = (
            await self.db.execute(select(Listing).where(Listing.id == listing_id).limit(1))
        ).scalar_one_or_none()
        if listing is None:
            raise NotFound("Listing not found")

        now = utcnow()
        deal = Deal(
            listing_id=listing.id,
            buyer_id=buyer_id,
            seller_id=listing.seller_id,
            amount=amount,
            status=DealStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        self.db.add(deal)
        await self.db.flush()
        return deal

    async def update(self, deal_id: uuid.UUID, patch: DealPatch, *, now: datetime | None = None) -> Deal | None:
        deal = await self.get_by_id(deal_id)
        if deal is None:
            return None

        if patch.amount is not None:
            deal.amount = patch.amount
        if patch.status is not None:
            deal.status = DealStatus(patch.status).value
        deal.updated_at = now or utcnow()

        await self.db.flush()
        return deal

    async def delete(self, deal_id: uuid.UUID) -> Deal | None:
        deal = await self.get_by_id(deal_id)
        if deal is None:
            return None
        await self.db.delete(deal)
        await self.db.flush()
        return deal

    async def lock_by_listing(self, listing_id: uuid.UUID) -> list[Deal]:
        # Fixed lock order (by id) so two transactions on one listing cannot deadlock.
        # populate_existing: identities already in the session get the locked row's values.
        stmt = (
            select(Deal)
            .where(Deal.listing_id == listing_id)
            .order_by(Deal.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def lock_one(self, deal_id: uuid.UUID) -> Deal | None:
        stmt = (
            select(Deal)
            .where(Deal.id == deal_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def accepted_for_listing(self, listing_id: uuid.UUID) -> Deal | None:
        """The listing's deal in escrow or completed, if any."""
        stmt = (
            select(Deal)
            .where(
                Deal.listing_id == listing_id,
                Deal.status.in_([DealStatus.IN_ESCROW.value, DealStatus.COMPLETED.value]),
            )
            .limit(1)
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def cancel_pending(self, listing_id: uuid.UUID, *, exclude_id: uuid.UUID, now: datetime) -> list[uuid.UUID]:
        """Cancel the listing's other pending deals; returns the ids actually changed."""
        result = await self.db.execute(
            update(Deal)
            .where(
                Deal.listing_id == listing_id,
                Deal.id != exclude_id,
                Deal.status == DealStatus.PENDING.value,
            )
            .values(status=DealStatus.CANCELLED.value, updated_at=now)
            .returning(Deal.id)
        )
        return list(result.scalars().all())
