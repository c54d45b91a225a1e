"""
Deal state transitions.

    pending --accept--> in_escrow --complete--> completed
    pending --(sibling accepted | buyer withdraws)--> cancelled

Accepting a deal is the one multi-row write in the system: the accepted deal
goes to escrow and every other pending deal on the same listing is cancelled
in the same transaction. Before anything is checked or written, every deal
row of the listing is locked (`SELECT ... FOR UPDATE`, or the `BEGIN
IMMEDIATE` write lock on SQLite), so of two concurrent accepts on one listing
the second always re-reads the first one's result and fails with
InvalidState.

These functions trust the `acting_user_id` they are given. Role checks for
the surrounding routes live in `acquisition.services.policy`.
"""
from __future__ import annotations

import logging
import uuid
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from acquisition.core.db import atomic
from acquisition.core.errors import Forbidden, InvalidState, NotFound
from acquisition.models.base import utcnow
from acquisition.models.deal import Deal, DealStatus
from acquisition.models.listing import Listing, ListingStatus
from acquisition.services.audit import audit
from acquisition.services.deal_repository import DealPatch, DealRepository

log = logging.getLogger(__name__)

# statuses a buyer may set through a plain update
BUYER_SETTABLE_STATUSES = frozenset({DealStatus.PENDING.value, DealStatus.CANCELLED.value})

# once a deal on a listing reaches one of these, no other deal on it may be accepted
ACCEPTED_STATUSES = frozenset({DealStatus.IN_ESCROW.value, DealStatus.COMPLETED.value})


async def create_deal(
    db: AsyncSession,
    *,
    acting_user_id: uuid.UUID,
    listing_id: uuid.UUID,
    amount: Decimal,
) -> Deal:
    repo = DealRepository(db)
    async with atomic(db):
        listing = (
            await db.execute(select(Listing).where(Listing.id == listing_id).limit(1))
        ).scalar_one_or_none()
        if listing is None:
            raise NotFound("Listing not found")
        if listing.status != ListingStatus.LISTED.value:
            raise InvalidState("Listing is not available for deals")
        if listing.seller_id == acting_user_id:
            raise InvalidState("Cannot create deal on your own listing")
        if await repo.accepted_for_listing(listing.id) is not None:
            raise InvalidState("Listing is not available for deals")

        deal = await repo.insert(acting_user_id, listing_id=listing.id, amount=amount)
        audit(
            db,
            actor_id=acting_user_id,
            action="deal.created",
            target_type="deal",
            target_id=deal.id,
            detail={"listing_id": str(listing.id), "amount": str(amount)},
        )

    log.info("deal created: %s on listing %s", deal.id, deal.listing_id)
    return deal


async def accept_deal(db: AsyncSession, *, deal_id: uuid.UUID, acting_user_id: uuid.UUID) -> Deal:
    """
    Escrow `deal_id` and cancel every other pending deal on its listing.

    Checked in order: the deal exists (NotFound), the acting user is its
    seller (Forbidden), it is pending (InvalidState), no other deal on the
    listing is in escrow or completed (InvalidState). Cancelled siblings are
    never touched. Nothing is retried.
    """
    repo = DealRepository(db)
    async with atomic(db):
        deal = await repo.get_by_id(deal_id)
        if deal is None:
            raise NotFound("Deal not found")

        locked = {d.id: d for d in await repo.lock_by_listing(deal.listing_id)}
        deal = locked.get(deal_id)
        if deal is None:
            # deleted while we waited for the lock
            raise NotFound("Deal not found")
        if deal.seller_id != acting_user_id:
            raise Forbidden("Access denied")
        if deal.status != DealStatus.PENDING.value:
            raise InvalidState("Deal is not in pending status")
        if any(d.status in ACCEPTED_STATUSES for d in locked.values() if d.id != deal.id):
            raise InvalidState("Listing already has an accepted deal")

        now = utcnow()
        await repo.update(deal.id, DealPatch(status=DealStatus.IN_ESCROW), now=now)
        cancelled_ids = sorted(
            str(i) for i in await repo.cancel_pending(deal.listing_id, exclude_id=deal.id, now=now)
        )

        audit(
            db,
            actor_id=acting_user_id,
            action="deal.accepted",
            target_type="deal",
            target_id=deal.id,
            detail={"listing_id": str(deal.listing_id), "cancelled_deal_ids": cancelled_ids},
        )

    log.info("deal accepted: %s, %d sibling deal(s) cancelled", deal.id, len(cancelled_ids))
    return deal


async def complete_deal(
    db: AsyncSession,
    *,
    deal_id: uuid.UUID,
    acting_user_id: uuid.UUID,
    allow_override: bool = False,
) -> Deal:
    """
    Record that an escrowed deal closed: the deal becomes completed and its
    listing sold. `allow_override` lets a caller that already established
    admin rights act for the seller.
    """
    repo = DealRepository(db)
    async with atomic(db):
        deal = await repo.get_by_id(deal_id)
        if deal is None:
            raise NotFound("Deal not found")

        listing = (
            await db.execute(
                select(Listing)
                .where(Listing.id == deal.listing_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
        ).scalar_one_or_none()
        if listing is None:
            raise NotFound("Listing not found")
        locked = {d.id: d for d in await repo.lock_by_listing(deal.listing_id)}
        deal = locked.get(deal_id)
        if deal is None:
            raise NotFound("Deal not found")
        if deal.seller_id != acting_user_id and not allow_override:
            raise Forbidden("Access denied")
        if deal.status != DealStatus.IN_ESCROW.value:
            raise InvalidState("Deal is not in escrow")

        now = utcnow()
        await repo.update(deal.id, DealPatch(status=DealStatus.COMPLETED), now=now)
        listing.status = ListingStatus.SOLD.value
        listing.updated_at = now

        audit(
            db,
            actor_id=acting_user_id,
            action="deal.completed",
            target_type="deal",
            target_id=deal.id,
            detail={"listing_id": str(listing.id)},
        )

    log.info("deal completed: %s, listing %s sold", deal.id, deal.listing_id)
    return deal


async def revise_deal(db: AsyncSession, *, deal_id: uuid.UUID, acting_user_id: uuid.UUID, patch: DealPatch) -> Deal:
    """
    Buyer-side edit of a pending deal: change the amount, or withdraw by
    setting status to cancelled. Escrow and completion are not reachable
    from here.
    """
    if patch.status is not None and DealStatus(patch.status).value not in BUYER_SETTABLE_STATUSES:
        raise InvalidState("Deal status can only be set to pending or cancelled")

    repo = DealRepository(db)
    async with atomic(db):
        deal = await repo.lock_one(deal_id)
        if deal is None:
            raise NotFound("Deal not found")
        if deal.status != DealStatus.PENDING.value:
            raise InvalidState("Can only update pending deals")

        await repo.update(deal.id, patch)
        audit(
            db,
            actor_id=acting_user_id,
            action="deal.updated",
            target_type="deal",
            target_id=deal.id,
            detail={
                "amount": str(patch.amount) if patch.amount is not None else None,
                "status": DealStatus(patch.status).value if patch.status is not None else None,
            },
        )

    log.info("deal updated: %s", deal.id)
    return deal


async def delete_deal(db: AsyncSession, *, deal_id: uuid.UUID, acting_user_id: uuid.UUID) -> Deal:
    repo = DealRepository(db)
    async with atomic(db):
        deal = await repo.delete(deal_id)
        if deal is None:
            raise NotFound("Deal not found")
        audit(
            db,
            actor_id=acting_user_id,
            action="deal.deleted",
            target_type="deal",
            target_id=deal.id,
            detail={"listing_id": str(deal.listing_id), "amount": str(deal.amount)},
        )

    log.info("deal deleted: %s", deal.id)
    return deal
