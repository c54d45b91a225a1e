from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from acquisition.core.db import atomic
from acquisition.models.deal import Deal
from acquisition.models.listing import Listing
from acquisition.services.audit import audit

log = logging.getLogger(__name__)


async def get_listing(db: AsyncSession, listing_id: uuid.UUID) -> Listing | None:
    stmt = select(Listing).where(Listing.id == listing_id).limit(1)
    return (await db.execute(stmt)).scalar_one_or_none()


async def list_listings(db: AsyncSession, *, seller_id: uuid.UUID | None = None) -> list[Listing]:
    stmt = select(Listing)
    if seller_id is not None:
        stmt = stmt.where(Listing.seller_id == seller_id)
    stmt = stmt.order_by(Listing.updated_at.desc())
    return list((await db.execute(stmt)).scalars().all())


async def create_listing(db: AsyncSession, *, seller_id: uuid.UUID, fields: dict[str, Any]) -> Listing:
    listing = Listing(seller_id=seller_id, **fields)
    async with atomic(db):
        db.add(listing)
        await db.flush()
        audit(db, actor_id=seller_id, action="listing.created", target_type="listing", target_id=listing.id)

    log.info("listing created: %s", listing.id)
    return listing


async def update_listing(
    db: AsyncSession,
    listing: Listing,
    *,
    actor_id: uuid.UUID,
    changes: dict[str, Any],
) -> Listing:
    """
    Apply a partial update. `changes` holds only the fields the client sent,
    so an explicit null clears an optional column.
    """
    async with atomic(db):
        for field, value in changes.items():
            setattr(listing, field, value)
        audit(
            db,
            actor_id=actor_id,
            action="listing.updated",
            target_type="listing",
            target_id=listing.id,
            detail={"fields": sorted(changes)},
        )
    return listing


async def delete_listing(db: AsyncSession, listing: Listing, *, actor_id: uuid.UUID) -> Listing:
    async with atomic(db):
        # deals go with the listing; explicit so it does not depend on FK enforcement
        await db.execute(delete(Deal).where(Deal.listing_id == listing.id))
        await db.delete(listing)
        audit(
            db,
            actor_id=actor_id,
            action="listing.deleted",
            target_type="listing",
            target_id=listing.id,
            detail={"title": listing.title},
        )

    log.info("listing deleted: %s", listing.id)
    return listing
