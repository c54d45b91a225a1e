import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from acquisition.core.db import get_db
from acquisition.core.errors import NotFound
from acquisition.models.listing import Listing
from acquisition.schemas.listing import DeletedListingOut, ListingCreate, ListingOut, ListingUpdate
from acquisition.services import policy
from acquisition.services.auth import Actor, get_actor
from acquisition.services.listings import (
    create_listing,
    delete_listing,
    get_listing,
    list_listings,
    update_listing,
)

router = APIRouter(prefix="/listings")


async def _listing_or_404(db: AsyncSession, listing_id: uuid.UUID) -> Listing:
    listing = await get_listing(db, listing_id)
    if listing is None:
        raise NotFound("Listing not found")
    return listing


@router.get("", response_model=list[ListingOut])
async def list_all_listings(db: AsyncSession = Depends(get_db)) -> list[ListingOut]:
    return [ListingOut.model_validate(r) for r in await list_listings(db)]


# declared before /{listing_id} so "my" is not parsed as an id
@router.get("/my", response_model=list[ListingOut])
async def list_my_listings(
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> list[ListingOut]:
    return [ListingOut.model_validate(r) for r in await list_listings(db, seller_id=actor.id)]


@router.get("/{listing_id}", response_model=ListingOut)
async def get_listing_by_id(listing_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> ListingOut:
    return ListingOut.model_validate(await _listing_or_404(db, listing_id))


@router.post("", response_model=ListingOut, status_code=201)
async def create_new_listing(
    payload: ListingCreate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> ListingOut:
    listing = await create_listing(db, seller_id=actor.id, fields=payload.model_dump())
    return ListingOut.model_validate(listing)


@router.put("/{listing_id}", response_model=ListingOut)
async def update_listing_by_id(
    listing_id: uuid.UUID,
    payload: ListingUpdate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> ListingOut:
    listing = await _listing_or_404(db, listing_id)
    policy.ensure(policy.is_owner_or_admin(actor, listing.seller_id))

    listing = await update_listing(db, listing, actor_id=actor.id, changes=payload.model_dump(exclude_unset=True))
    return ListingOut.model_validate(listing)


@router.delete("/{listing_id}", response_model=DeletedListingOut)
async def delete_listing_by_id(
    listing_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> DeletedListingOut:
    listing = await _listing_or_404(db, listing_id)
    policy.ensure(policy.is_owner_or_admin(actor, listing.seller_id))

    listing = await delete_listing(db, listing, actor_id=actor.id)
    return DeletedListingOut(id=listing.id, title=listing.title)
