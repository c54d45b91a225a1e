import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from acquisition.core.db import get_db
from acquisition.core.errors import NotFound
from acquisition.models.deal import Deal
from acquisition.schemas.deal import DealCreate, DealOut, DealUpdate, DeletedDealOut
from acquisition.services import policy
from acquisition.services.auth import Actor, get_actor, require_admin
from acquisition.services.deal_lifecycle import (
    accept_deal,
    complete_deal,
    create_deal,
    delete_deal,
    revise_deal,
)
from acquisition.services.deal_repository import DealPatch, DealRepository
from acquisition.services.listings import get_listing

router = APIRouter(prefix="/deals")


async def _deal_or_404(db: AsyncSession, deal_id: uuid.UUID) -> Deal:
    deal = await DealRepository(db).get_by_id(deal_id)
    if deal is None:
        raise NotFound("Deal not found")
    return deal


@router.get("", response_model=list[DealOut])
async def list_all_deals(
    _: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[DealOut]:
    return [DealOut.model_validate(d) for d in await DealRepository(db).get_all()]


@router.get("/listing/{listing_id}", response_model=list[DealOut])
async def list_deals_for_listing(
    listing_id: uuid.UUID,
    _: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> list[DealOut]:
    if await get_listing(db, listing_id) is None:
        raise NotFound("Listing not found")
    return [DealOut.model_validate(d) for d in await DealRepository(db).list_by_listing(listing_id)]


@router.post("", response_model=DealOut, status_code=201)
async def create_new_deal(
    payload: DealCreate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> DealOut:
    deal = await create_deal(db, acting_user_id=actor.id, listing_id=payload.listing_id, amount=payload.amount)
    return DealOut.model_validate(deal)


@router.get("/{deal_id}", response_model=DealOut)
async def get_deal_by_id(
    deal_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> DealOut:
    deal = await _deal_or_404(db, deal_id)
    policy.ensure(policy.is_admin(actor) or policy.is_party_to_deal(actor, deal))
    return DealOut.model_validate(deal)


@router.put("/{deal_id}", response_model=DealOut)
async def update_deal_by_id(
    deal_id: uuid.UUID,
    payload: DealUpdate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> DealOut:
    deal = await _deal_or_404(db, deal_id)
    policy.ensure(policy.is_owner_or_admin(actor, deal.buyer_id))

    patch = DealPatch(amount=payload.amount, status=payload.status)
    deal = await revise_deal(db, deal_id=deal_id, acting_user_id=actor.id, patch=patch)
    return DealOut.model_validate(deal)


@router.delete("/{deal_id}", response_model=DeletedDealOut)
async def delete_deal_by_id(
    deal_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> DeletedDealOut:
    deal = await _deal_or_404(db, deal_id)
    policy.ensure(policy.is_owner_or_admin(actor, deal.buyer_id))

    deal = await delete_deal(db, deal_id=deal_id, acting_user_id=actor.id)
    return DeletedDealOut(id=deal.id, amount=deal.amount)


@router.post("/{deal_id}/accept", response_model=DealOut)
async def accept_deal_by_id(
    deal_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> DealOut:
    # seller-only; no admin override on this transition
    deal = await accept_deal(db, deal_id=deal_id, acting_user_id=actor.id)
    return DealOut.model_validate(deal)


@router.post("/{deal_id}/complete", response_model=DealOut)
async def complete_deal_by_id(
    deal_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> DealOut:
    deal = await complete_deal(
        db,
        deal_id=deal_id,
        acting_user_id=actor.id,
        allow_override=policy.is_admin(actor),
    )
    return DealOut.model_validate(deal)
