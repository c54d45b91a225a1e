import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from acquisition.core.db import get_db
from acquisition.core.errors import NotFound
from acquisition.schemas.user import DeletedUserOut, UserOut, UserUpdate
from acquisition.services import policy
from acquisition.services.auth import Actor, get_actor, require_admin
from acquisition.services.users import delete_user, get_user, list_users, update_user

router = APIRouter(prefix="/users")


@router.get("", response_model=list[UserOut])
async def list_all_users(
    _: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[UserOut]:
    return [UserOut.model_validate(u) for u in await list_users(db)]


@router.get("/{user_id}", response_model=UserOut)
async def get_user_by_id(
    user_id: uuid.UUID,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> UserOut:
    policy.ensure(policy.is_owner_or_admin(actor, user_id))
    user = await get_user(db, user_id)
    if user is None:
        raise NotFound("User not found")
    return UserOut.model_validate(user)


@router.put("/{user_id}", response_model=UserOut)
async def update_user_by_id(
    user_id: uuid.UUID,
    payload: UserUpdate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> UserOut:
    policy.ensure(policy.is_owner_or_admin(actor, user_id))
    if payload.role is not None:
        policy.ensure(policy.is_admin(actor), "Only admins can change roles")

    user = await get_user(db, user_id)
    if user is None:
        raise NotFound("User not found")

    user = await update_user(db, user, changes=payload.model_dump(exclude_unset=True))
    return UserOut.model_validate(user)


@router.delete("/{user_id}", response_model=DeletedUserOut)
async def delete_user_by_id(
    user_id: uuid.UUID,
    _: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> DeletedUserOut:
    user = await get_user(db, user_id)
    if user is None:
        raise NotFound("User not found")

    user = await delete_user(db, user)
    return DeletedUserOut(id=user.id, email=user.email)
