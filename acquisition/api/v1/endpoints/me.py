from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from acquisition.core.db import get_db
from acquisition.core.errors import Unauthenticated
from acquisition.schemas.user import UserOut
from acquisition.services.auth import Actor, get_actor
from acquisition.services.users import get_user

router = APIRouter()

@router.get("/me", response_model=UserOut)
async def me(actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)) -> UserOut:
    user = await get_user(db, actor.id)
    if user is None:
        # token outlived its user
        raise Unauthenticated("User no longer exists")
    return UserOut.model_validate(user)
