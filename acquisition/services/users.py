from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from acquisition.core.db import atomic
from acquisition.core.errors import Conflict, StorageError, Unauthenticated
from acquisition.core.security import hash_password, verify_password
from acquisition.models.user import User

log = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    stmt = select(User).where(User.email == normalize_email(email)).limit(1)
    return (await db.execute(stmt)).scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    return await db.get(User, user_id)


async def list_users(db: AsyncSession) -> list[User]:
    rows = (await db.execute(select(User).order_by(User.created_at.asc()))).scalars().all()
    return list(rows)


async def create_user(db: AsyncSession, *, name: str, email: str, password: str, role: str = "user") -> User:
    email = normalize_email(email)
    if await get_user_by_email(db, email) is not None:
        raise Conflict("User with this email already exists")

    user = User(name=name, email=email, password_hash=hash_password(password), role=role)
    try:
        async with atomic(db):
            db.add(user)
    except StorageError as e:
        # lost a race on the unique email index
        if isinstance(e.__cause__, IntegrityError):
            raise Conflict("User with this email already exists") from e
        raise

    log.info("user created: %s", user.id)
    return user


async def authenticate_user(db: AsyncSession, *, email: str, password: str) -> User:
    user = await get_user_by_email(db, email)
    # same message either way so sign-in does not leak which emails exist
    if user is None or not verify_password(password, user.password_hash):
        raise Unauthenticated("Invalid email or password")
    return user


async def update_user(db: AsyncSession, user: User, *, changes: dict) -> User:
    if "email" in changes and changes["email"] is not None:
        email = normalize_email(changes["email"])
        other = await get_user_by_email(db, email)
        if other is not None and other.id != user.id:
            raise Conflict("User with this email already exists")
        changes["email"] = email

    async with atomic(db):
        for field, value in changes.items():
            if value is not None:
                setattr(user, field, value)
    return user


async def delete_user(db: AsyncSession, user: User) -> User:
    async with atomic(db):
        await db.delete(user)
    return user
