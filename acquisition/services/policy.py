"""
Authorization predicates used by the HTTP layer.

They only answer questions; `ensure` turns a failed check into `Forbidden`.
The deal lifecycle functions do not consult these and trust the acting
user id they are handed.
"""
from __future__ import annotations

import uuid

from acquisition.core.errors import Forbidden
from acquisition.models.deal import Deal
from acquisition.services.auth import Actor


def is_admin(actor: Actor) -> bool:
    return actor.role == "admin"


def is_owner_or_admin(actor: Actor, owner_id: uuid.UUID) -> bool:
    return is_admin(actor) or actor.id == owner_id


def is_party_to_deal(actor: Actor, deal: Deal) -> bool:
    return actor.id in (deal.buyer_id, deal.seller_id)


def ensure(allowed: bool, message: str = "Access denied") -> None:
    if not allowed:
        raise Forbidden(message)
