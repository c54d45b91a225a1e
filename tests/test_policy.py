import uuid
from types import SimpleNamespace

import pytest

from acquisition.core.errors import Forbidden
from acquisition.services import policy
from acquisition.services.auth import Actor


def _actor(role="user"):
    return Actor(id=uuid.uuid4(), role=role)


def test_owner_or_admin():
    owner = _actor()
    assert policy.is_owner_or_admin(owner, owner.id)
    assert policy.is_owner_or_admin(_actor("admin"), owner.id)
    assert not policy.is_owner_or_admin(_actor(), owner.id)


def test_party_to_deal():
    buyer, seller = _actor(), _actor()
    deal = SimpleNamespace(buyer_id=buyer.id, seller_id=seller.id)
    assert policy.is_party_to_deal(buyer, deal)
    assert policy.is_party_to_deal(seller, deal)
    assert not policy.is_party_to_deal(_actor(), deal)
    # admins are not parties; routes combine the two checks
    assert not policy.is_party_to_deal(_actor("admin"), deal)


def test_ensure():
    policy.ensure(True)
    with pytest.raises(Forbidden) as exc:
        policy.ensure(False, "Only admins can change roles")
    assert exc.value.message == "Only admins can change roles"
    assert exc.value.status_code == 403
