import uuid
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from acquisition.models.audit_log import AuditLog
from acquisition.models.deal import Deal


LISTING = {
    "title": "  Newsletter business  ",
    "description": "12k subscribers",
    "category": "content",
    "tech_stack": ["ghost"],
    "asking_price": "30000",
    "revenue_monthly": "2500",
    "profit_monthly": "1900",
}


@pytest.mark.asyncio
async def test_create_listing_defaults_to_draft(client, seller):
    r = await client.post("/v1/listings", json=LISTING, headers=seller.headers)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["title"] == "Newsletter business"
    assert body["status"] == "draft"
    assert body["seller_id"] == str(seller.id)
    assert body["tech_stack"] == ["ghost"]


@pytest.mark.asyncio
async def test_create_listing_validation(client, seller):
    r = await client.post("/v1/listings", json={**LISTING, "title": "   "}, headers=seller.headers)
    assert r.status_code == 400

    r = await client.post("/v1/listings", json={**LISTING, "status": "archived"}, headers=seller.headers)
    assert r.status_code == 400

    r = await client.post("/v1/listings", json=LISTING)
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_public_list_and_get(client, seller, make_listing):
    listing = await make_listing(seller)

    r = await client.get("/v1/listings")
    assert r.status_code == 200
    assert [row["id"] for row in r.json()] == [str(listing.id)]

    r = await client.get(f"/v1/listings/{listing.id}")
    assert r.status_code == 200
    assert r.json()["title"] == listing.title

    r = await client.get(f"/v1/listings/{uuid.uuid4()}")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_my_listings_only_returns_own(client, seller, buyer1, make_listing):
    mine = await make_listing(seller, title="Mine")
    await make_listing(buyer1, title="Theirs")

    r = await client.get("/v1/listings/my", headers=seller.headers)
    assert r.status_code == 200
    assert [row["id"] for row in r.json()] == [str(mine.id)]

    r = await client.get("/v1/listings/my")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_update_listing_owner_or_admin(client, seller, stranger, admin, make_listing):
    listing = await make_listing(seller)

    r = await client.put(f"/v1/listings/{listing.id}", json={"title": "Hijacked"}, headers=stranger.headers)
    assert r.status_code == 403

    r = await client.put(f"/v1/listings/{listing.id}", json={"asking_price": "9000"}, headers=seller.headers)
    assert r.status_code == 200
    assert r.json()["title"] == listing.title

    r = await client.put(f"/v1/listings/{listing.id}", json={"status": "withdrawn"}, headers=admin.headers)
    assert r.status_code == 200
    assert r.json()["status"] == "withdrawn"

    r = await client.put(f"/v1/listings/{listing.id}", json={}, headers=seller.headers)
    assert r.status_code == 400

    r = await client.put(f"/v1/listings/{listing.id}", json={"title": None}, headers=seller.headers)
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_update_listing_can_clear_optional_field(client, seller, make_listing):
    listing = await make_listing(seller)
    r = await client.put(f"/v1/listings/{listing.id}", json={"description": None}, headers=seller.headers)
    assert r.status_code == 200
    assert r.json()["description"] is None


@pytest.mark.asyncio
async def test_delete_listing_removes_its_deals(client, session_factory, seller, buyer1, stranger, make_listing):
    listing = await make_listing(seller)
    r = await client.post("/v1/deals", json={"listing_id": str(listing.id), "amount": "100"}, headers=buyer1.headers)
    assert r.status_code == 201

    r = await client.delete(f"/v1/listings/{listing.id}", headers=stranger.headers)
    assert r.status_code == 403

    r = await client.delete(f"/v1/listings/{listing.id}", headers=seller.headers)
    assert r.status_code == 200
    assert r.json() == {"id": str(listing.id), "title": listing.title}

    async with session_factory() as s:
        deals = (await s.execute(select(func.count()).select_from(Deal))).scalar_one()
        actions = (await s.execute(select(AuditLog.action).where(AuditLog.target_id == str(listing.id)))).scalars().all()
    assert deals == 0
    assert "listing.deleted" in actions

    r = await client.get(f"/v1/listings/{listing.id}")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_listing_money_fields_are_bounded(client, seller):
    r = await client.post("/v1/listings", json={**LISTING, "asking_price": "999999999999.99"}, headers=seller.headers)
    assert r.status_code == 201
    listing_id = r.json()["id"]

    r = await client.get(f"/v1/listings/{listing_id}")
    assert Decimal(r.json()["asking_price"]) == Decimal("999999999999.99")

    r = await client.post("/v1/listings", json={**LISTING, "asking_price": "12345678901234567.89"}, headers=seller.headers)
    assert r.status_code == 400

    r = await client.put(f"/v1/listings/{listing_id}", json={"profit_monthly": "1.999"}, headers=seller.headers)
    assert r.status_code == 400
