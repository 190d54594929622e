from sqlalchemy import func, select, update

from conftest import auth_headers, order_payload
from services.order_service.models import Order
from services.product_service.models import Variant
from services.product_service.repository import ProductRepository


def variant_stock(product: dict, color: str) -> int:
    return next(v["stock"] for v in product["variants"] if v["color"] == color)


async def fetch_product(client, product_id: int) -> dict:
    return (await client.get(f"/products/{product_id}")).json()


async def place_order(client, customer, product, **kwargs):
    return await client.post("/orders", json=order_payload(product["id"], **kwargs), headers=auth_headers(customer))


async def test_create_order_computes_total_and_decrements_stock(client, customer, product):
    payload = order_payload(product["id"], quantity=2)
    payload["items"].append({"product_id": product["id"], "variant": {"color": "neon", "size": "standard"}, "quantity": 1})

    resp = await client.post("/orders", json=payload, headers=auth_headers(customer))

    assert resp.status_code == 201, resp.text
    order = resp.json()
    assert order["status"] == "pending"
    assert order["user_id"] == customer.id
    assert order["status_history"] == []
    assert [(i["color"], i["quantity"], i["price"]) for i in order["items"]] == [
        ("white", 2, 349.99),
        ("neon", 1, 329.5),
    ]
    assert order["total_amount"] == sum(i["price"] * i["quantity"] for i in order["items"])

    after = await fetch_product(client, product["id"])
    assert variant_stock(after, "white") == 3
    assert variant_stock(after, "neon") == 1


async def test_insufficient_stock_leaves_stock_untouched(client, customer, product, session_factory):
    resp = await place_order(client, customer, product, color="neon", quantity=3)

    assert resp.status_code == 400
    assert variant_stock(await fetch_product(client, product["id"]), "neon") == 2
    async with session_factory() as session:
        assert await session.scalar(select(func.count(Order.id))) == 0


async def test_lines_sharing_a_variant_cannot_oversell(client, customer, product, session_factory):
    payload = order_payload(product["id"], color="neon", quantity=2)
    payload["items"].append(dict(payload["items"][0]))

    resp = await client.post("/orders", json=payload, headers=auth_headers(customer))

    assert resp.status_code == 400
    assert variant_stock(await fetch_product(client, product["id"]), "neon") == 2
    async with session_factory() as session:
        assert await session.scalar(select(func.count(Order.id))) == 0


async def test_stock_drained_during_checkout_rolls_back(client, customer, product, session_factory, monkeypatch):
    take_stock = ProductRepository.decrement_stock

    async def drained_first(db, variant_id, quantity):
        # Another checkout empties the variant between validation and the decrement
        await db.execute(update(Variant).where(Variant.id == variant_id).values(stock=0))
        return await take_stock(db, variant_id, quantity)

    monkeypatch.setattr(ProductRepository, "decrement_stock", staticmethod(drained_first))

    resp = await place_order(client, customer, product)

    assert resp.status_code == 400
    assert variant_stock(await fetch_product(client, product["id"]), "white") == 5
    async with session_factory() as session:
        assert await session.scalar(select(func.count(Order.id))) == 0


async def test_unknown_variant_and_product(client, customer, product):
    bad_variant = await place_order(client, customer, product, color="purple")
    assert bad_variant.status_code == 400
    assert bad_variant.json()["detail"] == "Invalid variant selected"

    missing = await client.post("/orders", json=order_payload(999), headers=auth_headers(customer))
    assert missing.status_code == 404


async def test_order_shape_is_validated(client, customer, product):
    payload = order_payload(product["id"], quantity=0)
    assert (await client.post("/orders", json=payload, headers=auth_headers(customer))).status_code == 422

    payload = order_payload(product["id"], items=[])
    assert (await client.post("/orders", json=payload, headers=auth_headers(customer))).status_code == 422

    payload = order_payload(product["id"])
    payload["shipping_address"]["city"] = ""
    assert (await client.post("/orders", json=payload, headers=auth_headers(customer))).status_code == 422


async def test_card_details_are_checked(client, customer, product):
    card = {"number": "4111111111111112", "expiry": "01/99", "cvv": "123"}

    resp = await place_order(client, customer, product, payment_method="credit_card", card=card)

    assert resp.status_code == 422
    assert [e["field"] for e in resp.json()["detail"]] == ["card_number"]
    assert variant_stock(await fetch_product(client, product["id"]), "white") == 5


async def test_shipping_address_is_checked(client, customer, product):
    payload = order_payload(product["id"])
    payload["shipping_address"]["zip_code"] = "6270"

    resp = await client.post("/orders", json=payload, headers=auth_headers(customer))

    assert resp.status_code == 422
    assert [e["field"] for e in resp.json()["detail"]] == ["zip_code"]
    assert variant_stock(await fetch_product(client, product["id"]), "white") == 5


async def test_only_customers_place_orders(client, admin, product):
    resp = await client.post("/orders", json=order_payload(product["id"]), headers=auth_headers(admin))

    assert resp.status_code == 403


async def test_assign_rider_ships_with_one_history_entry(client, admin, customer, rider, product):
    order = (await place_order(client, customer, product)).json()

    resp = await client.patch(
        f"/orders/{order['id']}/status",
        json={"status": "shipped", "rider_id": rider.id},
        headers=auth_headers(admin),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "shipped"
    assert body["rider_id"] == rider.id
    assert [(h["status"], h["note"]) for h in body["status_history"]] == [("shipped", "Rider assigned for delivery")]


async def test_status_update_appends_history(client, admin, customer, product):
    order = (await place_order(client, customer, product)).json()
    headers = auth_headers(admin)

    await client.patch(f"/orders/{order['id']}/status", json={"status": "paid"}, headers=headers)
    resp = await client.patch(
        f"/orders/{order['id']}/status",
        json={"status": "cancelled", "note": "Customer request"},
        headers=headers,
    )

    body = resp.json()
    assert body["status"] == "cancelled"
    assert [(h["status"], h["note"]) for h in body["status_history"]] == [
        ("paid", ""),
        ("cancelled", "Customer request"),
    ]
    assert body["total_amount"] == order["total_amount"]


async def test_status_update_errors(client, admin, customer, product):
    headers = auth_headers(admin)

    assert (await client.patch("/orders/999/status", json={"status": "paid"}, headers=headers)).status_code == 404

    order = (await place_order(client, customer, product)).json()
    not_a_rider = await client.patch(
        f"/orders/{order['id']}/status",
        json={"status": "shipped", "rider_id": customer.id},
        headers=headers,
    )
    assert not_a_rider.status_code == 404

    invalid = await client.patch(f"/orders/{order['id']}/status", json={"status": "pending"}, headers=headers)
    assert invalid.status_code == 422

    forbidden = await client.patch(
        f"/orders/{order['id']}/status",
        json={"status": "paid"},
        headers=auth_headers(customer),
    )
    assert forbidden.status_code == 403


async def test_delivery_by_assigned_rider(client, admin, customer, rider, product):
    order = (await place_order(client, customer, product)).json()
    await client.patch(
        f"/orders/{order['id']}/status",
        json={"status": "shipped", "rider_id": rider.id},
        headers=auth_headers(admin),
    )

    resp = await client.patch(
        f"/orders/{order['id']}/delivery",
        json={"status": "undelivered", "note": "Nobody home"},
        headers=auth_headers(rider),
    )

    assert resp.status_code == 200
    assert resp.json()["status"] == "undelivered"
    assert resp.json()["status_history"][-1]["note"] == "Nobody home"

    resp = await client.patch(
        f"/orders/{order['id']}/delivery",
        json={"status": "delivered"},
        headers=auth_headers(rider),
    )
    assert resp.json()["status"] == "delivered"
    assert resp.json()["status_history"][-1]["note"] == "Order delivered successfully"


async def test_delivery_by_other_rider_is_not_assigned(client, admin, customer, rider, make_user, product):
    other = await make_user("rider")
    order = (await place_order(client, customer, product)).json()

    unassigned = await client.patch(
        f"/orders/{order['id']}/delivery",
        json={"status": "delivered"},
        headers=auth_headers(rider),
    )
    assert unassigned.status_code == 403

    await client.patch(
        f"/orders/{order['id']}/status",
        json={"status": "shipped", "rider_id": rider.id},
        headers=auth_headers(admin),
    )
    resp = await client.patch(
        f"/orders/{order['id']}/delivery",
        json={"status": "delivered"},
        headers=auth_headers(other),
    )

    assert resp.status_code == 403
    assert resp.json()["detail"] == "This order is not assigned to you"
    detail = await client.get(f"/orders/{order['id']}", headers=auth_headers(admin))
    assert detail.json()["status"] == "shipped"


async def test_order_listings_and_visibility(client, admin, customer, rider, make_user, product):
    other_customer = await make_user("customer")
    mine = (await place_order(client, customer, product)).json()
    theirs = (await place_order(client, other_customer, product)).json()
    await client.patch(
        f"/orders/{theirs['id']}/status",
        json={"status": "shipped", "rider_id": rider.id},
        headers=auth_headers(admin),
    )

    all_orders = await client.get("/orders", headers=auth_headers(admin))
    assert [o["id"] for o in all_orders.json()] == [theirs["id"], mine["id"]]

    my_orders = await client.get("/orders/my-orders", headers=auth_headers(customer))
    assert [o["id"] for o in my_orders.json()] == [mine["id"]]

    rider_orders = await client.get("/orders/rider", headers=auth_headers(rider))
    assert [o["id"] for o in rider_orders.json()] == [theirs["id"]]

    assert (await client.get(f"/orders/{mine['id']}", headers=auth_headers(customer))).status_code == 200
    assert (await client.get(f"/orders/{theirs['id']}", headers=auth_headers(customer))).status_code == 403
    assert (await client.get(f"/orders/{mine['id']}", headers=auth_headers(rider))).status_code == 200
    assert (await client.get("/orders", headers=auth_headers(customer))).status_code == 403
    assert (await client.get("/orders/999", headers=auth_headers(admin))).status_code == 404
