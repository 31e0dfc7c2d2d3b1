import json
from decimal import Decimal

from orderdesk.extensions import db
from orderdesk.models import AuditLog, Order

from conftest import order_payload


def _create(client, **overrides):
    resp = client.post("/orders", json=order_payload(**overrides))
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["order"]


def test_create_order_defaults(client, account):
    order = _create(client)

    assert order["status"] == "new"
    assert order["is_collected"] is False
    assert Decimal(order["price"]) == Decimal("25000")
    assert Decimal(order["delivery_cost"]) == Decimal("5000")
    assert Decimal(order["discount"]) == 0


def test_create_order_validation(client, account):
    assert client.post("/orders", json=order_payload(price="abc")).status_code == 400
    assert client.post("/orders", json=order_payload(price="")).status_code == 400
    assert client.post("/orders", json=order_payload(customer_name=" ")).status_code == 400
    assert client.post("/orders", json=order_payload(delivery_cost="-5")).status_code == 400
    assert client.post("/orders", json=order_payload(campaign_id=999)).status_code == 400


def test_blacklisted_phone_blocks_submission(client, account):
    client.post("/blacklist", json={"phone": "07701234567", "reason": "fraud"})

    resp = client.post("/orders", json=order_payload())

    assert resp.status_code == 403
    body = resp.get_json()
    assert body["risk"]["status"] == "blocked"
    assert "fraud" in body["error"]
    assert client.get("/orders").get_json()["count"] == 0


def test_high_return_rate_warns_but_saves(client, account):
    for _ in range(2):
        order = _create(client)
        client.post(f"/orders/{order['id']}/status", json={"status": "returned"})

    resp = client.post("/orders", json=order_payload())

    assert resp.status_code == 201
    assert resp.get_json()["risk"]["status"] == "warning"
    assert resp.get_json()["risk"]["returned"] == 2


def test_edit_with_unchanged_phone_skips_risk_check(client, account):
    order = _create(client)
    client.post("/blacklist", json={"phone": "07701234567", "reason": "fraud"})

    resp = client.patch(f"/orders/{order['id']}", json={"address": "Mansour"})

    assert resp.status_code == 200
    assert resp.get_json()["order"]["address"] == "Mansour"
    assert resp.get_json()["risk"]["status"] == "safe"


def test_edit_to_blacklisted_phone_is_blocked(client, account):
    order = _create(client)
    client.post("/blacklist", json={"phone": "07709999999", "reason": "fake orders"})

    resp = client.put(f"/orders/{order['id']}", json={"phone": "07709999999"})

    assert resp.status_code == 403
    assert client.get(f"/orders/{order['id']}").get_json()["phone"] == "07701234567"


def test_risk_endpoint(client, account):
    order = _create(client)
    client.post("/blacklist", json={"phone": "07701234567", "reason": "fraud"})

    checked = client.get("/orders/risk", query_string={"phone": "07701234567"}).get_json()
    editing = client.get(
        "/orders/risk", query_string={"phone": "07701234567", "order_id": order["id"]}
    ).get_json()

    assert checked["status"] == "blocked"
    assert editing["status"] == "safe"


def test_delivery_cost_falls_back_to_stored_rate(client, account):
    client.put("/delivery-rates", json={"rates": {"البصرة": "6000"}})

    with_rate = _create(client, governorate="البصرة", delivery_cost=None)
    typed = _create(client, governorate="البصرة", delivery_cost="4000")
    no_rate = _create(client, governorate="دهوك", delivery_cost="")

    assert Decimal(with_rate["delivery_cost"]) == Decimal("6000")
    assert Decimal(typed["delivery_cost"]) == Decimal("4000")
    assert Decimal(no_rate["delivery_cost"]) == 0


def test_status_and_collection_updates(client, account):
    order = _create(client)

    bad = client.post(f"/orders/{order['id']}/status", json={"status": "lost"})
    delivered = client.post(f"/orders/{order['id']}/status", json={"status": "delivered"})
    collected = client.post(f"/orders/{order['id']}/toggle-collected")
    uncollected = client.post(f"/orders/{order['id']}/toggle-collected")

    assert bad.status_code == 400
    assert delivered.get_json()["status"] == "delivered"
    assert collected.get_json()["is_collected"] is True
    assert uncollected.get_json()["is_collected"] is False


def test_list_filters(client, account):
    first = _create(client, customer_name="Zainab Kareem", phone="07801111111")
    _create(client, customer_name="Omar Saad", phone="07802222222")
    client.post(f"/orders/{first['id']}/status", json={"status": "delivered"})

    by_name = client.get("/orders", query_string={"q": "zainab"}).get_json()
    by_phone = client.get("/orders", query_string={"q": "2222"}).get_json()
    by_status = client.get("/orders", query_string={"status": "delivered"}).get_json()
    everything = client.get("/orders", query_string={"status": "all"}).get_json()

    assert [o["customer_name"] for o in by_name["orders"]] == ["Zainab Kareem"]
    assert [o["customer_name"] for o in by_phone["orders"]] == ["Omar Saad"]
    assert by_status["count"] == 1
    assert everything["count"] == 2
    assert client.get("/orders", query_string={"status": "bogus"}).status_code == 400


def test_product_suggestions(client, account):
    _create(client, product="Smart Watch")
    _create(client, product="Smart Watch", phone="07801111111")
    _create(client, product="Phone Case", phone="07802222222")

    resp = client.get("/orders/products", query_string={"q": "smart"}).get_json()

    assert resp["products"] == ["Smart Watch"]
    assert client.get("/orders/products").get_json()["products"] == []


def test_receipt_total_includes_delivery(client, account):
    order = _create(client, discount="1000")

    receipt = client.get(f"/orders/{order['id']}/receipt").get_json()

    assert Decimal(receipt["total"]) == Decimal("29000")
    assert receipt["store_name"] == "Wared Store"


def test_delete_order_is_audited(app, client, account):
    order = _create(client)

    resp = client.delete(f"/orders/{order['id']}")

    assert resp.status_code == 200
    assert client.get(f"/orders/{order['id']}").status_code == 404
    with app.app_context():
        actions = [a.action for a in AuditLog.query.filter_by(entity_type="Order").order_by(AuditLog.id).all()]
        assert actions == ["CREATE", "DELETE"]
        assert db.session.get(Order, order["id"]) is None


def test_orders_are_scoped_to_their_account(client, account, other_client):
    order = _create(client)

    assert other_client.get(f"/orders/{order['id']}").status_code == 404
    assert other_client.delete(f"/orders/{order['id']}").status_code == 404
    assert other_client.post(f"/orders/{order['id']}/status", json={"status": "delivered"}).status_code == 404
    assert other_client.get("/orders").get_json()["count"] == 0


def test_blacklist_of_another_account_does_not_block(client, account, other_client):
    other_client.post("/blacklist", json={"phone": "07701234567", "reason": "fraud"})

    resp = client.post("/orders", json=order_payload())

    assert resp.status_code == 201


def test_non_finite_amounts_are_rejected(client, account):
    for literal in ("NaN", "Infinity", "-Infinity"):
        body = json.dumps(order_payload()).replace('"25,000"', literal)

        resp = client.post("/orders", data=body, content_type="application/json")

        assert resp.status_code == 400, literal
    assert client.get("/orders").get_json()["count"] == 0


def test_edit_keeps_link_to_deactivated_campaign(client, account):
    campaign = client.post("/campaigns", json={"name": "Ramadan", "platform": "facebook"}).get_json()
    order = _create(client, campaign_id=campaign["id"])
    client.delete(f"/campaigns/{campaign['id']}")

    form = dict(order, address="Mansour")
    resp = client.put(f"/orders/{order['id']}", json=form)

    assert resp.status_code == 200, resp.get_json()
    assert resp.get_json()["order"]["campaign_id"] == campaign["id"]
    assert resp.get_json()["order"]["address"] == "Mansour"


def test_edit_cannot_link_to_another_deactivated_campaign(client, account):
    old = client.post("/campaigns", json={"name": "Old", "platform": "tiktok"}).get_json()
    client.delete(f"/campaigns/{old['id']}")
    order = _create(client)

    resp = client.patch(f"/orders/{order['id']}", json={"campaign_id": old["id"]})

    assert resp.status_code == 400
