from datetime import date

from khandeshwar_backend.utils.dates import add_months


def test_new_agreement_occupies_shop_and_books_deposit(client, headers, make_shop, make_tenant, make_agreement):
    shop = make_shop("A-010", monthly_rent=6000, deposit=18000)
    tenant = make_tenant("T1", phone="9999999999")
    body = make_agreement(shop=shop, tenant=tenant, security_deposit=18000, advance_rent=6000)

    agreement = body["data"]
    deposit = body["deposit_transaction"]
    assert agreement["status"] == "Active"
    assert agreement["next_due_date"] == "2025-02-01"
    assert agreement["end_date"] == "2025-12-01"
    assert deposit["type"] == "RentIncome"
    assert deposit["amount"] == 24000
    assert deposit["receipt_number"] == "RENT0001"
    assert deposit["agreement_id"] == agreement["id"]

    shop = client.get(f"/api/shops/{shop['id']}", headers=headers["viewer"]).get_json()["data"]
    assert shop["status"] == "Occupied"
    assert shop["tenant_id"] == tenant["id"]
    assert shop["agreement_id"] == agreement["id"]

    resp = client.post("/api/rent/collect", json={"agreement_id": agreement["id"], "collect_rent": True},
                       headers=headers["treasurer"])
    assert resp.status_code == 201
    result = resp.get_json()["data"]
    assert result["receipt_number"] == "RENT0002"
    assert [t["amount"] for t in result["transactions"]] == [6000]

    payments = client.get("/api/rent/payments", headers=headers["viewer"]).get_json()["data"]
    assert sorted(p["amount"] for p in payments) == [6000, 24000]

    agreement = client.get(f"/api/agreements/{agreement['id']}", headers=headers["viewer"]).get_json()["data"]
    assert agreement["next_due_date"] == add_months(date.today(), 1).isoformat()
    assert agreement["last_payment_date"] == date.today().isoformat()


def test_agreement_without_upfront_money_books_nothing(make_agreement):
    body = make_agreement()
    assert body["deposit_transaction"] is None


def test_occupied_shop_cannot_take_second_agreement(client, headers, make_shop, make_tenant, make_agreement):
    shop = make_shop()
    make_agreement(shop=shop)
    other = make_tenant("T2", phone="8888888888")
    resp = client.post("/api/agreements", json={
        "shop_id": shop["id"], "tenant_id": other["id"], "agreement_date": "2025-02-01", "duration": 12,
    }, headers=headers["admin"])
    assert resp.status_code == 409


def test_inactive_tenant_cannot_sign(client, headers, make_shop, make_tenant):
    shop = make_shop()
    tenant = make_tenant(status="Inactive")
    resp = client.post("/api/agreements", json={
        "shop_id": shop["id"], "tenant_id": tenant["id"], "agreement_date": "2025-02-01", "duration": 12,
    }, headers=headers["admin"])
    assert resp.status_code == 409


def test_rent_defaults_to_shop_rent(client, headers, make_shop, make_tenant):
    shop = make_shop(monthly_rent=7500)
    tenant = make_tenant()
    resp = client.post("/api/agreements", json={
        "shop_id": shop["id"], "tenant_id": tenant["id"], "agreement_date": "2025-02-01", "duration": 12,
    }, headers=headers["admin"])
    assert resp.get_json()["data"]["monthly_rent"] == 7500


def test_terminating_frees_shop_and_reactivating_takes_it_back(client, headers, make_agreement):
    agreement = make_agreement()["data"]
    resp = client.patch(f"/api/agreements/{agreement['id']}", json={"status": "Terminated"},
                        headers=headers["admin"])
    assert resp.get_json()["data"]["status"] == "Terminated"
    shop = client.get(f"/api/shops/{agreement['shop_id']}", headers=headers["admin"]).get_json()["data"]
    assert shop["status"] == "Vacant"
    assert shop["tenant_id"] is None

    resp = client.patch(f"/api/agreements/{agreement['id']}", json={"status": "Active"},
                        headers=headers["admin"])
    assert resp.status_code == 200
    shop = client.get(f"/api/shops/{agreement['shop_id']}", headers=headers["admin"]).get_json()["data"]
    assert shop["status"] == "Occupied"


def test_expiring_frees_shop(client, headers, make_agreement):
    agreement = make_agreement()["data"]
    resp = client.patch(f"/api/agreements/{agreement['id']}", json={"status": "Expired"},
                        headers=headers["admin"])
    assert resp.get_json()["data"]["status"] == "Expired"
    shop = client.get(f"/api/shops/{agreement['shop_id']}", headers=headers["admin"]).get_json()["data"]
    assert shop["status"] == "Vacant"
    assert (shop["tenant_id"], shop["agreement_id"]) == (None, None)


def test_viewer_cannot_create_agreement(client, headers, make_shop, make_tenant):
    shop, tenant = make_shop(), make_tenant()
    resp = client.post("/api/agreements", json={
        "shop_id": shop["id"], "tenant_id": tenant["id"], "agreement_date": "2025-02-01", "duration": 12,
    }, headers=headers["viewer"])
    assert resp.status_code == 403


def test_shop_occupancy_only_changes_through_agreements(client, headers, make_shop):
    shop = make_shop()
    resp = client.patch(f"/api/shops/{shop['id']}", json={"status": "Occupied"}, headers=headers["admin"])
    assert resp.status_code == 409
    resp = client.patch(f"/api/shops/{shop['id']}", json={"status": "Maintenance"}, headers=headers["admin"])
    assert resp.get_json()["data"]["status"] == "Maintenance"


def test_duplicate_shop_number(client, headers, make_shop):
    make_shop("B-001")
    resp = client.post("/api/shops", json={"shop_number": "B-001", "size": 50, "monthly_rent": 1000},
                       headers=headers["admin"])
    assert resp.status_code == 409


def test_shop_and_tenant_with_history_cannot_be_deleted(client, headers, make_agreement, make_shop, make_tenant):
    agreement = make_agreement()["data"]
    assert client.delete(f"/api/shops/{agreement['shop_id']}", headers=headers["admin"]).status_code == 409
    assert client.delete(f"/api/tenants/{agreement['tenant_id']}", headers=headers["admin"]).status_code == 409

    spare_shop = make_shop("Z-999")
    spare_tenant = make_tenant("Spare", phone="7777777777")
    assert client.delete(f"/api/shops/{spare_shop['id']}", headers=headers["admin"]).status_code == 200
    assert client.delete(f"/api/tenants/{spare_tenant['id']}", headers=headers["admin"]).status_code == 200


def test_tenant_phone_must_be_ten_digits(client, headers):
    resp = client.post("/api/tenants", json={
        "name": "Bad Phone", "phone": "12345", "address": "x", "business_type": "Tea",
    }, headers=headers["admin"])
    assert resp.status_code == 422
    details = resp.get_json()["details"]
    assert details == [{"path": "phone", "message": "Phone must be exactly 10 digits"}]
