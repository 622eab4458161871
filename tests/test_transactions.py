def _donation(**extra):
    body = {
        "date": "2025-04-10",
        "category": "General Donation",
        "description": "Festival offering",
        "donor_name": "Ramesh Patil",
        "amount": 501,
    }
    body.update(extra)
    return body


def test_donation_receipts_are_sequential(client, headers):
    preview = client.get("/api/donations/next-receipt-number", headers=headers["viewer"]).get_json()["data"]
    assert preview["receipt_number"] == "DON0001"
    # previewing does not consume the number
    preview = client.get("/api/donations/next-receipt-number", headers=headers["viewer"]).get_json()["data"]
    assert preview["receipt_number"] == "DON0001"

    first = client.post("/api/donations", json=_donation(), headers=headers["treasurer"]).get_json()["data"]
    second = client.post("/api/donations", json=_donation(), headers=headers["treasurer"]).get_json()["data"]
    assert (first["receipt_number"], second["receipt_number"]) == ("DON0001", "DON0002")
    assert first["type"] == "Donation"


def test_supplied_receipt_number_is_claimed(client, headers):
    resp = client.post("/api/donations", json=_donation(receipt_number="DON0005"), headers=headers["treasurer"])
    assert resp.get_json()["data"]["receipt_number"] == "DON0005"
    preview = client.get("/api/donations/next-receipt-number", headers=headers["viewer"]).get_json()["data"]
    assert preview["receipt_number"] == "DON0006"

    resp = client.post("/api/donations", json=_donation(receipt_number="DON0005"), headers=headers["treasurer"])
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "Receipt number already exists"


def test_idempotency_key_rejects_resubmission(client, headers):
    h = dict(headers["treasurer"], **{"Idempotency-Key": "form-123"})
    assert client.post("/api/donations", json=_donation(), headers=h).status_code == 201
    resp = client.post("/api/donations", json=_donation(), headers=h)
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "Duplicate submission detected"


def test_vargani_total_is_derived(client, headers):
    body = _donation(category="Vargani", family_members=4, amount_per_person=250, amount=None)
    resp = client.post("/api/donations", json=body, headers=headers["treasurer"])
    assert resp.status_code == 201
    txn = resp.get_json()["data"]
    assert txn["amount"] == 1000
    assert txn["family_members"] == 4


def test_vargani_requires_members(client, headers):
    body = _donation(category="Vargani", amount_per_person=250)
    resp = client.post("/api/donations", json=body, headers=headers["treasurer"])
    assert resp.status_code == 422
    assert "family_members" in {d["path"] for d in resp.get_json()["details"]}


def test_donation_validation(client, headers):
    body = _donation(amount=None, donor_contact="98765")
    resp = client.post("/api/donations", json=body, headers=headers["treasurer"])
    assert resp.status_code == 422
    details = {d["path"]: d["message"] for d in resp.get_json()["details"]}
    assert details["donor_contact"] == "Donor contact must be exactly 10 digits"
    assert details["amount"] == "Amount is required"


def test_viewer_reads_but_cannot_write(client, headers):
    assert client.post("/api/donations", json=_donation(), headers=headers["viewer"]).status_code == 403
    assert client.get("/api/donations", headers=headers["viewer"]).status_code == 200


def test_update_and_soft_delete(client, headers):
    txn = client.post("/api/donations", json=_donation(), headers=headers["treasurer"]).get_json()["data"]
    resp = client.patch(f"/api/donations/{txn['id']}", json={"amount": 1001}, headers=headers["treasurer"])
    assert resp.get_json()["data"]["amount"] == 1001
    assert resp.get_json()["data"]["receipt_number"] == txn["receipt_number"]

    assert client.delete(f"/api/donations/{txn['id']}", headers=headers["treasurer"]).status_code == 200
    assert client.get(f"/api/donations/{txn['id']}", headers=headers["viewer"]).status_code == 404
    assert client.get("/api/donations", headers=headers["viewer"]).get_json()["data"] == []
    assert client.get("/api/transactions", headers=headers["viewer"]).get_json()["data"] == []


def test_expenses(client, headers):
    body = {
        "date": "2025-04-12",
        "type": "Utilities",
        "category": "Electricity",
        "description": "April bill",
        "amount": 1850.5,
        "payee_name": "MSEDCL",
    }
    resp = client.post("/api/expenses", json=body, headers=headers["treasurer"])
    assert resp.status_code == 201
    txn = resp.get_json()["data"]
    assert txn["type"] == "Utilities"
    assert txn["receipt_number"] is None

    resp = client.put(f"/api/expenses/{txn['id']}", json={"type": "Expense"}, headers=headers["treasurer"])
    assert resp.get_json()["data"]["type"] == "Expense"

    resp = client.post("/api/expenses", json=dict(body, amount=0), headers=headers["treasurer"])
    assert resp.status_code == 422

    # donations are not reachable through the expense endpoints
    don = client.post("/api/donations", json=_donation(), headers=headers["treasurer"]).get_json()["data"]
    assert client.get(f"/api/expenses/{don['id']}", headers=headers["viewer"]).status_code == 404


def test_transaction_filters(client, headers):
    client.post("/api/donations", json=_donation(date="2025-01-05"), headers=headers["treasurer"])
    client.post("/api/donations", json=_donation(date="2025-02-05", category="Annadan"), headers=headers["treasurer"])
    client.post("/api/expenses", json={
        "date": "2025-02-06", "category": "Repairs", "description": "Roof", "amount": 900, "payee_name": "Mistry",
    }, headers=headers["treasurer"])

    def fetch(**args):
        return client.get("/api/transactions", query_string=args, headers=headers["viewer"]).get_json()["data"]

    assert len(fetch()) == 3
    assert len(fetch(type="donations")) == 2
    assert [t["category"] for t in fetch(type="expenses")] == ["Repairs"]
    assert len(fetch(date_filter="month", month=2, year=2025)) == 2
    assert len(fetch(date_filter="range", from_date="2025-02-06")) == 1
    assert len(fetch(category="Annadan")) == 1
    resp = client.get("/api/transactions", query_string={"type": "bogus"}, headers=headers["viewer"])
    assert resp.status_code == 400


def test_receipt_number_from_the_other_sequence_is_rejected(client, headers):
    resp = client.post("/api/donations", json=_donation(receipt_number="RENT0002"), headers=headers["treasurer"])
    assert resp.status_code == 422
    assert resp.get_json()["details"] == [
        {"path": "receipt_number", "message": "Receipt number must start with DON"}
    ]
    preview = client.get("/api/donations/next-receipt-number", headers=headers["viewer"]).get_json()["data"]
    assert preview["receipt_number"] == "DON0001"


def test_rent_sequence_skips_numbers_already_on_file(client, headers, make_agreement):
    agreement = make_agreement()["data"]
    payment = {"agreement_id": agreement["id"], "date": "2025-02-03", "amount": 6000}
    first = client.post("/api/rent/payments", json=payment, headers=headers["treasurer"]).get_json()["data"]
    assert first["receipt_number"] == "RENT0001"

    # free-text expense receipt that happens to look like the next rent number
    client.post("/api/expenses", json={
        "date": "2025-02-04", "category": "Repairs", "description": "Shutter repair",
        "amount": 900, "payee_name": "Sai Works", "receipt_number": "RENT0002",
    }, headers=headers["treasurer"])

    preview = client.get("/api/rent/next-receipt-number", headers=headers["viewer"]).get_json()["data"]
    assert preview["receipt_number"] == "RENT0003"
    numbers = []
    for _ in range(2):
        resp = client.post("/api/rent/payments", json=payment, headers=headers["treasurer"])
        assert resp.status_code == 201, resp.get_json()
        numbers.append(resp.get_json()["data"]["receipt_number"])
    assert numbers == ["RENT0003", "RENT0004"]
