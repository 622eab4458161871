def _loan(client, headers, agreement, amount=100000, rate=1, months=12):
    resp = client.post("/api/loans", json={
        "agreement_id": agreement["id"],
        "tenant_id": agreement["tenant_id"],
        "loan_amount": amount,
        "interest_rate": rate,
        "disbursed_date": "2025-01-15",
        "loan_duration": months,
    }, headers=headers["treasurer"])
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]


def test_loan_issue_sets_emi_and_links_agreement(client, headers, make_agreement):
    agreement = make_agreement()["data"]
    loan = _loan(client, headers, agreement)
    assert loan["monthly_emi"] == 8885
    assert loan["outstanding_balance"] == 100000
    assert loan["next_emi_date"] == "2025-02-15"

    agreement = client.get(f"/api/agreements/{agreement['id']}", headers=headers["viewer"]).get_json()["data"]
    assert agreement["has_active_loan"] is True
    assert agreement["active_loan_id"] == loan["id"]


def test_loan_tenant_must_match_agreement(client, headers, make_agreement, make_tenant):
    agreement = make_agreement()["data"]
    other = make_tenant("Other", phone="1111111111")
    resp = client.post("/api/loans", json={
        "agreement_id": agreement["id"], "tenant_id": other["id"], "loan_amount": 1000,
        "interest_rate": 1, "disbursed_date": "2025-01-15", "loan_duration": 2,
    }, headers=headers["admin"])
    assert resp.status_code == 400


def test_emi_payment_then_payoff(client, headers, make_agreement):
    agreement = make_agreement()["data"]
    loan = _loan(client, headers, agreement)

    resp = client.post(f"/api/loans/{loan['id']}/pay", json={"payment_date": "2025-02-15"},
                       headers=headers["treasurer"])
    loan = resp.get_json()["data"]
    assert loan["outstanding_balance"] == 91115
    assert loan["total_repaid"] == 8885
    assert loan["next_emi_date"] == "2025-03-15"
    assert [p["payment_type"] for p in loan["payments"]] == ["EMI"]

    resp = client.post(f"/api/loans/{loan['id']}/pay", json={"amount": 95000, "payment_date": "2025-03-01"},
                       headers=headers["treasurer"])
    loan = resp.get_json()["data"]
    assert loan["outstanding_balance"] == 0
    assert loan["status"] == "Completed"
    assert loan["payments"][-1]["payment_type"] == "FullPayment"

    agreement = client.get(f"/api/agreements/{agreement['id']}", headers=headers["viewer"]).get_json()["data"]
    assert agreement["has_active_loan"] is False

    resp = client.post(f"/api/loans/{loan['id']}/pay", json={}, headers=headers["treasurer"])
    assert resp.status_code == 409


def test_part_payment(client, headers, make_agreement):
    loan = _loan(client, headers, make_agreement()["data"], amount=10000, rate=0, months=10)
    resp = client.post(f"/api/loans/{loan['id']}/pay", json={"amount": 400}, headers=headers["admin"])
    loan = resp.get_json()["data"]
    assert loan["outstanding_balance"] == 9600
    assert loan["payments"][0]["payment_type"] == "PartPayment"


def _penalty(client, headers, agreement, rent=5000, rate=2, due="2025-03-01"):
    resp = client.post("/api/penalties", json={
        "agreement_id": agreement["id"], "rent_amount": rent, "due_date": due, "penalty_rate": rate,
    }, headers=headers["treasurer"])
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]


def test_penalty_lifecycle(client, headers, make_agreement):
    agreement = make_agreement()["data"]
    penalty = _penalty(client, headers, agreement)
    assert penalty["penalty_amount"] == 100
    assert penalty["status"] == "Pending"

    agreement = client.get(f"/api/agreements/{agreement['id']}", headers=headers["viewer"]).get_json()["data"]
    assert agreement["pending_penalties"] == [penalty["id"]]

    resp = client.post(f"/api/penalties/{penalty['id']}/settle", json={"paid_date": "2025-03-10"},
                       headers=headers["treasurer"])
    settled = resp.get_json()["data"]
    assert settled["status"] == "Paid"
    assert settled["penalty_paid"] is True
    assert settled["penalty_paid_date"] == "2025-03-10"

    agreement = client.get(f"/api/agreements/{agreement['id']}", headers=headers["viewer"]).get_json()["data"]
    assert agreement["pending_penalties"] == []

    assert client.post(f"/api/penalties/{penalty['id']}/settle", json={},
                       headers=headers["treasurer"]).status_code == 409
    assert client.delete(f"/api/penalties/{penalty['id']}", headers=headers["treasurer"]).status_code == 409


def test_pending_penalty_can_be_deleted(client, headers, make_agreement):
    agreement = make_agreement()["data"]
    penalty = _penalty(client, headers, agreement)
    assert client.delete(f"/api/penalties/{penalty['id']}", headers=headers["admin"]).status_code == 200
    agreement = client.get(f"/api/agreements/{agreement['id']}", headers=headers["viewer"]).get_json()["data"]
    assert agreement["pending_penalties"] == []


def test_penalty_rate_bounds(client, headers, make_agreement):
    agreement = make_agreement()["data"]
    resp = client.post("/api/penalties", json={
        "agreement_id": agreement["id"], "rent_amount": 5000, "due_date": "2025-03-01", "penalty_rate": 150,
    }, headers=headers["admin"])
    assert resp.status_code == 422
    assert resp.get_json()["details"][0]["path"] == "penalty_rate"
