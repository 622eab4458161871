import io
from decimal import Decimal

import pytest

from khandeshwar_backend.utils.csv_io import CsvImportError, export_csv, parse_amount, parse_import, to_csv


def test_to_csv_quotes_only_when_needed():
    out = to_csv(["a", "b"], [["plain", 'has "quote"'], ["x,y", None]])
    assert out == 'a,b\nplain,"has ""quote"""\n"x,y",\n'


def test_parse_import_skips_bad_rows():
    text = (
        "\ufeffDate,Type,Category,SubCategory,Description,Amount\n"
        "2025-01-05,Donation,Annadan,,\"Seva, morning\",1000\n"
        "2025-13-40,Donation,Annadan,,Bad date,10\n"
        "2025-01-06,Gift,Annadan,,Unknown type,10\n"
        "2025-01-07,Expense,Repairs,roof,Roof,abc\n"
        "2025-01-08,Expense,Repairs,,,50\n"
        "\n"
        "2025-01-09,Salary,Staff,,Pujari salary,8000.50\n"
    )
    result = parse_import(text)
    assert result.skipped == 4
    assert [r["description"] for r in result.rows] == ["Seva, morning", "Pujari salary"]
    assert result.rows[1]["amount"] == Decimal("8000.50")
    assert "sub_category" not in result.rows[0]


def test_parse_import_reads_sub_category():
    result = parse_import("date,type,category,sub_category,description,amount\n"
                          "2025-02-01,Expense,Repairs,roof,Roof,120\n")
    assert result.rows[0]["category"] == "Repairs"
    assert result.rows[0]["sub_category"] == "roof"


def test_parse_import_requires_columns():
    with pytest.raises(CsvImportError, match="amount"):
        parse_import("date,type,category,description\n2025-01-01,Donation,A,B\n")
    with pytest.raises(CsvImportError):
        parse_import("")


def test_exported_transactions_import_back_unchanged():
    txns = [
        {"date": "2025-01-05", "type": "Donation", "category": "Annadan", "sub_category": "",
         "description": '  leading space, comma "q"', "amount": 501},
        {"date": "2025-01-06", "type": "Utilities", "category": " Electricity ", "sub_category": "meter 2 ",
         "description": "trailing space ", "amount": 1850.5},
        {"date": "2025-01-07", "type": "RentIncome", "category": "Bhade Jama", "sub_category": "Shop Rent",
         "description": "Monthly rent - Shop A-010", "amount": 6000},
    ]
    result = parse_import(export_csv("transactions", txns))

    def key(t):
        return (t["date"], t["type"], t["category"], t["description"], Decimal(str(t["amount"])))

    assert result.skipped == 0
    assert {key(r) for r in result.rows} == {key(t) for t in txns}
    assert result.rows[1]["sub_category"] == "meter 2 "


def test_parse_amount():
    assert parse_amount(" 12.5 ") == Decimal("12.5")
    assert parse_amount("NaN") is None
    assert parse_amount("twelve") is None


def test_import_endpoint(client, headers):
    text = ("Date,Type,Category,Description,Amount\n"
            "2025-01-05,Donation,Annadan,Seva,1000\n"
            "bad,Donation,Annadan,Seva,1000\n")
    resp = client.post("/api/transactions/import", json={"csv": text}, headers=headers["treasurer"])
    assert resp.status_code == 201
    body = resp.get_json()["data"]
    assert (body["imported"], body["skipped"]) == (1, 1)
    assert body["transactions"][0]["receipt_number"] is None

    txns = client.get("/api/transactions", headers=headers["viewer"]).get_json()["data"]
    assert [t["amount"] for t in txns] == [1000]


def test_import_without_valid_rows(client, headers):
    resp = client.post("/api/transactions/import", json={"csv": "Date,Type,Category,Description,Amount\n"},
                       headers=headers["treasurer"])
    assert resp.status_code == 400
    resp = client.post("/api/transactions/import", json={"csv": "foo,bar\n1,2\n"}, headers=headers["treasurer"])
    assert resp.status_code == 400
    assert resp.get_json()["error"].startswith("Missing required columns")


def test_viewer_cannot_import(client, headers):
    resp = client.post("/api/transactions/import", json={"csv": "x"}, headers=headers["viewer"])
    assert resp.status_code == 403


def test_upload_that_is_not_utf8(client, headers):
    data = {"file": (io.BytesIO("date,type\n2025-01-05,Donation,D\xe1n\n".encode("latin-1")), "bank.csv")}
    resp = client.post("/api/transactions/import", data=data, content_type="multipart/form-data",
                       headers=headers["treasurer"])
    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "error": "Invalid CSV format"}
