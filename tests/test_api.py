import json

import pytest


@pytest.fixture
def seeded(client):
    response = client.post(
        "/transactions",
        json=[
            {"date": "2024-01-20", "store": "", "amount": 1050, "type": "income"},
            {"date": "2024-01-05", "store": "Cafe", "amount": -250, "type": "expense"},
        ],
    )
    assert response.status_code == 201
    return response.get_json()["items"]


def test_create_single_transaction(client):
    response = client.post(
        "/transactions", json={"date": "2024-02-01", "store": "  ", "amount": 500, "type": "expense"}
    )
    assert response.status_code == 201
    body = response.get_json()
    assert body["amount"] == -500
    assert body["type"] == "expense"
    assert body["store"] == "未指定"


def test_create_requires_json(client):
    response = client.post("/transactions", data="date=2024-01-01")
    assert response.status_code == 400
    assert response.get_json()["error"] == "Validation error"


def test_create_rejects_bad_amount(client):
    response = client.post("/transactions", json={"date": "2024-02-01", "amount": "abc"})
    assert response.status_code == 400


def test_list_by_month_is_sorted_with_totals(client, seeded):
    response = client.get("/transactions?month=2024-01")
    body = response.get_json()
    assert [item["date"] for item in body["items"]] == ["2024-01-05", "2024-01-20"]
    assert body["totals"] == {"income": 1000, "expense": 300, "balance": 700}


def test_list_rejects_malformed_month(client):
    assert client.get("/transactions?month=2024-13").status_code == 400


def test_get_unknown_transaction(client):
    response = client.get("/transactions/missing")
    assert response.status_code == 404
    assert response.get_json()["error"] == "Record not found"


def test_update_transaction(client, seeded):
    cafe = next(item for item in seeded if item["store"] == "Cafe")
    response = client.put(f"/transactions/{cafe['id']}", json={"amount": -1234})
    assert response.status_code == 200
    assert response.get_json()["amount"] == -1300


def test_update_and_delete_unknown_are_noops(client, seeded):
    assert client.put("/transactions/missing", json={"amount": 100}).status_code == 204
    assert client.delete("/transactions/missing").status_code == 204
    assert len(client.get("/transactions").get_json()["items"]) == 2


def test_delete_transaction(client, seeded):
    assert client.delete(f"/transactions/{seeded[0]['id']}").status_code == 204
    assert len(client.get("/transactions").get_json()["items"]) == 1


def test_summary(client, seeded):
    body = client.get("/summary?month=2024-01").get_json()
    assert body["monthly"] == {"income": 1000, "expense": 300, "balance": 700}
    assert body["year"] == "2024"


def test_summary_requires_month(client):
    assert client.get("/summary").status_code == 400


def test_series(client, seeded):
    body = client.get("/series?month=2024-01").get_json()
    assert [point["running_balance"] for point in body["points"]] == [-300, 700]
    assert body["axis"] == {"min": -400, "max": 1100}


def test_series_without_data(client):
    body = client.get("/series?month=2024-01").get_json()
    assert body == {"points": [], "axis": None}


def test_monthly_report_download(client, seeded):
    response = client.get("/reports/monthly/2024-01")
    assert response.status_code == 200
    assert response.mimetype == "text/plain"
    assert 'filename="finance-report-2024-01.txt"' in response.headers["Content-Disposition"]
    assert response.get_data(as_text=True).splitlines()[-1] == "2024-01-20\t+¥1,000\t未指定"


def test_yearly_report_download(client, seeded):
    response = client.get("/reports/yearly/2024")
    assert 'filename="yearly-finance-report-2024.txt"' in response.headers["Content-Disposition"]
    assert response.get_data(as_text=True).startswith("年間総収入: +¥1,000")


def test_backup_restore_requires_confirmation(client, seeded):
    snapshot = client.get("/backup")
    assert "finance-backup-" in snapshot.headers["Content-Disposition"]
    document = json.loads(snapshot.get_data(as_text=True))
    assert document["version"] == "1.0"

    document["transactions"] = document["transactions"][:1]
    text = json.dumps(document)

    declined = client.post("/backup", data=text, content_type="application/json")
    assert declined.status_code == 409
    assert len(client.get("/transactions").get_json()["items"]) == 2

    restored = client.post("/backup?confirm=true", data=text, content_type="application/json")
    assert restored.status_code == 200
    assert restored.get_json()["restored"] == 1
    assert [item["id"] for item in client.get("/transactions").get_json()["items"]] == [
        document["transactions"][0]["id"]
    ]


def test_backup_restore_invalid_payload(client, seeded):
    response = client.post("/backup?confirm=true", data='{"items": []}', content_type="application/json")
    assert response.status_code == 400
    assert response.get_json()["message"] == "無効なバックアップファイルです"
    assert len(client.get("/transactions").get_json()["items"]) == 2
