# backend/tests/routers/test_ledger_api.py
"""
Integration tests for the ledger export/import endpoints.

Endpoints:
- POST /ledger/export
- POST /ledger/import
"""

import json

from tests.conftest import buy, txn_payload


def upload(client, content: bytes, filename: str = "ledger.json"):
    return client.post(
        "/ledger/import",
        files={"file": (filename, content, "application/json")},
    )


class TestExportEndpoint:
    """Tests for POST /ledger/export."""

    def test_export(self, client, btc_round_trip_ledger):
        response = client.post(
            "/ledger/export",
            json={"transactions": [txn_payload(t) for t in btc_round_trip_ledger]},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="folio-ledger-')
        assert disposition.endswith('.json"')

        data = response.json()
        assert data["version"] == "1.0"
        assert [r["type"] for r in data["transactions"]] == ["buy", "sell", "buy"]
        assert data["transactions"][0]["quantity"] == "2"

    def test_export_plain_decimal_strings(self, client):
        txn = buy("bitcoin", "0.00000001", "40000")

        response = client.post("/ledger/export", json={"transactions": [txn_payload(txn)]})

        assert response.json()["transactions"][0]["quantity"] == "0.00000001"

    def test_export_rejects_invalid_transaction(self, client):
        payload = txn_payload(buy("bitcoin", "1", "1"))
        payload["unit_price"] = "-5"

        response = client.post("/ledger/export", json={"transactions": [payload]})

        assert response.status_code == 422


class TestImportEndpoint:
    """Tests for POST /ledger/import."""

    def test_export_then_import(self, client, mixed_ledger):
        exported = client.post(
            "/ledger/export",
            json={"transactions": [txn_payload(t) for t in mixed_ledger]},
        ).content

        response = upload(client, exported)

        assert response.status_code == 200
        data = response.json()
        assert data["file_version"] == "1.0"
        assert data["total_row_count"] == 5
        assert data["has_valid_data"] is True
        assert data["invalid_rows"] == []
        assert [r["transaction_id"] for r in data["valid_rows"]] == [
            str(t.id) for t in mixed_ledger
        ]

    def test_invalid_rows_are_reported(self, client):
        content = json.dumps({
            "version": "1.0",
            "transactions": [
                {"asset_id": "bitcoin", "type": "buy", "quantity": "abc",
                 "unit_price": "1", "timestamp": "2025-01-01T00:00:00Z"},
                {"asset_id": "bitcoin", "type": "sell", "quantity": "1",
                 "unit_price": "1", "timestamp": "2025-01-02T00:00:00Z"},
            ],
        }).encode()

        data = upload(client, content).json()

        assert data["total_row_count"] == 2
        assert data["valid_rows"][0]["transaction_type"] == "SELL"
        assert data["invalid_rows"][0]["row_number"] == 1
        assert data["invalid_rows"][0]["errors"] == ["Invalid number 'abc' for quantity"]

    def test_empty_file(self, client):
        response = upload(client, b"")

        assert response.status_code == 400
        assert response.json()["error"] == "LedgerEmptyError"

    def test_not_json(self, client):
        response = upload(client, b"asset,type,quantity\n")

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "LedgerFormatError"
        assert "Invalid JSON structure" in data["details"]["reason"]

    def test_unsupported_version(self, client):
        content = json.dumps({"version": "7.0", "transactions": [{}]}).encode()

        response = upload(client, content)

        assert response.status_code == 400
        assert response.json()["details"] == {"version": "7.0"}

    def test_missing_file(self, client):
        response = client.post("/ledger/import")

        assert response.status_code == 422
