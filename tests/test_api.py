"""HTTP tests for the catalog routers

Uses FastAPI's TestClient with the session dependency pointed at a JSON
store in a temporary directory.
"""

import pytest
from fastapi.testclient import TestClient

from metacatalog.api.deps import getSessionManager
from metacatalog.dao.json.session_manager import JsonSessionManager
from metacatalog.main import app

CUSTOMER = {
    "name": "customer",
    "namespace": "public",
    "primaryKeys": [1],
    "columns": [
        {"name": "c_id", "ordinalPosition": 1, "dataTypeId": 6, "nullable": False},
        {"name": "c_name", "ordinalPosition": 2, "dataTypeId": 14, "nullable": True, "varying": True},
    ],
}


@pytest.fixture
def client(tmp_path):
    """Test client backed by a temporary JSON store"""
    async def overrideSessionManager():
        async with JsonSessionManager(str(tmp_path / "catalog")) as sessionManager:
            yield sessionManager

    app.dependency_overrides[getSessionManager] = overrideSessionManager
    try:
        with TestClient(app) as testClient:
            yield testClient
    finally:
        app.dependency_overrides.clear()


class TestTablesApi:
    """Test the /v1/tables endpoints."""

    def test_create_and_fetch(self, client: TestClient):
        response = client.post("/v1/tables", json=CUSTOMER)
        assert response.status_code == 200
        tableId = response.json()["id"]

        response = client.get(f"/v1/tables/id/{tableId}")
        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "customer"
        assert body["generation"] == 1
        assert [c["name"] for c in body["columns"]] == ["c_id", "c_name"]

        response = client.get("/v1/tables/name/customer")
        assert response.json()["id"] == tableId

        response = client.get("/v1/tables")
        assert [t["name"] for t in response.json()] == ["customer"]

    def test_duplicate_is_conflict(self, client: TestClient):
        client.post("/v1/tables", json=CUSTOMER)
        response = client.post("/v1/tables", json=CUSTOMER)
        assert response.status_code == 409
        assert response.json()["error"]["type"] == "TABLE_NAME_ALREADY_EXISTS"

    def test_lookup_errors(self, client: TestClient):
        response = client.get("/v1/tables/id/999")
        assert response.status_code == 404
        assert response.json()["error"]["type"] == "ID_NOT_FOUND"

        response = client.get("/v1/tables/name/missing")
        assert response.status_code == 404
        assert response.json()["error"]["type"] == "NAME_NOT_FOUND"

        response = client.get("/v1/tables/bogus/x")
        assert response.status_code == 400
        assert response.json()["error"]["type"] == "NOT_SUPPORTED"

    def test_invalid_definition(self, client: TestClient):
        table = dict(CUSTOMER, columns=[{"name": "c", "ordinalPosition": 1, "dataTypeId": 999, "nullable": True}])
        response = client.post("/v1/tables", json=table)
        assert response.status_code == 400
        assert response.json()["error"]["type"] == "INVALID_PARAMETER"

    def test_malformed_body(self, client: TestClient):
        response = client.post("/v1/tables", json={"name": "t", "columns": [{"ordinalPosition": "x"}]})
        assert response.status_code == 400

    def test_update_and_remove(self, client: TestClient):
        tableId = client.post("/v1/tables", json=CUSTOMER).json()["id"]

        response = client.put(f"/v1/tables/id/{tableId}", json=dict(CUSTOMER, name="client"))
        assert response.status_code == 204
        assert client.get(f"/v1/tables/id/{tableId}").json()["generation"] == 2

        response = client.delete("/v1/tables/name/client")
        assert response.status_code == 200
        assert response.json() == {"id": tableId}
        assert client.delete(f"/v1/tables/id/{tableId}").status_code == 404

    def test_table_statistic(self, client: TestClient):
        tableId = client.post("/v1/tables", json=CUSTOMER).json()["id"]

        response = client.post("/v1/tables/statistic", json={"name": "customer", "tupleCount": 250})
        assert response.status_code == 200
        assert response.json() == {"id": tableId}

        response = client.get(f"/v1/tables/id/{tableId}/statistic")
        assert response.json() == {"id": tableId, "name": "customer", "tupleCount": 250.0}

        response = client.post("/v1/tables/statistic", json={"tupleCount": 1})
        assert response.status_code == 400


class TestOtherApis:
    """Test the index, statistics, data type and config endpoints."""

    def test_indexes(self, client: TestClient):
        response = client.post("/v1/indexes", json={"name": "customer_pkey", "ownerId": 1, "keys": [1]})
        assert response.status_code == 200
        indexId = response.json()["id"]

        body = client.get(f"/v1/indexes/id/{indexId}").json()
        assert body["numberOfColumns"] == 1
        assert client.delete("/v1/indexes/name/customer_pkey").json() == {"id": indexId}
        assert client.get("/v1/indexes").json() == []

    def test_column_statistics(self, client: TestClient):
        tableId = client.post("/v1/tables", json=CUSTOMER).json()["id"]

        assert client.get(f"/v1/statistics/{tableId}").status_code == 400

        response = client.put(f"/v1/statistics/{tableId}/1", json={"nullFraction": 0.0})
        assert response.status_code == 204

        response = client.get(f"/v1/statistics/{tableId}/1")
        assert response.json()["columnStatistic"] == {"nullFraction": 0.0}
        assert list(client.get(f"/v1/statistics/{tableId}").json()) == ["1"]

        assert client.put("/v1/statistics/999/1", json={}).status_code == 404
        assert client.delete(f"/v1/statistics/{tableId}").json() == {"removed": 1}

    def test_datatypes(self, client: TestClient):
        names = [d["name"] for d in client.get("/v1/datatypes").json()]
        assert "INT32" in names and "VARCHAR" in names
        assert client.get("/v1/datatypes/id/4").json()["pgDataTypeName"] == "integer"
        assert client.get("/v1/datatypes/name/BLOB").status_code == 404

    def test_config(self, client: TestClient):
        body = client.get("/v1/config").json()
        assert body["format-version"] == 1
        assert "storage-backend" in body["default"]
