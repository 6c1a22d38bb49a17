"""Tests for port endpoints, including bulk upload and the delete guard."""

import json

import pytest
from httpx import AsyncClient


@pytest.mark.api
@pytest.mark.asyncio
class TestPortEndpoints:
    """Port CRUD and search."""

    async def test_create_port(self, client: AsyncClient, admin_headers: dict):
        """Test port creation."""
        response = await client.post(
            "/api/ports/",
            json={
                "name": "Singapore",
                "country": "Singapore",
                "unloc": "SGSIN",
                "code": "",
                "latitude": 1.26,
                "longitude": 103.84,
            },
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["unloc"] == "SGSIN"
        assert data["code"] is None
        assert data["latitude"] == 1.26

    async def test_rejects_out_of_range_coordinates(
        self, client: AsyncClient, admin_headers: dict
    ):
        """Test latitude outside -90..90 is rejected."""
        response = await client.post(
            "/api/ports/",
            json={"name": "Nowhere", "country": "X", "unloc": "XXNOW", "latitude": 91},
            headers=admin_headers,
        )
        assert response.status_code == 422

    async def test_duplicate_unloc_conflicts(
        self, client: AsyncClient, admin_headers: dict, ports: dict
    ):
        """Test creating a port with a taken UNLOC."""
        response = await client.post(
            "/api/ports/",
            json={"name": "Shanghai Yangshan", "country": "China", "unloc": "CNSHA"},
            headers=admin_headers,
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "DUPLICATE_RECORD"

    async def test_list_sorted_by_name(self, client: AsyncClient, ports: dict):
        """Test ports are listed alphabetically."""
        response = await client.get("/api/ports/")

        names = [p["name"] for p in response.json()]
        assert names == sorted(names)
        assert len(names) == 6

    async def test_search_matches_name_country_and_unloc(
        self, client: AsyncClient, ports: dict
    ):
        """Test port search by name, country and UNLOC."""
        by_name = (await client.get("/api/ports/search", params={"q": "rotter"})).json()
        assert [p["unloc"] for p in by_name] == ["NLRTM"]

        by_country = (await client.get("/api/ports/search", params={"q": "china"})).json()
        assert {p["unloc"] for p in by_country} == {"CNSHA", "CNNGB", "CNTAO"}

        by_unloc = (await client.get("/api/ports/search", params={"q": "uslax"})).json()
        assert [p["name"] for p in by_unloc] == ["Los Angeles"]

    async def test_blank_search_returns_nothing(self, client: AsyncClient, ports: dict):
        """Test a blank search query."""
        response = await client.get("/api/ports/search", params={"q": "  "})

        assert response.status_code == 200
        assert response.json() == []

    async def test_update_port(self, client: AsyncClient, admin_headers: dict, ports: dict):
        """Test full replace of port fields."""
        port_id = ports["Hamburg"]["id"]
        response = await client.put(
            f"/api/ports/{port_id}",
            json={"name": "Hamburg", "country": "Germany", "unloc": "DEHAM", "code": "HAM"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["code"] == "HAM"

    async def test_update_to_taken_unloc_conflicts(
        self, client: AsyncClient, admin_headers: dict, ports: dict
    ):
        """Test changing a port to a taken UNLOC."""
        response = await client.put(
            f"/api/ports/{ports['Hamburg']['id']}",
            json={"name": "Hamburg", "country": "Germany", "unloc": "NLRTM"},
            headers=admin_headers,
        )
        assert response.status_code == 409

    async def test_delete_unused_port(self, client: AsyncClient, admin_headers: dict, ports: dict):
        """Test deleting a port no route uses."""
        port_id = ports["Qingdao"]["id"]
        response = await client.delete(f"/api/ports/{port_id}", headers=admin_headers)

        assert response.status_code == 200
        assert (await client.get(f"/api/ports/{port_id}")).status_code == 404

    async def test_delete_port_in_use_refused(
        self, client: AsyncClient, admin_headers: dict, ports: dict, service: dict
    ):
        """Test deleting a port still used by a route."""
        port_id = ports["Rotterdam"]["id"]
        response = await client.delete(f"/api/ports/{port_id}", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "PORT_IN_USE"

        still_there = await client.get(f"/api/ports/{port_id}")
        assert still_there.status_code == 200
        route_ports = (await client.get(f"/api/services/{service['id']}")).json()["routes"]
        assert route_ports[0]["podPort"]["id"] == port_id

    async def test_unloc_stored_upper_case(self, client: AsyncClient, admin_headers: dict):
        """UNLOCs are upper-cased on create."""
        response = await client.post(
            "/api/ports/",
            json={"name": "Busan", "country": "South Korea", "unloc": " krpus "},
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["unloc"] == "KRPUS"

    async def test_lower_case_unloc_conflicts_with_existing(
        self, client: AsyncClient, admin_headers: dict, ports: dict
    ):
        """Single create and bulk upload agree that nlrtm and NLRTM are the same port."""
        response = await client.post(
            "/api/ports/",
            json={"name": "Rotterdam Maasvlakte", "country": "Netherlands", "unloc": "nlrtm"},
            headers=admin_headers,
        )

        assert response.status_code == 409


@pytest.mark.api
@pytest.mark.asyncio
class TestPortBulkUpload:
    """Bulk port creation from files and JSON rows."""

    async def test_bulk_csv_counts_duplicates(
        self, client: AsyncClient, admin_headers: dict, ports: dict
    ):
        """Test CSV bulk upload skips existing and repeated UNLOCs."""
        content = (
            "name,country,unloc,latitude,longitude\n"
            "Singapore,Singapore,SGSIN,1.26,103.84\n"
            "Shanghai,China,CNSHA,,\n"
            "Singapore Again,Singapore,sgsin,,\n"
            "Busan,South Korea,KRPUS,35.1,129.04\n"
        ).encode()

        response = await client.post(
            "/api/ports/bulk",
            files={"file": ("ports.csv", content, "text/csv")},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["totalProcessed"] == 4
        assert data["successCount"] == 2
        assert data["duplicateCount"] == 2
        assert data["errorCount"] == 0
        assert len((await client.get("/api/ports/")).json()) == 8

    async def test_bulk_rows_report_errors(self, client: AsyncClient, admin_headers: dict):
        """Test bulk rows with missing fields or bad coordinates."""
        response = await client.post(
            "/api/ports/bulk/rows",
            json=[
                {"name": "Antwerp", "country": "Belgium", "unloc": "BEANR"},
                {"name": "No Country", "unloc": "XXNOC"},
                {"portName": "Bad Coords", "country": "X", "unloc": "XXBAD", "lat": "north"},
            ],
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["successCount"] == 1
        assert data["errorCount"] == 2
        assert data["errors"][0].startswith("Missing required fields")
        assert data["errors"][1] == "Invalid coordinates for port: Bad Coords (XXBAD)"

    async def test_bulk_json_file(self, client: AsyncClient, admin_headers: dict):
        """Test bulk upload from a JSON file."""
        content = json.dumps([
            {"name": "Felixstowe", "country": "United Kingdom", "unloc": "GBFXT"},
        ]).encode()

        response = await client.post(
            "/api/ports/bulk",
            files={"file": ("ports.json", content, "application/json")},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["successCount"] == 1

    async def test_bulk_malformed_file(self, client: AsyncClient, admin_headers: dict):
        """Test bulk upload with an unsupported file."""
        response = await client.post(
            "/api/ports/bulk",
            files={"file": ("ports.txt", b"hello", "text/plain")},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "MALFORMED_FILE"

    async def test_bulk_rows_too_wide_for_columns_are_errors(
        self, client: AsyncClient, admin_headers: dict
    ):
        """Over-length values are reported per row and the valid rows are still created."""
        response = await client.post(
            "/api/ports/bulk/rows",
            json=[
                {"name": "Valencia", "country": "Spain", "unloc": "ESVLC"},
                {"name": "Too Long", "country": "Nowhere", "unloc": "TOOLONGUNLOC1"},
                {"name": "N" * 256, "country": "Nowhere", "unloc": "XXLNG"},
                {"name": "Algeciras", "country": "Spain", "unloc": "ESALG"},
            ],
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["successCount"] == 2
        assert data["errorCount"] == 2
        assert data["errors"][0].startswith("Failed to process port: Too Long (TOOLONGUNLOC1): unloc")
        assert data["errors"][1].startswith("Failed to process port:")
        unlocs = {p["unloc"] for p in (await client.get("/api/ports/")).json()}
        assert unlocs == {"ESVLC", "ESALG"}

    async def test_bulk_stores_unloc_upper_case(self, client: AsyncClient, admin_headers: dict):
        """Bulk rows go through the same UNLOC normalisation as single creates."""
        response = await client.post(
            "/api/ports/bulk/rows",
            json=[{"name": "Piraeus", "country": "Greece", "unloc": "grpir"}],
            headers=admin_headers,
        )

        assert response.json()["successCount"] == 1
        ports = (await client.get("/api/ports/search", params={"q": "Piraeus"})).json()
        assert ports[0]["unloc"] == "GRPIR"
