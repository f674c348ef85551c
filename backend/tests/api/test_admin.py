"""
API tests for admin catalog maintenance endpoints.

Tests:
- POST /api/v1/admin/vehicles, PUT /api/v1/admin/vehicles/{id}
- POST /api/v1/admin/vehicles/import - CSV upload
- POST /api/v1/admin/parts, PUT /api/v1/admin/parts/{id}
- POST /api/v1/admin/parts/{id}/stock
"""

import pytest
from httpx import AsyncClient

from autoparts.core.config import settings


def part_payload(**overrides) -> dict:
    payload = {
        "name": "Triger Seti",
        "brand": "Gates",
        "category": "Motor",
        "price": "1250.00",
        "stock": 4,
        "vehicle_ids": [],
        "year_ranges": [],
    }
    payload.update(overrides)
    return payload


class TestVehicleAdmin:
    """Tests for vehicle create and update."""

    @pytest.mark.asyncio
    async def test_create_with_range(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.post(
            "/api/v1/admin/vehicles",
            json={"brand": "Fiat", "model": "Linea", "start_year": 2007, "end_year": 2015},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["year"] == 2007
        assert data["start_year"] == 2007
        assert data["end_year"] == 2015

    @pytest.mark.asyncio
    async def test_create_with_model_year(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.post(
            "/api/v1/admin/vehicles",
            json={"brand": "Opel", "model": "Astra", "year": 2011, "engine": "1.6"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["start_year"] is None

        listing = await async_client.get("/api/v1/vehicles", params={"brand": "Opel"})
        assert listing.json()["total"] == 1

    @pytest.mark.asyncio
    async def test_create_with_half_range(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.post(
            "/api/v1/admin/vehicles",
            json={"brand": "Fiat", "model": "Linea", "start_year": 2007},
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "ERR_4005"
        assert error["message"] == "Baslangic ve bitis yili birlikte girilmeli."

    @pytest.mark.asyncio
    async def test_create_without_year(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.post(
            "/api/v1/admin/vehicles",
            json={"brand": "Fiat", "model": "Linea"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"]["field"] == "year"

    @pytest.mark.asyncio
    async def test_create_with_blank_brand(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.post(
            "/api/v1/admin/vehicles",
            json={"brand": "", "model": "Linea", "year": 2010},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_create_with_whitespace_brand(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.post(
            "/api/v1/admin/vehicles",
            json={"brand": "   ", "model": "Linea", "year": 2010},
        )

        assert response.status_code == 422

        listing = await async_client.get("/api/v1/vehicles")
        assert listing.json()["total"] == 5

    @pytest.mark.asyncio
    async def test_update(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.put(
            "/api/v1/admin/vehicles/3",
            json={"brand": "Renault", "model": "Clio", "start_year": 2012, "end_year": 2019},
        )

        assert response.status_code == 200
        data = response.json()
        assert (data["year"], data["start_year"], data["end_year"]) == (2012, 2012, 2019)

    @pytest.mark.asyncio
    async def test_update_missing(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.put(
            "/api/v1/admin/vehicles/99",
            json={"brand": "Renault", "model": "Clio", "year": 2012},
        )

        assert response.status_code == 404


class TestVehicleImport:
    """Tests for POST /api/v1/admin/vehicles/import."""

    @pytest.mark.asyncio
    async def test_import_appends(self, async_client: AsyncClient, seeded_catalog, vehicles_csv: bytes):
        response = await async_client.post(
            "/api/v1/admin/vehicles/import",
            files={"file": ("araclar.csv", vehicles_csv, "text/csv")},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["imported"] == 2
        assert data["skipped"] == 1
        assert data["deleted_vehicles"] == 0
        assert data["rejected"] == 1
        assert data["errors"] == ["Satir 5: Marka veya model bos."]
        assert data["message"] == "Aktarim tamamlandi. Eklenen: 2, Atlanan: 1. Hatali satir: 1."

        listing = await async_client.get("/api/v1/vehicles", params={"brand": "Dacia"})
        sandero = listing.json()["vehicles"][0]
        assert (sandero["year"], sandero["start_year"], sandero["end_year"]) == (2013, 2013, 2020)

    @pytest.mark.asyncio
    async def test_import_clear_existing(self, async_client: AsyncClient, seeded_catalog, vehicles_csv: bytes):
        response = await async_client.post(
            "/api/v1/admin/vehicles/import",
            files={"file": ("araclar.csv", vehicles_csv, "text/csv")},
            data={"clear_existing": "true"},
        )

        assert response.status_code == 200
        assert response.json()["deleted_vehicles"] == 5

        vehicles = await async_client.get("/api/v1/vehicles")
        assert vehicles.json()["total"] == 2

        part = await async_client.get("/api/v1/parts/11")
        assert part.json()["vehicles"] == []

    @pytest.mark.asyncio
    async def test_import_without_required_columns(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.post(
            "/api/v1/admin/vehicles/import",
            files={"file": ("araclar.csv", b"Marka;Yil\nFiat;2016\n", "text/csv")},
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "ERR_4010"
        assert error["message"] == "CSV basliklari icinde Brand/Marka ve Model alanlari gerekli."
        assert error["details"]["field"] == "file"

    @pytest.mark.asyncio
    async def test_import_with_no_valid_rows(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.post(
            "/api/v1/admin/vehicles/import",
            files={"file": ("araclar.csv", b"Brand,Model,Year\nFiat,,2016\n", "text/csv")},
        )

        assert response.status_code == 400
        details = response.json()["error"]["details"]
        assert details["row_errors"] == ["Satir 2: Marka veya model bos."]

    @pytest.mark.asyncio
    async def test_import_counts_rejections_beyond_error_cap(
        self, async_client: AsyncClient, seeded_catalog, monkeypatch
    ):
        monkeypatch.setattr(settings, "VEHICLE_IMPORT_MAX_ROW_ERRORS", 2)
        lines = ["Brand;Model;Year", "Fiat;Linea;2010"] + [f"Fiat;;{2000 + i}" for i in range(4)]

        response = await async_client.post(
            "/api/v1/admin/vehicles/import",
            files={"file": ("araclar.csv", "\n".join(lines).encode("utf-8"), "text/csv")},
        )

        assert response.status_code == 200
        data = response.json()
        assert len(data["errors"]) == 2
        assert data["rejected"] == 4
        assert data["message"] == "Aktarim tamamlandi. Eklenen: 1, Atlanan: 0. Hatali satir: 4."

    @pytest.mark.asyncio
    async def test_import_empty_file(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.post(
            "/api/v1/admin/vehicles/import",
            files={"file": ("araclar.csv", b"", "text/csv")},
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "CSV dosyasi bos."


class TestPartAdmin:
    """Tests for part create, update and stock."""

    @pytest.mark.asyncio
    async def test_create_part_with_vehicles(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.post(
            "/api/v1/admin/parts",
            json=part_payload(
                vehicle_ids=[3, 1],
                year_ranges=[None, {"start_year": 2017, "end_year": 2019}],
            ),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["condition"] == "Sıfır"
        assert sorted(v["id"] for v in data["vehicles"]) == [1, 3]

        listing = await async_client.get("/api/v1/parts", params={"brand": "Fiat", "year": 2017})
        assert data["id"] in [p["id"] for p in listing.json()]

        egea = await async_client.get("/api/v1/vehicles/1")
        assert (egea.json()["start_year"], egea.json()["end_year"]) == (2017, 2019)

    @pytest.mark.asyncio
    async def test_create_part_with_unknown_vehicle(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.post(
            "/api/v1/admin/parts",
            json=part_payload(vehicle_ids=[1, 99]),
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "ERR_1001"
        assert error["details"]["missing_vehicle_ids"] == [99]

    @pytest.mark.asyncio
    async def test_create_part_with_blank_name(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.post("/api/v1/admin/parts", json=part_payload(name="   "))

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_create_part_with_negative_price(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.post("/api/v1/admin/parts", json=part_payload(price="-1"))

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_create_part_with_negative_year_range(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.post(
            "/api/v1/admin/parts",
            json=part_payload(vehicle_ids=[1], year_ranges=[{"start_year": -5, "end_year": -1}]),
        )

        assert response.status_code == 422

        egea = await async_client.get("/api/v1/vehicles/1")
        assert (egea.json()["start_year"], egea.json()["end_year"]) == (2016, 2020)

    @pytest.mark.asyncio
    async def test_update_part_reconciles_links(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.put(
            "/api/v1/admin/parts/12",
            json=part_payload(name="Hava Filtresi", brand="Bosch", category="Filtre", price="95.00", vehicle_ids=[5]),
        )

        assert response.status_code == 200
        data = response.json()
        assert [v["id"] for v in data["vehicles"]] == [5]
        assert data["price"] == 95.0

        listing = await async_client.get("/api/v1/parts", params={"brand": "Toyota"})
        assert listing.json() == []

    @pytest.mark.asyncio
    async def test_update_missing_part(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.put("/api/v1/admin/parts/999", json=part_payload())

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "ERR_4004"

    @pytest.mark.asyncio
    async def test_stock_never_negative(self, async_client: AsyncClient, seeded_catalog):
        response = await async_client.post("/api/v1/admin/parts/10/stock", json={"delta": -100})

        assert response.status_code == 200
        assert response.json() == {"id": 10, "stock": 0}

        response = await async_client.post("/api/v1/admin/parts/10/stock", json={"delta": 2})
        assert response.json()["stock"] == 2
