"""
HTTP layer tests
Tests: tenant header, error mapping, booking and payment flows over the API
"""
import pytest
from uuid import uuid4
from fastapi import status


def headers_for(tenant) -> dict:
    return {"X-Tenant-ID": str(tenant.id)}


@pytest.mark.asyncio
class TestApi:
    """End-to-end flows through FastAPI"""

    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_tenant_header_required(self, client):
        response = await client.get("/api/v1/resources/")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

        response = await client.get("/api/v1/resources/", headers={"X-Tenant-ID": "not-a-uuid"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_happy_path(self, client, tenant, notifier):
        headers = headers_for(tenant)

        response = await client.post(
            "/api/v1/resources/", headers=headers, json={"number": 12, "row_label": "A", "category": "standard"}
        )
        assert response.status_code == status.HTTP_201_CREATED
        resource = response.json()

        response = await client.post("/api/v1/reservations/", headers=headers, json={
            "user_id": str(uuid4()),
            "resource_id": resource["id"],
            "start_date": "2024-07-01",
            "end_date": "2024-07-03",
            "reservation_type": "daily",
        })
        assert response.status_code == status.HTTP_201_CREATED
        reservation = response.json()
        assert reservation["status"] == "pending"
        assert float(reservation["total_price"]) == 90.0

        response = await client.post(f"/api/v1/reservations/{reservation['id']}/confirm", headers=headers)
        assert response.json()["status"] == "confirmed"

        response = await client.post("/api/v1/payments/", headers=headers, json={
            "reservation_id": reservation["id"],
            "method": "credit_card",
            "amount": "90.00",
        })
        assert response.status_code == status.HTTP_201_CREATED
        payment = response.json()

        response = await client.post(f"/api/v1/payments/{payment['id']}/confirm", headers=headers)
        assert response.status_code == 200
        assert response.json()["status"] == "paid"

        response = await client.get(f"/api/v1/reservations/{reservation['id']}", headers=headers)
        assert response.json()["status"] == "paid"

        response = await client.post(f"/api/v1/reservations/{reservation['id']}/complete", headers=headers)
        assert response.json()["status"] == "completed"

        response = await client.get("/api/v1/reservations/stats", headers=headers)
        assert response.json()["by_status"]["completed"] == 1
        assert float(response.json()["revenue"]) == 90.0

        assert notifier.names() == ["booking_confirmed", "payment_confirmed"]

    async def test_conflict_maps_to_409(self, client, tenant, umbrella):
        headers = headers_for(tenant)
        body = {
            "user_id": str(uuid4()),
            "resource_id": str(umbrella.id),
            "start_date": "2024-07-01",
            "end_date": "2024-07-03",
        }

        assert (await client.post("/api/v1/reservations/", headers=headers, json=body)).status_code == 201

        response = await client.post("/api/v1/reservations/", headers=headers, json=body)
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"] == "DATE_RANGE_CONFLICT"

    async def test_cross_tenant_lookup_is_404(self, client, tenant, other_tenant, umbrella):
        response = await client.get(f"/api/v1/resources/{umbrella.id}", headers=headers_for(other_tenant))
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "RESOURCE_NOT_FOUND"

    async def test_capacity_maps_to_403(self, client, tenant):
        headers = headers_for(tenant)
        batch = {"resources": [{"number": n, "row_label": "A"} for n in range(1, 12)]}

        response = await client.post("/api/v1/resources/batch", headers=headers, json=batch)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"] == "CAPACITY_EXCEEDED"

        response = await client.get("/api/v1/resources/capacity", headers=headers)
        assert response.json() == {"max_resources": 10, "active_resources": 0}

    async def test_amount_mismatch_maps_to_422(self, client, tenant, umbrella):
        headers = headers_for(tenant)
        reservation = (await client.post("/api/v1/reservations/", headers=headers, json={
            "user_id": str(uuid4()),
            "resource_id": str(umbrella.id),
            "start_date": "2024-07-01",
            "end_date": "2024-07-01",
        })).json()

        response = await client.post("/api/v1/payments/", headers=headers, json={
            "reservation_id": reservation["id"],
            "method": "cash",
            "amount": "25.00",
        })
        assert response.status_code == 422
        assert response.json()["error"] == "AMOUNT_MISMATCH"

    async def test_refund_flow(self, client, tenant, umbrella):
        headers = headers_for(tenant)
        reservation = (await client.post("/api/v1/reservations/", headers=headers, json={
            "user_id": str(uuid4()),
            "resource_id": str(umbrella.id),
            "start_date": "2024-07-01",
            "end_date": "2024-07-02",
        })).json()
        payment = (await client.post("/api/v1/payments/", headers=headers, json={
            "reservation_id": reservation["id"],
            "method": "paypal",
            "amount": reservation["total_price"],
        })).json()
        assert payment["is_online"] is True

        response = await client.post(
            f"/api/v1/payments/{payment['id']}/confirm/paypal",
            headers=headers,
            json={"external_reference": "PAYID-42"},
        )
        assert response.json()["external_reference"] == "PAYID-42"

        response = await client.post(
            f"/api/v1/payments/{payment['id']}/refund", headers=headers, json={"reason": "duplicate charge"}
        )
        assert response.json()["status"] == "refunded"

        response = await client.get(f"/api/v1/reservations/{reservation['id']}", headers=headers)
        assert response.json()["status"] == "cancelled"
        assert "Refunded: duplicate charge" in response.json()["notes"]

    async def test_quote_and_available(self, client, tenant, umbrella):
        headers = headers_for(tenant)

        response = await client.get("/api/v1/reservations/quote", headers=headers, params={
            "resource_id": str(umbrella.id),
            "start_date": "2024-07-01",
            "end_date": "2024-07-07",
            "reservation_type": "weekly",
        })
        assert response.status_code == 200
        assert response.json()["days"] == 7
        assert float(response.json()["total_price"]) == 189.0

        response = await client.get("/api/v1/resources/available", headers=headers, params={
            "start_date": "2024-07-01",
            "end_date": "2024-07-07",
        })
        assert [r["id"] for r in response.json()] == [str(umbrella.id)]
