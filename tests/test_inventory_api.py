"""
Tests for the inventory endpoints: envelopes, error mapping and access control.
"""

from datetime import date
from uuid import uuid4

from vaxsync.auth.rbac import UserRole

API = "/api/v1/inventory"


# ── Deduct ────────────────────────────────────────────


async def test_deduct_returns_success_envelope(
    client, nurse_headers, barangay, vaccine, make_lot, fetch_lot
):
    lot = await make_lot(barangay.id, vaccine.id, 20)

    response = await client.post(
        f"{API}/deduct",
        json={
            "barangay_id": str(barangay.id),
            "vaccine_id": str(vaccine.id),
            "quantity_to_deduct": 6,
        },
        headers=nurse_headers,
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {"deducted_records": [{"lot_id": str(lot.id), "amount": 6}]},
    }
    assert (await fetch_lot(lot.id)).quantity_on_hand == 14


async def test_deduct_insufficient_stock_is_409_with_shortfall(
    client, nurse_headers, barangay, vaccine, make_lot, fetch_lot
):
    lot = await make_lot(barangay.id, vaccine.id, 5)

    response = await client.post(
        f"{API}/deduct",
        json={
            "barangay_id": str(barangay.id),
            "vaccine_id": str(vaccine.id),
            "quantity_to_deduct": 10,
        },
        headers=nurse_headers,
    )

    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "insufficient_stock"
    assert body["error"]["shortfall"] == 5
    assert body["error"]["available"] == 5
    assert (await fetch_lot(lot.id)).quantity_on_hand == 5


async def test_deduct_non_positive_quantity_is_400(
    client, nurse_headers, barangay, vaccine, make_lot
):
    await make_lot(barangay.id, vaccine.id, 5)

    response = await client.post(
        f"{API}/deduct",
        json={
            "barangay_id": str(barangay.id),
            "vaccine_id": str(vaccine.id),
            "quantity_to_deduct": 0,
        },
        headers=nurse_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_quantity"


async def test_deduct_unknown_pair_is_404(client, nurse_headers, barangay, vaccine):
    response = await client.post(
        f"{API}/deduct",
        json={
            "barangay_id": str(barangay.id),
            "vaccine_id": str(vaccine.id),
            "quantity_to_deduct": 1,
        },
        headers=nurse_headers,
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "lot_not_found"


async def test_deduct_missing_field_is_422(client, nurse_headers, barangay):
    response = await client.post(
        f"{API}/deduct",
        json={"barangay_id": str(barangay.id), "quantity_to_deduct": 1},
        headers=nurse_headers,
    )

    assert response.status_code == 422


# ── Recalculate reserved ──────────────────────────────


async def test_recalculate_reserved_envelope(
    client, nurse_headers, barangay, vaccine, make_lot
):
    await make_lot(barangay.id, vaccine.id, 30, reserved=11)

    response = await client.post(
        f"{API}/recalculate-reserved",
        json={"barangay_id": str(barangay.id), "vaccine_id": str(vaccine.id)},
        headers=nurse_headers,
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": {"quantity_reserved": 0}}


async def test_health_worker_cannot_recalculate(
    client, headers_for, barangay, vaccine, make_lot
):
    await make_lot(barangay.id, vaccine.id, 30)

    response = await client.post(
        f"{API}/recalculate-reserved",
        json={"barangay_id": str(barangay.id), "vaccine_id": str(vaccine.id)},
        headers=headers_for(UserRole.HEALTH_WORKER, barangay.id),
    )

    assert response.status_code == 403


# ── Auth and scoping ──────────────────────────────────


async def test_missing_token_is_rejected(client, barangay):
    response = await client.get(API, params={"barangay_id": str(barangay.id)})
    assert response.status_code in (401, 403)


async def test_invalid_token_is_401(client, barangay):
    response = await client.get(
        API,
        params={"barangay_id": str(barangay.id)},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401


async def test_health_worker_limited_to_own_barangay(
    client, headers_for, barangay, other_barangay, vaccine, make_lot
):
    await make_lot(barangay.id, vaccine.id, 10)
    await make_lot(other_barangay.id, vaccine.id, 10)
    headers = headers_for(UserRole.HEALTH_WORKER, barangay.id)

    def _payload(barangay_id):
        return {
            "barangay_id": str(barangay_id),
            "vaccine_id": str(vaccine.id),
            "quantity_to_deduct": 2,
        }

    own = await client.post(f"{API}/deduct", json=_payload(barangay.id), headers=headers)
    other = await client.post(f"{API}/deduct", json=_payload(other_barangay.id), headers=headers)

    assert own.status_code == 200
    assert other.status_code == 403

    for path in ("", "/summary", "/low-stock", "/movements"):
        mine = await client.get(
            f"{API}{path}", params={"barangay_id": str(barangay.id)}, headers=headers
        )
        theirs = await client.get(
            f"{API}{path}", params={"barangay_id": str(other_barangay.id)}, headers=headers
        )
        assert mine.status_code == 200, path
        assert theirs.status_code == 403, path


# ── Lots and listings ─────────────────────────────────


async def test_register_lot_in_vials(client, nurse_headers, barangay, vaccine):
    response = await client.post(
        f"{API}/lots",
        json={
            "barangay_id": str(barangay.id),
            "vaccine_id": str(vaccine.id),
            "quantity_vial": 3,
            "batch_number": "PV-2026-118",
            "expiry_date": "2027-03-31",
        },
        headers=nurse_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["quantity_on_hand"] == 30
    assert data["quantity_reserved"] == 0
    assert data["vials_on_hand"] == 3
    assert data["vaccine_name"] == "Pentavalent"

    movements = await client.get(
        f"{API}/movements",
        params={"barangay_id": str(barangay.id), "movement_type": "receipt"},
        headers=nurse_headers,
    )
    assert movements.status_code == 200
    items = movements.json()["items"]
    assert len(items) == 1
    assert items[0]["movement_type"] == "receipt"
    assert items[0]["quantity"] == 30
    assert items[0]["stock_after"] == 30


async def test_register_lot_requires_a_quantity(client, nurse_headers, barangay, vaccine):
    response = await client.post(
        f"{API}/lots",
        json={"barangay_id": str(barangay.id), "vaccine_id": str(vaccine.id)},
        headers=nurse_headers,
    )
    assert response.status_code == 422


async def test_register_lot_doses_must_fit_vials(client, nurse_headers, barangay, vaccine):
    response = await client.post(
        f"{API}/lots",
        json={
            "barangay_id": str(barangay.id),
            "vaccine_id": str(vaccine.id),
            "quantity_dose": 25,
            "quantity_vial": 2,
        },
        headers=nurse_headers,
    )
    assert response.status_code == 422


async def test_register_lot_unknown_vaccine_is_404(client, nurse_headers, barangay):
    response = await client.post(
        f"{API}/lots",
        json={
            "barangay_id": str(barangay.id),
            "vaccine_id": str(uuid4()),
            "quantity_dose": 10,
        },
        headers=nurse_headers,
    )
    assert response.status_code == 404


async def test_list_and_summary(client, nurse_headers, barangay, vaccine, make_lot):
    await make_lot(barangay.id, vaccine.id, 25, reserved=10, expiry_date=date(2027, 1, 1))
    await make_lot(barangay.id, vaccine.id, 8, reserved=12)

    listing = await client.get(
        API, params={"barangay_id": str(barangay.id)}, headers=nurse_headers
    )
    assert listing.status_code == 200
    assert len(listing.json()) == 2

    summary = await client.get(
        f"{API}/summary", params={"barangay_id": str(barangay.id)}, headers=nurse_headers
    )
    assert summary.status_code == 200
    data = summary.json()
    assert data["total_on_hand"] == 33
    assert data["total_reserved"] == 22
    (row,) = data["vaccines"]
    assert row["lots"] == 2
    assert row["quantity_available"] == 11
    assert row["vials_on_hand"] == 4


async def test_low_stock(client, nurse_headers, barangay, vaccine, make_lot):
    low = await make_lot(barangay.id, vaccine.id, 2)
    await make_lot(barangay.id, vaccine.id, 40)

    response = await client.get(
        f"{API}/low-stock",
        params={"barangay_id": str(barangay.id), "threshold": 5},
        headers=nurse_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert [row["lot_id"] for row in data] == [str(low.id)]
    assert data[0]["threshold"] == 5


async def test_movements_reject_unknown_type(client, nurse_headers, barangay):
    response = await client.get(
        f"{API}/movements",
        params={"barangay_id": str(barangay.id), "movement_type": "transfer"},
        headers=nurse_headers,
    )
    assert response.status_code == 422
