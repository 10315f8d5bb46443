import pytest
from datetime import datetime, timezone
from types import SimpleNamespace
from sqlalchemy import update

from fleetquote.models.parameters import SystemParameters


@pytest.fixture
def webhooks(monkeypatch):
    sent = []

    async def fake_send_webhook(payload, retries=None):
        sent.append(payload)
        return True

    monkeypatch.setattr("fleetquote.api.quotations.send_webhook", fake_send_webhook)
    return sent


def _quotation_payload(vehicle, route, **overrides):
    payload = {
        "vehicle_id": vehicle.id,
        "route": route,
        "client_name": "Colegio Americano",
        "group_size": 25,
    }
    payload.update(overrides)
    return payload


async def _create(client, headers, vehicle, route, **overrides):
    response = await client.post("/quotations/", json=_quotation_payload(vehicle, route, **overrides), headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


async def _update_active_parameters(client, headers, changes):
    listing = await client.get("/parameters/", headers=headers)
    (active,) = [p["id"] for p in listing.json() if p["is_active"]]
    response = await client.put(f"/parameters/{active}", json=changes, headers=headers)
    assert response.status_code == 200, response.text


class TestQuotationCreation:

    @pytest.mark.asyncio
    async def test_create_prices_with_active_parameters(self, test_client, agent_headers, vehicle, route_payload):
        body = await _create(test_client, agent_headers, vehicle, route_payload)

        assert body["status"] == "draft"
        assert body["quotation_number"] == f"QT-{datetime.now(timezone.utc).year}-0001"
        assert body["exchange_rate_used"] == 24.80
        assert body["selected_markup"] == 15
        assert body["total_cost"] == body["costs"]["total"]
        # San Pedro Sula to La Ceiba and back, plus the exit toll
        assert body["costs"]["tolls"]["total"] == 250.0
        assert body["costs"]["vehicle"]["total"] == 1950.0

        recommended = [o for o in body["pricing_options"] if o["recommended"]][0]
        assert body["sale_price_hnl"] == recommended["sale_price_hnl"]
        assert body["sale_price_usd"] == recommended["sale_price_usd"]
        assert body["profit"]["amount"] == pytest.approx(body["sale_price_hnl"] - body["total_cost"], abs=0.01)
        assert body["valid_until"] is not None

    @pytest.mark.asyncio
    async def test_numbers_are_sequential_per_tenant(self, test_client, agent_headers, vehicle, route_payload):
        first = await _create(test_client, agent_headers, vehicle, route_payload)
        second = await _create(test_client, agent_headers, vehicle, route_payload)
        assert first["quotation_number"].endswith("-0001")
        assert second["quotation_number"].endswith("-0002")

    @pytest.mark.asyncio
    async def test_number_not_reused_after_delete(self, test_client, agent_headers, vehicle, route_payload):
        first = await _create(test_client, agent_headers, vehicle, route_payload)
        second = await _create(test_client, agent_headers, vehicle, route_payload)
        await test_client.delete(f"/quotations/{first['id']}", headers=agent_headers)

        third = await _create(test_client, agent_headers, vehicle, route_payload)
        assert third["quotation_number"] != second["quotation_number"]
        assert third["quotation_number"].endswith("-0003")

    @pytest.mark.asyncio
    async def test_explicit_markup(self, test_client, agent_headers, vehicle, route_payload):
        body = await _create(test_client, agent_headers, vehicle, route_payload, markup=25)
        assert body["selected_markup"] == 25
        assert body["profit"]["percentage"] > 15

    @pytest.mark.asyncio
    async def test_unknown_markup(self, test_client, agent_headers, vehicle, route_payload):
        response = await test_client.post(
            "/quotations/", json=_quotation_payload(vehicle, route_payload, markup=17), headers=agent_headers
        )
        assert response.status_code == 422
        assert response.json()["field"] == "markup"

    @pytest.mark.asyncio
    async def test_pricing_level_discount(self, test_client, agent_headers, vehicle, route_payload):
        standard = await _create(test_client, agent_headers, vehicle, route_payload)
        vip = await _create(test_client, agent_headers, vehicle, route_payload, pricing_level="vip")

        assert vip["discount_percentage"] == 10
        assert vip["sale_price_hnl"] == pytest.approx(standard["sale_price_hnl"] * 0.9, abs=0.01)
        assert vip["total_cost"] == standard["total_cost"]

    @pytest.mark.asyncio
    async def test_default_pricing_level_applies(self, test_client, admin_headers, agent_headers, vehicle, route_payload):
        plain = await _create(test_client, agent_headers, vehicle, route_payload)
        await _update_active_parameters(test_client, admin_headers, {
            "pricing_levels": [
                {"key": "standard", "name": "Standard", "discount_percentage": 0},
                {"key": "partner", "name": "Partner", "discount_percentage": 5, "is_default": True},
            ]
        })

        body = await _create(test_client, agent_headers, vehicle, route_payload)
        assert body["discount_percentage"] == 5
        assert body["sale_price_hnl"] == pytest.approx(plain["sale_price_hnl"] * 0.95, abs=0.01)

    @pytest.mark.asyncio
    async def test_custom_exchange_rate_flag(self, test_client, admin_headers, agent_headers, vehicle, route_payload):
        await _update_active_parameters(test_client, admin_headers, {"exchange_rate": 30.0})
        official = await _create(test_client, agent_headers, vehicle, route_payload)
        assert official["exchange_rate_used"] == 24.80

        await _update_active_parameters(test_client, admin_headers, {"use_custom_exchange_rate": True})
        custom = await _create(test_client, agent_headers, vehicle, route_payload)
        assert custom["exchange_rate_used"] == 30.0
        assert custom["sale_price_hnl"] == official["sale_price_hnl"]
        assert custom["sale_price_usd"] < official["sale_price_usd"]

    @pytest.mark.asyncio
    async def test_unknown_pricing_level(self, test_client, agent_headers, vehicle, route_payload):
        response = await test_client.post(
            "/quotations/", json=_quotation_payload(vehicle, route_payload, pricing_level="gold"), headers=agent_headers
        )
        assert response.status_code == 422
        assert response.json()["field"] == "pricing_level"

    @pytest.mark.asyncio
    async def test_group_over_capacity(self, test_client, agent_headers, vehicle, route_payload):
        response = await test_client.post(
            "/quotations/", json=_quotation_payload(vehicle, route_payload, group_size=31), headers=agent_headers
        )
        assert response.status_code == 422
        assert response.json()["field"] == "group_size"

    @pytest.mark.asyncio
    async def test_no_active_parameters(self, test_client, db_session, agent_headers, vehicle, route_payload):
        await db_session.execute(update(SystemParameters).values(is_active=False))
        await db_session.commit()

        response = await test_client.post(
            "/quotations/", json=_quotation_payload(vehicle, route_payload), headers=agent_headers
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_other_tenant_vehicle(self, test_client, other_admin_headers, vehicle, route_payload):
        response = await test_client.post(
            "/quotations/", json=_quotation_payload(vehicle, route_payload), headers=other_admin_headers
        )
        assert response.status_code == 404


class TestQuotationAccess:

    @pytest.mark.asyncio
    async def test_agents_only_see_their_own(
        self, test_client, agent_headers, agent_2_headers, admin_headers, vehicle, route_payload
    ):
        mine = await _create(test_client, agent_headers, vehicle, route_payload)

        response = await test_client.get(f"/quotations/{mine['id']}", headers=agent_2_headers)
        assert response.status_code == 403

        listing = await test_client.get("/quotations/", headers=agent_2_headers)
        assert listing.json() == []

        admin_listing = await test_client.get("/quotations/", headers=admin_headers)
        assert [q["id"] for q in admin_listing.json()] == [mine["id"]]

    @pytest.mark.asyncio
    async def test_other_tenant_gets_not_found(self, test_client, agent_headers, other_admin_headers, vehicle, route_payload):
        mine = await _create(test_client, agent_headers, vehicle, route_payload)
        response = await test_client.get(f"/quotations/{mine['id']}", headers=other_admin_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_status_filter(self, test_client, agent_headers, vehicle, route_payload, webhooks):
        first = await _create(test_client, agent_headers, vehicle, route_payload)
        await _create(test_client, agent_headers, vehicle, route_payload)
        await test_client.put(f"/quotations/{first['id']}", json={"status": "sent"}, headers=agent_headers)

        sent = await test_client.get("/quotations/", params={"status": "sent"}, headers=agent_headers)
        assert [q["id"] for q in sent.json()] == [first["id"]]

    @pytest.mark.asyncio
    async def test_delete(self, test_client, agent_headers, vehicle, route_payload):
        mine = await _create(test_client, agent_headers, vehicle, route_payload)
        response = await test_client.delete(f"/quotations/{mine['id']}", headers=agent_headers)
        assert response.json() == {"deleted": True}
        response = await test_client.get(f"/quotations/{mine['id']}", headers=agent_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_only_drafts_can_be_deleted(self, test_client, agent_headers, vehicle, route_payload, webhooks):
        mine = await _create(test_client, agent_headers, vehicle, route_payload)
        await test_client.put(f"/quotations/{mine['id']}", json={"status": "sent"}, headers=agent_headers)
        await test_client.put(f"/quotations/{mine['id']}", json={"status": "approved"}, headers=agent_headers)

        response = await test_client.delete(f"/quotations/{mine['id']}", headers=agent_headers)
        assert response.status_code == 409
        assert response.json()["detail"] == "Only draft quotations can be deleted"

        response = await test_client.get(f"/quotations/{mine['id']}", headers=agent_headers)
        assert response.json()["status"] == "approved"


class TestQuotationLifecycle:

    @pytest.mark.asyncio
    async def test_send_then_approve_notifies(self, test_client, agent_headers, vehicle, route_payload, webhooks):
        mine = await _create(test_client, agent_headers, vehicle, route_payload)

        sent = await test_client.put(f"/quotations/{mine['id']}", json={"status": "sent"}, headers=agent_headers)
        assert sent.status_code == 200
        approved = await test_client.put(f"/quotations/{mine['id']}", json={"status": "approved"}, headers=agent_headers)
        assert approved.json()["status"] == "approved"

        assert [w["status"] for w in webhooks] == ["sent", "approved"]
        assert webhooks[0]["quotation_number"] == mine["quotation_number"]

    @pytest.mark.asyncio
    async def test_terminal_status_is_final(self, test_client, agent_headers, vehicle, route_payload, webhooks):
        mine = await _create(test_client, agent_headers, vehicle, route_payload)
        await test_client.put(f"/quotations/{mine['id']}", json={"status": "sent"}, headers=agent_headers)
        await test_client.put(f"/quotations/{mine['id']}", json={"status": "rejected"}, headers=agent_headers)

        response = await test_client.put(f"/quotations/{mine['id']}", json={"status": "draft"}, headers=agent_headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_draft_cannot_jump_to_approved(self, test_client, agent_headers, vehicle, route_payload, webhooks):
        mine = await _create(test_client, agent_headers, vehicle, route_payload)
        response = await test_client.put(f"/quotations/{mine['id']}", json={"status": "approved"}, headers=agent_headers)
        assert response.status_code == 400
        assert webhooks == []

    @pytest.mark.asyncio
    async def test_notes_update_without_status(self, test_client, agent_headers, vehicle, route_payload, webhooks):
        mine = await _create(test_client, agent_headers, vehicle, route_payload)
        response = await test_client.put(
            f"/quotations/{mine['id']}", json={"notes": "Pick up at hotel lobby"}, headers=agent_headers
        )
        assert response.json()["notes"] == "Pick up at hotel lobby"
        assert response.json()["status"] == "draft"
        assert webhooks == []

    @pytest.mark.asyncio
    async def test_recalculate_queues_draft(self, test_client, agent_headers, vehicle, route_payload, monkeypatch):
        queued = []
        monkeypatch.setattr(
            "fleetquote.api.quotations.recalculate_quotation",
            SimpleNamespace(delay=lambda quotation_id: queued.append(quotation_id)),
        )

        mine = await _create(test_client, agent_headers, vehicle, route_payload)
        response = await test_client.post(f"/quotations/{mine['id']}/recalculate", headers=agent_headers)
        assert response.json() == {"status": "queued"}
        assert queued == [mine["id"]]

    @pytest.mark.asyncio
    async def test_recalculate_rejects_sent(self, test_client, agent_headers, vehicle, route_payload, webhooks, monkeypatch):
        monkeypatch.setattr(
            "fleetquote.api.quotations.recalculate_quotation", SimpleNamespace(delay=lambda quotation_id: None)
        )

        mine = await _create(test_client, agent_headers, vehicle, route_payload)
        await test_client.put(f"/quotations/{mine['id']}", json={"status": "sent"}, headers=agent_headers)
        response = await test_client.post(f"/quotations/{mine['id']}/recalculate", headers=agent_headers)
        assert response.status_code == 409
