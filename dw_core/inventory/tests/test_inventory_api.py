import pytest

from dw_core.assets.models import Asset
from dw_core.common.models import IdempotencyRecord
from dw_core.inventory.models import InventoryItem, StockMovement

pytestmark = pytest.mark.django_db

URL = "/api/v1/inventory/"


def _item(api_client, headers, **overrides):
    payload = {"sku": "LAP-001", "name": "Latitude 5440", "category": "Hardware", "quantity": 5, "reorder_point": 2}
    payload.update(overrides)
    res = api_client.post(URL, payload, format="json", **headers)
    assert res.status_code == 201, res.content
    return res.json()


def _deploy_payload(**overrides):
    payload = {"asset_name": "WKS-07", "client": "Acme Corp", "asset_type": "Workstation"}
    payload.update(overrides)
    return payload


def test_create_records_initial_stock_movement(api_client, headers):
    created = _item(api_client, headers, unit_cost="100.00")
    assert created["owner"] == "MSP"
    assert created["total_value"] == "500.00"

    moves = list(StockMovement.objects.filter(inventory_item_id=created["id"]))
    assert len(moves) == 1
    assert moves[0].movement_type == "in"
    assert moves[0].new_quantity == 5


def test_adjust_to_below_reorder_point_shows_in_low_stock(api_client, headers):
    created = _item(api_client, headers)

    res = api_client.post(f"{URL}{created['id']}/adjust/", {"quantity": 1, "reason": "Cycle count"},
                          format="json", **headers)
    assert res.status_code == 200, res.content
    assert res.json()["quantity"] == 1

    low = api_client.get(URL + "low-stock/", **headers).json()["results"]
    assert [r["id"] for r in low] == [created["id"]]

    move = StockMovement.objects.filter(inventory_item_id=created["id"], movement_type="adjustment").get()
    assert (move.previous_quantity, move.new_quantity, move.quantity) == (5, 1, 4)
    assert move.reason == "Cycle count"
    assert move.performed_by == "testuser"


def test_adjust_requires_reason(api_client, headers):
    created = _item(api_client, headers)
    res = api_client.post(f"{URL}{created['id']}/adjust/", {"quantity": 3}, format="json", **headers)
    assert res.status_code == 400
    assert res.json()["code"] == "validation_error"


def test_deploy_asset_with_zero_stock_is_404_and_writes_nothing(api_client, headers):
    created = _item(api_client, headers, quantity=0)

    res = api_client.post(f"{URL}{created['id']}/deploy-asset/", _deploy_payload(), format="json", **headers)
    assert res.status_code == 404
    assert res.json()["error"] == "Inventory item not found or out of stock"

    assert Asset.objects.count() == 0
    assert InventoryItem.objects.get(id=created["id"]).quantity == 0
    assert not StockMovement.objects.filter(movement_type="deployment").exists()


def test_deploy_asset_creates_linked_asset(api_client, headers):
    api_client.post("/api/v1/settings/asset-settings/initialize/", {}, format="json", **headers)
    created = _item(
        api_client,
        headers,
        unit_cost="1000.00",
        serial_numbers=["SN-1", "SN-2"],
        purchase_info={"purchase_date": "2025-03-01", "vendor": "Dell"},
        warranty_info={"end_date": "2028-03-01"},
    )

    res = api_client.post(f"{URL}{created['id']}/deploy-asset/", _deploy_payload(), format="json", **headers)
    assert res.status_code == 201, res.content
    body = res.json()

    assert body["message"] == "Inventory item deployed as asset successfully"
    assert body["inventory_item"]["quantity"] == 4
    assert body["inventory_item"]["deployment_history"][0]["deployed_to"] == "Asset: WKS-07"

    asset = body["asset"]
    assert asset["status"] == "Online"
    assert asset["category"] == "Workstations"
    assert asset["sku"] == "LAP-001"
    assert asset["purchase_date"] == "2025-03-01"
    assert asset["warranty_expiration"] == "2028-03-01"
    assert asset["specifications"]["serial_number"] == "SN-1"
    assert asset["depreciation"]["annual_depreciation"] == 250.0
    assert asset["source_inventory_item"] == created["id"]

    move = StockMovement.objects.get(movement_type="deployment")
    assert (move.previous_quantity, move.new_quantity) == (5, 4)


def test_deploy_asset_replay_with_same_key_does_not_decrement_twice(api_client, headers):
    created = _item(api_client, headers)
    url = f"{URL}{created['id']}/deploy-asset/"

    first = api_client.post(url, _deploy_payload(), format="json", HTTP_IDEMPOTENCY_KEY="dep-1", **headers)
    second = api_client.post(url, _deploy_payload(), format="json", HTTP_IDEMPOTENCY_KEY="dep-1", **headers)

    assert first.status_code == 201
    assert second.status_code == 201
    assert second.json()["asset"]["id"] == first.json()["asset"]["id"]
    assert InventoryItem.objects.get(id=created["id"]).quantity == 4
    assert Asset.objects.count() == 1

    record = IdempotencyRecord.objects.get(idempotency_key="dep-1")
    assert record.is_pending is False
    assert record.status_code == 201


def test_deploy_asset_with_key_in_flight_is_409_and_writes_nothing(api_client, headers, user, organization):
    created = _item(api_client, headers)
    url = f"{URL}{created['id']}/deploy-asset/"
    IdempotencyRecord.objects.create(
        org_id=organization.id, user_id=user.id, method="POST", path=url,
        idempotency_key="dep-2", is_pending=True, status_code=0,
    )

    res = api_client.post(url, _deploy_payload(), format="json", HTTP_IDEMPOTENCY_KEY="dep-2", **headers)
    assert res.status_code == 409
    assert res.json()["code"] == "conflict"
    assert InventoryItem.objects.get(id=created["id"]).quantity == 5
    assert Asset.objects.count() == 0


def test_failed_deploy_releases_the_key(api_client, headers):
    created = _item(api_client, headers)
    url = f"{URL}{created['id']}/deploy-asset/"

    res = api_client.post(url, _deploy_payload(client=" "), format="json", HTTP_IDEMPOTENCY_KEY="dep-3", **headers)
    assert res.status_code == 400
    assert not IdempotencyRecord.objects.filter(idempotency_key="dep-3").exists()

    res = api_client.post(url, _deploy_payload(), format="json", HTTP_IDEMPOTENCY_KEY="dep-3", **headers)
    assert res.status_code == 201
    assert InventoryItem.objects.get(id=created["id"]).quantity == 4


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"asset_name": ""}, "Asset name is required"),
        ({"client": "  "}, "Client is required"),
        ({"asset_type": "Laptop"}, "Valid asset type is required (Server, Workstation, Network, Printer)"),
    ],
)
def test_deploy_asset_validation(api_client, headers, overrides, message):
    created = _item(api_client, headers)
    res = api_client.post(f"{URL}{created['id']}/deploy-asset/", _deploy_payload(**overrides), format="json", **headers)
    assert res.status_code == 400
    assert res.json()["error"] == message
    assert InventoryItem.objects.get(id=created["id"]).quantity == 5


def test_deploy_to_client_without_asset(api_client, headers):
    created = _item(api_client, headers, quantity=1)

    res = api_client.post(f"{URL}{created['id']}/deploy/", {"deployed_to": "Initech"}, format="json", **headers)
    assert res.status_code == 200, res.content
    assert res.json()["quantity"] == 0
    assert Asset.objects.count() == 0

    out = api_client.get(URL + "out-of-stock/", **headers).json()["results"]
    assert [r["id"] for r in out] == [created["id"]]

    res = api_client.post(f"{URL}{created['id']}/deploy/", {"deployed_to": "Initech"}, format="json", **headers)
    assert res.status_code == 404


def test_quantity_edit_is_ledgered(api_client, headers):
    created = _item(api_client, headers)
    res = api_client.patch(f"{URL}{created['id']}/", {"quantity": 8}, format="json", **headers)
    assert res.status_code == 200

    res = api_client.get(f"{URL}{created['id']}/movements/", **headers)
    assert [m["movement_type"] for m in res.json()] == ["adjustment", "in"]
    assert res.json()[0]["reason"] == "Quantity edited"


def test_filters_and_search(api_client, headers):
    _item(api_client, headers, sku="TON-1", name="Toner", category="Consumable", supplier="CDW")
    _item(api_client, headers, sku="LIC-1", name="Office 365", category="Software License", owner="Initech")

    res = api_client.get(URL + "?category=Consumable", **headers)
    assert [r["sku"] for r in res.json()["results"]] == ["TON-1"]

    res = api_client.get(URL + "?owner=Initech", **headers)
    assert [r["sku"] for r in res.json()["results"]] == ["LIC-1"]

    res = api_client.get(URL + "?search=toner", **headers)
    assert [r["sku"] for r in res.json()["results"]] == ["TON-1"]


def test_stock_flags_accept_numeric_forms(api_client, headers):
    _item(api_client, headers, sku="PLENTY", quantity=50, reorder_point=2)
    _item(api_client, headers, sku="LOW", quantity=1, reorder_point=2)
    _item(api_client, headers, sku="NONE", quantity=0, reorder_point=2)

    def skus(query):
        return sorted(r["sku"] for r in api_client.get(URL + query, **headers).json()["results"])

    assert skus("?low_stock=1") == ["LOW", "NONE"]
    assert skus("?out_of_stock=1") == ["NONE"]
    assert skus("?low_stock=true&out_of_stock=0") == ["LOW", "NONE"]
    assert skus("?low_stock=0") == ["LOW", "NONE", "PLENTY"]


def test_invalid_category_lists_allowed_values(api_client, headers):
    res = api_client.post(URL, {"sku": "X", "name": "X", "category": "Furniture"}, format="json", **headers)
    assert res.status_code == 400
    assert "Hardware, Software License, Consumable, Part" in str(res.json()["details"])


def test_stats(api_client, headers):
    _item(api_client, headers, sku="A", unit_cost="10.00", quantity=1, reorder_point=2)
    _item(api_client, headers, sku="B", unit_cost="30.00", quantity=0, owner="Initech")

    body = api_client.get(URL + "stats/", **headers).json()
    assert body["total_items"] == 2
    assert body["total_value"] == 10.0
    assert body["avg_item_value"] == 5.0
    assert body["categories"] == 1
    assert body["low_stock"] == 2
    assert body["out_of_stock"] == 1
    assert body["msp_owned"] == 1
    assert body["client_owned"] == 1
    assert body["recent_movements"] == 1


def test_readonly_member_cannot_adjust(readonly_client, api_client, headers):
    created = _item(api_client, headers)
    res = readonly_client.post(f"{URL}{created['id']}/adjust/", {"quantity": 1, "reason": "x"},
                               format="json", **headers)
    assert res.status_code == 403
