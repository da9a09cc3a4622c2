from decimal import Decimal

from conftest import allow_table_updates, block_table_updates, run
from restaurantos.db import async_session
from restaurantos.services.dashboard import get_dashboard_stats


def _base(world):
    return f"/restaurants/{world.restaurant_id}"


def _place(client, world, table_number, **quantities):
    lines = [{"menu_item_id": world.items[k], "quantity": q} for k, q in quantities.items()]
    resp = client.post("/public/orders", json={"table_number": table_number, "lines": lines})
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


# ---------- Restaurants ----------
def test_my_restaurant_reports_role(client, acting, world):
    for who, role in [("owner", "owner"), ("chef", "chef"), ("waiter", "waiter")]:
        acting["user"] = getattr(world, who)
        body = client.get("/restaurants/mine").json()
        assert body["restaurant"]["id"] == world.restaurant_id
        assert body["role"] == role

    acting["user"] = world.outsider
    assert client.get("/restaurants/mine").status_code == 404


def test_registering_a_restaurant_makes_the_caller_owner(client, acting, world):
    acting["user"] = world.outsider
    resp = client.post("/restaurants", json={"name": "Otto's Diner", "email": "otto@example.com"})
    assert resp.status_code == 201, resp.text
    assert resp.json()["owner_id"] == str(world.outsider.id)

    mine = client.get("/restaurants/mine").json()
    assert mine["restaurant"]["name"] == "Otto's Diner"
    assert mine["role"] == "owner"

    staff = client.get(f"/restaurants/{resp.json()['id']}/staff").json()
    assert [(s["user_id"], s["role"]) for s in staff] == [(str(world.outsider.id), "owner")]


def test_only_managers_update_restaurant_details(client, acting, world):
    acting["user"] = world.waiter
    assert client.get(_base(world)).json()["name"] == "Test Bistro"
    assert client.patch(_base(world), json={"name": "Nope"}).status_code == 403

    acting["user"] = world.owner
    resp = client.patch(_base(world), json={"name": "Bistro Nuovo", "city": "Austin"})
    assert resp.status_code == 200
    assert (resp.json()["name"], resp.json()["city"]) == ("Bistro Nuovo", "Austin")


def test_inactive_restaurant_takes_no_orders(client, acting, world):
    acting["user"] = world.owner
    client.patch(_base(world), json={"is_active": False})

    lines = [{"menu_item_id": world.items["pasta"], "quantity": 1}]
    resp = client.post("/public/orders", json={"table_number": 1, "lines": lines})
    assert resp.status_code == 422


# ---------- Staff ----------
def test_staff_management(client, acting, world):
    base = f"{_base(world)}/staff"

    acting["user"] = world.chef
    assert client.get(base).status_code == 403

    acting["user"] = world.owner
    resp = client.post(base, json={"email": "outsider@example.com", "role": "waiter"})
    assert resp.status_code == 201, resp.text
    assignment_id = resp.json()["id"]

    assert client.post(base, json={"email": "outsider@example.com", "role": "chef"}).status_code == 409
    assert client.post(base, json={"email": "owner@example.com", "role": "admin"}).status_code == 409
    assert client.post(base, json={"email": "nobody@example.com", "role": "chef"}).status_code == 404
    assert client.post(base, json={"email": "chef2@example.com", "role": "owner"}).status_code == 422

    staff = client.get(base).json()
    assert sorted(s["role"] for s in staff) == ["chef", "owner", "waiter", "waiter"]

    owner_assignment = next(s["id"] for s in staff if s["role"] == "owner")
    assert client.patch(f"{base}/{owner_assignment}", json={"role": "chef"}).status_code == 403
    assert client.delete(f"{base}/{owner_assignment}").status_code == 403

    resp = client.patch(f"{base}/{assignment_id}", json={"role": "chef"})
    assert resp.json()["role"] == "chef"

    assert client.delete(f"{base}/{assignment_id}").status_code == 200
    acting["user"] = world.outsider
    assert client.get(f"{_base(world)}/orders").status_code == 403


def test_deactivated_staff_lose_access(client, acting, world):
    acting["user"] = world.owner
    staff = client.get(f"{_base(world)}/staff").json()
    chef_assignment = next(s["id"] for s in staff if s["role"] == "chef")
    client.patch(f"{_base(world)}/staff/{chef_assignment}", json={"is_active": False})

    acting["user"] = world.chef
    assert client.get(f"{_base(world)}/views/kitchen").status_code == 403


# ---------- Tables ----------
def test_table_management(client, acting, world):
    base = f"{_base(world)}/tables"
    acting["user"] = world.owner

    resp = client.post(base, json={"table_number": 9, "capacity": 6})
    assert resp.status_code == 201
    table_id = resp.json()["id"]
    assert resp.json()["is_occupied"] is False

    assert client.post(base, json={"table_number": 1}).status_code == 409
    assert client.post(base, json={"table_number": 0}).status_code == 422
    assert client.patch(f"{base}/{table_id}", json={"table_number": 2}).status_code == 409

    acting["user"] = world.chef
    assert client.post(base, json={"table_number": 10}).status_code == 403
    assert client.delete(f"{base}/{table_id}").status_code == 403

    acting["user"] = world.owner
    assert client.delete(f"{base}/{table_id}").status_code == 200
    assert len(client.get(base).json()) == 8


def test_any_staff_can_free_a_table_but_not_resize_it(client, acting, world):
    _place(client, world, 5, pasta=1)

    acting["user"] = world.waiter
    tables = client.get(f"{_base(world)}/tables").json()
    table = next(t for t in tables if t["table_number"] == 5)
    assert table["is_occupied"] is True

    resp = client.patch(f"{_base(world)}/tables/{table['id']}", json={"is_occupied": False})
    assert resp.status_code == 200
    assert resp.json()["is_occupied"] is False

    resp = client.patch(f"{_base(world)}/tables/{table['id']}", json={"capacity": 10})
    assert resp.status_code == 403


def test_occupancy_retry_endpoint(client, acting, world):
    url = f"{_base(world)}/tables/occupancy/retry"

    acting["user"] = world.waiter
    assert client.post(url).status_code == 403

    acting["user"] = world.owner
    assert client.post(url).json() == {"attempted": 0, "resolved": 0}


def test_order_placed_while_table_updates_fail(client, acting, world):
    run(block_table_updates())
    order_id = _place(client, world, 4, pasta=1)

    acting["user"] = world.owner
    assert client.get(f"{_base(world)}/orders/{order_id}").json()["status"] == "pending"

    url = f"{_base(world)}/tables/occupancy/retry"
    assert client.post(url).json() == {"attempted": 1, "resolved": 0}

    run(allow_table_updates())
    assert client.post(url).json() == {"attempted": 1, "resolved": 1}
    tables = client.get(f"{_base(world)}/tables").json()
    assert [t["table_number"] for t in tables if t["is_occupied"]] == [4]


# ---------- Dashboard ----------
def test_dashboard_stats(client, acting, world):
    first = _place(client, world, 7, pasta=2, soup=1)
    _place(client, world, 3, steak=1)

    acting["user"] = world.owner
    client.post(f"{_base(world)}/orders/{first}/start-cooking")
    client.post(f"{_base(world)}/orders/{first}/mark-ready")
    client.post(f"{_base(world)}/orders/{first}/mark-delivered")

    stats = client.get(f"{_base(world)}/dashboard").json()
    assert Decimal(stats["daily_revenue"]) == Decimal("67.99")
    assert stats["active_orders"] == 1
    assert (stats["occupied_tables"], stats["total_tables"]) == (2, 8)
    assert [o["item_count"] for o in stats["recent_orders"]] == [1, 3]


def test_dashboard_for_quiet_restaurant(world):
    async def scenario():
        async with async_session() as db:
            return await get_dashboard_stats(db, world.restaurant_id)

    stats = run(scenario())
    assert stats.daily_revenue == Decimal("0.00")
    assert stats.active_orders == 0
    assert stats.recent_orders == []
