from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from restaurantos.api import menu_routes
from restaurantos.crud import menu_item as menu_crud
from restaurantos.schemas.menu_item import MenuCategory, MenuItemRead
from restaurantos.services.menu_catalog import (
    MenuFilter,
    MenuValidationError,
    filter_items,
    group_by_category,
    paginate,
    validate_image_upload,
)
from restaurantos.utils import spaces


def _menu(client, restaurant_id, **params):
    return client.get(f"/public/restaurants/{restaurant_id}/menu", params=params)


def test_customer_menu_lists_available_items(client, world):
    body = _menu(client, world.restaurant_id).json()
    assert body["is_fallback"] is False
    assert body["total_items"] == 3
    assert {item["name"] for item in body["items"]} == {"Pasta", "Soup", "Ribeye Steak"}
    assert (body["page"], body["total_pages"]) == (1, 1)


def test_empty_menu_serves_placeholder_items(client):
    body = _menu(client, "restaurant-without-menu").json()
    assert body["is_fallback"] is True
    assert body["total_items"] == 8
    assert all(item["id"].startswith("fallback-") for item in body["items"])
    assert all(item["is_available"] for item in body["items"])


def test_menu_read_error_serves_placeholder_items(client, world, monkeypatch):
    async def broken(*args, **kwargs):
        raise OperationalError("SELECT menu_items", {}, Exception("server closed the connection"))

    monkeypatch.setattr(menu_crud, "get_available_menu_items", broken)
    resp = _menu(client, world.restaurant_id)
    assert resp.status_code == 200
    assert resp.json()["is_fallback"] is True


@pytest.mark.parametrize(
    "params,names",
    [
        ({"q": "STEAK"}, {"Ribeye Steak"}),
        ({"q": "basil"}, {"Soup"}),
        ({"category": "Appetizers"}, {"Soup"}),
        ({"category": ["Appetizers", "Main Courses"]}, {"Soup", "Pasta", "Ribeye Steak"}),
        ({"price_range": "5-10"}, {"Soup", "Pasta"}),
        ({"price_range": "30+"}, {"Ribeye Steak"}),
        ({"price_range": "10-20", "category": "Appetizers"}, set()),
    ],
)
def test_customer_menu_filters(client, world, params, names):
    body = _menu(client, world.restaurant_id, **params).json()
    assert {item["name"] for item in body["items"]} == names


def test_unknown_price_range_is_rejected(client, world):
    resp = _menu(client, world.restaurant_id, price_range="cheap")
    assert resp.status_code == 422
    assert "30+" in resp.json()["detail"]


def test_unknown_category_is_rejected(client, world):
    assert _menu(client, world.restaurant_id, category="Sushi").status_code == 422


def test_paginate_clamps_page():
    items = list(range(25))
    assert paginate(items, 1) == (list(range(12)), 1, 3)
    assert paginate(items, 3) == ([24], 3, 3)
    assert paginate(items, 9) == ([24], 3, 3)
    assert paginate(items, 0)[1] == 1
    assert paginate([], 4) == ([], 1, 1)


def _item(name, category, price, description=None):
    return MenuItemRead(
        id=name, restaurant_id="r1", name=name, description=description,
        price=Decimal(price), category=category,
    )


def test_filter_and_group_without_database():
    items = [
        _item("Tiramisu", "Desserts", "8.50"),
        _item("Bruschetta", "Appetizers", "7.00", "Tomato and basil"),
        _item("Espresso", "Beverages", "3.00"),
    ]
    assert filter_items(items, MenuFilter()) == items
    assert [i.name for i in filter_items(items, MenuFilter(search="tomato"))] == ["Bruschetta"]
    with pytest.raises(MenuValidationError):
        filter_items(items, MenuFilter(price_range="1-2"))

    grouped = group_by_category(items)
    assert [category for category, _ in grouped] == [
        MenuCategory.appetizers,
        MenuCategory.desserts,
        MenuCategory.beverages,
    ]


def test_management_listing_includes_unavailable_items_in_order(client, acting, world):
    acting["user"] = world.chef
    items = client.get(f"/restaurants/{world.restaurant_id}/menu-items").json()
    assert [i["name"] for i in items] == ["Soup", "Pasta", "Ribeye Steak", "Seasonal Special"]

    grouped = client.get(f"/restaurants/{world.restaurant_id}/menu-items/grouped").json()
    assert [g["category"] for g in grouped] == ["Appetizers", "Main Courses", "Specials"]


def test_only_managers_edit_the_menu(client, acting, world):
    new_item = {"name": "Gelato", "price": "6.50", "category": "Desserts", "prep_time": 3}
    base = f"/restaurants/{world.restaurant_id}/menu-items"

    acting["user"] = world.chef
    assert client.post(base, json=new_item).status_code == 403
    assert client.patch(f"{base}/{world.items['pasta']}", json={"price": "1.00"}).status_code == 403

    acting["user"] = world.owner
    created = client.post(base, json=new_item)
    assert created.status_code == 201, created.text
    assert Decimal(created.json()["price"]) == Decimal("6.50")
    assert created.json()["is_available"] is True

    resp = client.patch(f"{base}/{world.items['pasta']}", json={"price": "11.50"})
    assert Decimal(resp.json()["price"]) == Decimal("11.50")

    assert client.post(base, json={**new_item, "price": "-1"}).status_code == 422

    created_id = created.json()["id"]
    assert client.delete(f"{base}/{created_id}").status_code == 200
    assert client.get(f"{base}/{created_id}").status_code == 404


def test_toggling_availability_changes_customer_menu(client, acting, world):
    acting["user"] = world.owner
    resp = client.post(
        f"/restaurants/{world.restaurant_id}/menu-items/{world.items['special']}/toggle-availability"
    )
    assert resp.json()["is_available"] is True

    names = {item["name"] for item in _menu(client, world.restaurant_id).json()["items"]}
    assert "Seasonal Special" in names


@pytest.mark.parametrize(
    "filename,size,message",
    [
        ("menu.gif", 100, "Invalid image type"),
        ("noext", 100, "Invalid image type"),
        ("photo.png", 0, "empty"),
        ("photo.png", 11, "too large"),
    ],
)
def test_image_validation(filename, size, message):
    with pytest.raises(MenuValidationError, match=message):
        validate_image_upload(filename, size, max_bytes=10)


def test_image_validation_normalizes_extension():
    assert validate_image_upload("Photo.JPEG", 10, max_bytes=10) == ".jpeg"


def test_photo_upload_stores_public_url(client, acting, world, monkeypatch):
    uploaded = {}

    async def fake_put(*, key, body, content_type):
        uploaded.update(key=key, body=body, content_type=content_type)
        return f"https://cdn.example.com/{key}"

    monkeypatch.setattr(menu_routes, "put_public_object", fake_put)
    acting["user"] = world.owner
    resp = client.post(
        f"/restaurants/{world.restaurant_id}/menu-items/{world.items['pasta']}/photo",
        files={"photo": ("pasta.PNG", b"\x89PNG fake", "image/png")},
    )
    assert resp.status_code == 200, resp.text
    assert uploaded["body"] == b"\x89PNG fake"
    assert uploaded["key"].endswith(".png")
    assert f"/restaurants/{world.restaurant_id}/menu-items/" in uploaded["key"]
    assert resp.json()["image_url"] == f"https://cdn.example.com/{uploaded['key']}"


def test_photo_upload_rejects_bad_files_and_missing_storage(client, acting, world, monkeypatch):
    acting["user"] = world.owner
    url = f"/restaurants/{world.restaurant_id}/menu-items/{world.items['pasta']}/photo"

    resp = client.post(url, files={"photo": ("pasta.gif", b"GIF89a", "image/gif")})
    assert resp.status_code == 422

    monkeypatch.setattr(spaces, "is_configured", lambda: False)
    resp = client.post(url, files={"photo": ("pasta.jpg", b"\xff\xd8", "image/jpeg")})
    assert resp.status_code == 503


def test_item_on_an_order_cannot_be_deleted(client, acting, world):
    lines = [{"menu_item_id": world.items["soup"], "quantity": 1}]
    assert client.post("/public/orders", json={"table_number": 2, "lines": lines}).status_code == 201

    acting["user"] = world.owner
    url = f"/restaurants/{world.restaurant_id}/menu-items/{world.items['soup']}"
    resp = client.delete(url)
    assert resp.status_code == 409
    assert "unavailable" in resp.json()["detail"]

    # the item is untouched and can still be hidden instead
    assert client.get(url).status_code == 200
    resp = client.post(f"{url}/toggle-availability")
    assert resp.json()["is_available"] is False
