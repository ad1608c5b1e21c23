"""
API endpoint tests for menus, ratings, preferences, orders, directory,
profiles, admin and dashboards.
Uses in-memory SQLite + dependency-overridden FastAPI test client.
"""
import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError

from foodsync.database import get_db
from foodsync.main import app
from foodsync.models.menu_item import MenuItem
from foodsync.models.rating import RestaurantRating


@pytest_asyncio.fixture()
async def menu(db_session, seed_data):
    restaurant = seed_data["restaurant"]
    items = [
        MenuItem(restaurant_id=restaurant.id, name="Lentil Soup", price=6.5, is_vegetarian=True, is_vegan=True),
        MenuItem(restaurant_id=restaurant.id, name="Roast Chicken", price=14.0, carbon_footprint=3.2),
        MenuItem(restaurant_id=restaurant.id, name="Truffle Risotto", price=21.0, is_available=False),
        MenuItem(restaurant_id=seed_data["restaurant2"].id, name="Dal Makhani", price=9.0, is_vegetarian=True),
    ]
    db_session.add_all(items)
    await db_session.commit()
    for item in items:
        await db_session.refresh(item)
    return items


# ===================== MENU =====================


async def test_menu_item_round_trip(client, seed_data, auth_headers):
    headers = auth_headers(seed_data["restaurant"])
    r = await client.post("/api/menu/", json={
        "name": "Beetroot Salad",
        "description": "With goat cheese",
        "price": 8.75,
        "is_vegetarian": True,
        "carbon_footprint": 0.4,
    }, headers=headers)
    assert r.status_code == 200
    item_id = r.json()["id"]

    r = await client.get(f"/api/menu/restaurant/{seed_data['restaurant'].id}")
    assert r.status_code == 200
    items = r.json()
    assert len(items) == 1
    assert items[0]["id"] == item_id
    assert items[0]["name"] == "Beetroot Salad"
    assert items[0]["price"] == 8.75
    assert items[0]["is_vegetarian"] is True
    assert items[0]["is_vegan"] is False


async def test_public_menu_available_only(client, menu, seed_data):
    r = await client.get(f"/api/menu/restaurant/{seed_data['restaurant'].id}?available_only=true")
    names = [i["name"] for i in r.json()]
    assert names == ["Lentil Soup", "Roast Chicken"]


async def test_menu_of_non_restaurant(client, seed_data):
    r = await client.get(f"/api/menu/restaurant/{seed_data['ngo'].id}")
    assert r.status_code == 404


async def test_own_menu_includes_unavailable(client, menu, seed_data, auth_headers):
    r = await client.get("/api/menu/", headers=auth_headers(seed_data["restaurant"]))
    assert len(r.json()) == 3


async def test_update_menu_item(client, menu, seed_data, auth_headers):
    r = await client.put(
        f"/api/menu/{menu[2].id}",
        json={"is_available": True, "price": 19.5},
        headers=auth_headers(seed_data["restaurant"]),
    )
    assert r.status_code == 200
    assert r.json()["is_available"] is True
    assert r.json()["price"] == 19.5
    assert r.json()["name"] == "Truffle Risotto"


async def test_cannot_edit_other_restaurants_menu(client, menu, seed_data, auth_headers):
    headers = auth_headers(seed_data["restaurant2"])
    r = await client.put(f"/api/menu/{menu[0].id}", json={"price": 1.0}, headers=headers)
    assert r.status_code == 403
    r = await client.delete(f"/api/menu/{menu[0].id}", headers=headers)
    assert r.status_code == 403


async def test_delete_menu_item(client, menu, seed_data, auth_headers):
    headers = auth_headers(seed_data["restaurant"])
    r = await client.delete(f"/api/menu/{menu[1].id}", headers=headers)
    assert r.status_code == 200
    r = await client.delete(f"/api/menu/{menu[1].id}", headers=headers)
    assert r.status_code == 404


async def test_only_restaurants_own_menus(client, seed_data, auth_headers):
    r = await client.post(
        "/api/menu/",
        json={"name": "Sneaky Dish", "price": 1.0},
        headers=auth_headers(seed_data["ngo"]),
    )
    assert r.status_code == 403


# ===================== RATINGS =====================


async def test_rating_upsert(client, seed_data, auth_headers):
    headers = auth_headers(seed_data["user"])
    restaurant_id = seed_data["restaurant"].id

    r = await client.put(f"/api/ratings/restaurant/{restaurant_id}", json={"rating": 4, "review": "Good"}, headers=headers)
    assert r.status_code == 200
    first_id = r.json()["id"]

    r = await client.put(f"/api/ratings/restaurant/{restaurant_id}", json={"rating": 2}, headers=headers)
    assert r.json()["id"] == first_id
    assert r.json()["rating"] == 2
    assert r.json()["review"] is None

    r = await client.get(f"/api/ratings/restaurant/{restaurant_id}/mine", headers=headers)
    assert r.json()["rating"] == 2

    r = await client.get(f"/api/ratings/restaurant/{restaurant_id}/summary")
    assert r.json() == {"restaurant_id": restaurant_id, "rating_count": 1, "average_rating": 2.0}


@pytest.mark.parametrize("value", [0, 6])
async def test_rating_out_of_range(client, seed_data, auth_headers, value):
    r = await client.put(
        f"/api/ratings/restaurant/{seed_data['restaurant'].id}",
        json={"rating": value},
        headers=auth_headers(seed_data["user"]),
    )
    assert r.status_code == 422


async def test_only_users_rate(client, seed_data, auth_headers):
    r = await client.put(
        f"/api/ratings/restaurant/{seed_data['restaurant'].id}",
        json={"rating": 5},
        headers=auth_headers(seed_data["restaurant2"]),
    )
    assert r.status_code == 403


async def test_rate_unknown_restaurant(client, seed_data, auth_headers):
    r = await client.put(
        f"/api/ratings/restaurant/{seed_data['packing'].id}",
        json={"rating": 5},
        headers=auth_headers(seed_data["user"]),
    )
    assert r.status_code == 404


# ===================== PREFERENCES =====================


async def test_preferences_save_and_read(client, seed_data, auth_headers):
    headers = auth_headers(seed_data["user"])

    r = await client.get("/api/preferences/", headers=headers)
    assert r.status_code == 200
    assert r.json() is None

    r = await client.put("/api/preferences/", json={
        "favorite_foods": "pizza, pasta,,sushi",
        "dietary_restrictions": ["no nuts"],
        "family_members": 3,
        "ac_preference": True,
    }, headers=headers)
    assert r.status_code == 200
    assert r.json()["favorite_foods"] == ["pizza", "pasta", "sushi"]

    r = await client.put("/api/preferences/", json={"favorite_foods": ["ramen"]}, headers=headers)
    data = r.json()
    assert data["favorite_foods"] == ["ramen"]
    assert data["family_members"] is None
    assert data["ac_preference"] is False


async def test_preferences_user_only(client, seed_data, auth_headers):
    r = await client.get("/api/preferences/", headers=auth_headers(seed_data["ngo"]))
    assert r.status_code == 403


# ===================== ORDERS =====================


async def test_place_order_uses_menu_prices(client, menu, seed_data, auth_headers):
    r = await client.post("/api/orders/", json={
        "restaurant_id": seed_data["restaurant"].id,
        "items": [
            {"menu_item_id": menu[0].id, "quantity": 2},
            {"menu_item_id": menu[1].id, "quantity": 1},
        ],
    }, headers=auth_headers(seed_data["user"]))
    assert r.status_code == 200
    data = r.json()
    assert data["total_amount"] == 27.0
    assert data["status"] == "completed"
    assert data["restaurant_name"] == "Green Bistro"
    assert data["items"][0]["total"] == 13.0


async def test_order_rejects_foreign_or_unavailable_items(client, menu, seed_data, auth_headers):
    headers = auth_headers(seed_data["user"])
    restaurant_id = seed_data["restaurant"].id

    # Truffle Risotto is off the menu
    r = await client.post("/api/orders/", json={
        "restaurant_id": restaurant_id, "items": [{"menu_item_id": menu[2].id, "quantity": 1}],
    }, headers=headers)
    assert r.status_code == 422

    # Dal Makhani belongs to Curry House
    r = await client.post("/api/orders/", json={
        "restaurant_id": restaurant_id, "items": [{"menu_item_id": menu[3].id, "quantity": 1}],
    }, headers=headers)
    assert r.status_code == 422

    r = await client.post("/api/orders/", json={"restaurant_id": restaurant_id, "items": []}, headers=headers)
    assert r.status_code == 422


async def test_order_history_and_stats(client, menu, seed_data, auth_headers):
    headers = auth_headers(seed_data["user"])

    r = await client.get("/api/orders/stats", headers=headers)
    assert r.json() == {"total_orders": 0, "total_spent": 0.0, "avg_order_value": 0.0, "favorite_restaurant": None}

    orders = [
        (seed_data["restaurant"].id, menu[0].id),
        (seed_data["restaurant"].id, menu[1].id),
        (seed_data["restaurant2"].id, menu[3].id),
    ]
    for restaurant_id, item_id in orders:
        r = await client.post("/api/orders/", json={
            "restaurant_id": restaurant_id, "items": [{"menu_item_id": item_id, "quantity": 1}],
        }, headers=headers)
        assert r.status_code == 200

    r = await client.get("/api/orders/?limit=2", headers=headers)
    recent = r.json()
    assert len(recent) == 2
    assert recent[0]["restaurant_name"] == "Curry House"

    r = await client.get("/api/orders/stats", headers=headers)
    stats = r.json()
    assert stats["total_orders"] == 3
    assert stats["total_spent"] == 29.5
    assert stats["avg_order_value"] == pytest.approx(9.83)
    assert stats["favorite_restaurant"] == "Green Bistro"


# ===================== DIRECTORY =====================


async def test_explore_restaurants_with_ratings(client, db_session, seed_data, auth_headers):
    db_session.add_all([
        RestaurantRating(user_id=seed_data["user"].id, restaurant_id=seed_data["restaurant"].id, rating=5),
        RestaurantRating(user_id=seed_data["admin"].id, restaurant_id=seed_data["restaurant"].id, rating=4),
    ])
    await db_session.commit()

    r = await client.get("/api/directory/restaurants", headers=auth_headers(seed_data["user"]))
    assert r.status_code == 200
    listings = {row["display_name"]: row for row in r.json()}
    assert set(listings) == {"Green Bistro", "Curry House"}
    assert listings["Green Bistro"]["average_rating"] == 4.5
    assert listings["Green Bistro"]["rating_count"] == 2
    assert listings["Curry House"]["average_rating"] is None


async def test_search_restaurants(client, seed_data, auth_headers):
    r = await client.get("/api/directory/restaurants?search=curry", headers=auth_headers(seed_data["user"]))
    assert [row["display_name"] for row in r.json()] == ["Curry House"]


async def test_restaurant_detail(client, menu, seed_data, auth_headers):
    r = await client.get(
        f"/api/directory/restaurants/{seed_data['restaurant'].id}",
        headers=auth_headers(seed_data["user"]),
    )
    assert r.status_code == 200
    data = r.json()
    assert data["restaurant"]["address"] == "12 Market St"
    assert [i["name"] for i in data["menu"]] == ["Lentil Soup", "Roast Chicken"]
    assert data["ratings"]["rating_count"] == 0


async def test_list_ngos_and_packing_companies(client, seed_data, auth_headers):
    headers = auth_headers(seed_data["restaurant"])
    r = await client.get("/api/directory/ngos", headers=headers)
    assert [row["display_name"] for row in r.json()] == ["Feed the City"]
    assert r.json()[0]["contact_person"] == "Asha"

    r = await client.get("/api/directory/packing-companies", headers=headers)
    assert [row["display_name"] for row in r.json()] == ["BoxIt"]


async def test_directory_requires_login(client, seed_data):
    r = await client.get("/api/directory/ngos")
    assert r.status_code == 401


# ===================== PROFILE =====================


async def test_update_profile(client, seed_data, auth_headers):
    r = await client.put(
        "/api/accounts/me",
        json={"phone_number": "555-0100", "specialty": "Children"},
        headers=auth_headers(seed_data["ngo"]),
    )
    assert r.status_code == 200
    data = r.json()
    assert data["phone_number"] == "555-0100"
    assert data["specialty"] == "Children"
    assert data["display_name"] == "Feed the City"
    assert data["email"] == "ngo@foodsync.test"


# ===================== ADMIN =====================


async def test_admin_lists_accounts(client, seed_data, auth_headers):
    headers = auth_headers(seed_data["admin"])
    r = await client.get("/api/admin/accounts", headers=headers)
    assert r.status_code == 200
    assert len(r.json()) == 6

    r = await client.get("/api/admin/accounts?role=restaurant", headers=headers)
    assert {a["display_name"] for a in r.json()} == {"Green Bistro", "Curry House"}


async def test_admin_creates_admin(client, seed_data, auth_headers):
    r = await client.post("/api/admin/accounts", json={
        "role": "admin", "display_name": "Second Admin", "email": "admin2@foodsync.test", "password": "pass1234",
    }, headers=auth_headers(seed_data["admin"]))
    assert r.status_code == 200
    assert r.json()["verified"] is True

    r = await client.post("/api/auth/login", json={
        "email": "admin2@foodsync.test", "password": "pass1234", "role": "admin",
    })
    assert r.status_code == 200


async def test_admin_toggles_verification(client, seed_data, auth_headers):
    headers = auth_headers(seed_data["admin"])
    ngo_id = seed_data["ngo"].id
    r = await client.put(f"/api/admin/accounts/{ngo_id}/verify", headers=headers)
    assert r.json()["verified"] is True
    r = await client.put(f"/api/admin/accounts/{ngo_id}/verify", headers=headers)
    assert r.json()["verified"] is False

    r = await client.put("/api/admin/accounts/9999/verify", headers=headers)
    assert r.status_code == 404


async def test_non_admin_refused(client, seed_data, auth_headers):
    r = await client.get("/api/admin/accounts", headers=auth_headers(seed_data["restaurant"]))
    assert r.status_code == 403


# ===================== DASHBOARD =====================


async def test_restaurant_dashboard(client, menu, seed_data, auth_headers):
    r = await client.get("/api/dashboard/summary", headers=auth_headers(seed_data["restaurant"]))
    assert r.status_code == 200
    data = r.json()
    assert data["dashboard"] == "/restaurant-dashboard"
    assert data["counts"]["menu_items"] == 3
    assert data["counts"]["pending_food_requests"] == 0


async def test_admin_dashboard_counts_roles(client, seed_data, auth_headers):
    r = await client.get("/api/dashboard/summary", headers=auth_headers(seed_data["admin"]))
    counts = r.json()["counts"]
    assert counts["restaurant_accounts"] == 2
    assert counts["ngo_accounts"] == 1
    assert counts["admin_accounts"] == 1


# ===================== RECORD STORE ERRORS =====================


class BrokenSession:
    async def get(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))


async def test_store_error_returns_generic_500(client):
    async def broken_db():
        yield BrokenSession()

    app.dependency_overrides[get_db] = broken_db
    r = await client.get("/api/menu/restaurant/1")
    assert r.status_code == 500
    assert r.json() == {"detail": "Record store error, please try again"}
