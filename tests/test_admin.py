from conftest import auth_header, make_review

from happylunch import models


def test_admin_routes_require_admin(client, user):
    response = client.get("/api/admin/users", headers=auth_header(user))
    assert response.status_code == 403
    assert client.get("/api/admin/users").status_code == 401


def test_list_and_search_users(client, user, other_user, admin):
    headers = auth_header(admin)
    body = client.get("/api/admin/users", headers=headers).json()
    assert body["pagination"]["total"] == 3

    body = client.get("/api/admin/users", headers=headers, params={"search": "bob"}).json()
    assert [u["email"] for u in body["users"]] == ["bob@example.com"]

    body = client.get("/api/admin/users", headers=headers, params={"role": "admin"}).json()
    assert [u["id"] for u in body["users"]] == [admin.id]


def test_block_and_unblock(client, user, admin):
    headers = auth_header(admin)
    response = client.put(f"/api/admin/users/{user.id}/block", headers=headers)
    assert response.status_code == 200
    assert response.json()["user"]["is_blocked"] is True

    response = client.post("/api/auth/login", json={"email": user.email, "password": "password123"})
    assert response.status_code == 403
    assert response.json()["message"] == "Account is blocked"

    client.put(f"/api/admin/users/{user.id}/unblock", headers=headers)
    response = client.post("/api/auth/login", json={"email": user.email, "password": "password123"})
    assert response.status_code == 200


def test_admin_cannot_target_self(client, admin):
    headers = auth_header(admin)
    response = client.put(f"/api/admin/users/{admin.id}/block", headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot block yourself"

    response = client.put(f"/api/admin/users/{admin.id}/role", headers=headers, json={"role": "user"})
    assert response.json()["message"] == "Cannot change your own role"

    response = client.delete(f"/api/admin/users/{admin.id}", headers=headers)
    assert response.json()["message"] == "Cannot delete yourself"


def test_change_role_and_delete(client, db, user, admin, restaurant):
    headers = auth_header(admin)
    response = client.put(f"/api/admin/users/{user.id}/role", headers=headers, json={"role": "admin"})
    assert response.json()["user"]["role"] == "admin"

    make_review(db, user, restaurant)
    assert client.delete(f"/api/admin/users/{user.id}", headers=headers).status_code == 200
    assert client.get(f"/api/admin/users/{user.id}", headers=headers).status_code == 404
    assert db.query(models.Review).count() == 0


def test_missing_user(client, admin):
    response = client.put("/api/admin/users/999/unblock", headers=auth_header(admin))
    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


def test_review_moderation_queue(client, db, user, admin, restaurant):
    pending = make_review(db, user, restaurant, status="pending")
    make_review(db, user, restaurant, status="approved")
    headers = auth_header(admin)

    body = client.get("/api/admin/reviews", headers=headers, params={"status": "pending"}).json()
    assert [r["id"] for r in body["reviews"]] == [pending.id]

    response = client.put(f"/api/admin/reviews/{pending.id}/status", headers=headers, json={"status": "rejected"})
    assert response.json()["message"] == "Review rejected successfully"

    response = client.put(f"/api/admin/reviews/{pending.id}/status", headers=headers, json={"status": "bogus"})
    assert response.status_code == 400

    assert client.delete(f"/api/admin/reviews/{pending.id}", headers=headers).status_code == 200
    assert client.delete(f"/api/admin/reviews/{pending.id}", headers=headers).status_code == 404


def test_menu_item_management(client, admin, restaurant):
    headers = auth_header(admin)
    response = client.post("/api/admin/menu-items", headers=headers, json={
        "restaurant_id": restaurant.id,
        "name": "Bun Cha",
        "price": "45000.50",
    })
    assert response.status_code == 201
    item = response.json()["menu_item"]
    assert item["price"] == 45000.5
    assert item["restaurant"]["name"] == "Pho 24"

    response = client.put(f"/api/admin/menu-items/{item['id']}", headers=headers, json={"price": 50000})
    assert response.json()["menu_item"]["price"] == 50000

    body = client.get("/api/admin/menu-items", headers=headers, params={"search": "bun"}).json()
    assert [i["id"] for i in body["menu_items"]] == [item["id"]]

    assert client.delete(f"/api/admin/menu-items/{item['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/admin/menu-items/{item['id']}", headers=headers).status_code == 404


def test_menu_item_for_unknown_restaurant(client, admin):
    response = client.post("/api/admin/menu-items", headers=auth_header(admin), json={
        "restaurant_id": 999,
        "name": "Ghost dish",
        "price": 1,
    })
    assert response.status_code == 404


def test_stats(client, db, user, other_user, admin, restaurant):
    make_review(db, user, restaurant, rating=4, status="approved")
    make_review(db, other_user, restaurant, rating=2, status="pending")
    db.add(models.Favorite(user_id=user.id, restaurant_id=restaurant.id))
    db.add(models.MenuItem(restaurant_id=restaurant.id, name="Pho Bo", price=50000))
    db.commit()
    client.put(f"/api/admin/users/{other_user.id}/block", headers=auth_header(admin))
    headers = auth_header(admin)

    users = client.get("/api/admin/stats/users", headers=headers).json()["stats"]
    assert users == {"total": 3, "active": 2, "blocked": 1, "admins": 1}

    reviews = client.get("/api/admin/stats/reviews", headers=headers).json()["stats"]
    assert reviews["total"] == 2
    assert reviews["average_rating"] == 3.0
    assert reviews["by_status"] == {"pending": 1, "approved": 1, "rejected": 0}

    menu = client.get("/api/admin/stats/menu", headers=headers).json()["stats"]
    assert menu["total"] == 1
    assert menu["top_restaurants"][0]["menu_item_count"] == 1

    favorites = client.get("/api/admin/stats/favorites", headers=headers).json()["stats"]
    assert favorites["total"] == 1
    assert favorites["most_favorited"][0]["restaurant"]["id"] == restaurant.id


def test_deleting_user_refreshes_restaurant_rating(client, user, other_user, admin, restaurant):
    for author, rating in ((user, 5), (other_user, 1)):
        review_id = client.post("/api/reviews", headers=auth_header(author), json={
            "restaurant_id": restaurant.id, "rating": rating,
        }).json()["review"]["id"]
        client.put(f"/api/admin/reviews/{review_id}/status", headers=auth_header(admin), json={"status": "approved"})
    assert client.get(f"/api/restaurants/{restaurant.id}").json()["restaurant"]["rating"] == 3.0

    assert client.delete(f"/api/admin/users/{other_user.id}", headers=auth_header(admin)).status_code == 200

    body = client.get(f"/api/restaurants/{restaurant.id}").json()["restaurant"]
    assert [r["rating"] for r in body["reviews"]] == [5]
    assert body["rating"] == 5.0
