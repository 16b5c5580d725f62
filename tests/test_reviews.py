from conftest import auth_header, make_review

from happylunch import models


def post_review(client, user, restaurant, rating=4, **fields):
    return client.post("/api/reviews", headers=auth_header(user), json=dict(
        restaurant_id=restaurant.id, rating=rating, **fields
    ))


def set_status(client, admin, review_id, status):
    return client.put(f"/api/admin/reviews/{review_id}/status", headers=auth_header(admin), json={"status": status})


def restaurant_rating(client, restaurant):
    return client.get(f"/api/restaurants/{restaurant.id}").json()["restaurant"]["rating"]


def test_create_review_starts_pending(client, user, restaurant):
    response = post_review(client, user, restaurant, comment="  Great broth  ", dish_names=["Pho Bo"])
    assert response.status_code == 201
    review = response.json()["review"]
    assert review["status"] == "pending"
    assert review["comment"] == "Great broth"
    assert review["dish_names"] == ["Pho Bo"]
    assert review["user"]["name"] == "Alice"
    assert review["restaurant"]["name"] == "Pho 24"
    assert review["like_count"] == 0


def test_create_review_requires_login(client, restaurant):
    response = client.post("/api/reviews", json={"restaurant_id": restaurant.id, "rating": 5})
    assert response.status_code == 401


def test_create_review_unknown_restaurant(client, user):
    response = client.post("/api/reviews", headers=auth_header(user), json={"restaurant_id": 404, "rating": 3})
    assert response.status_code == 404
    assert response.json()["message"] == "Restaurant not found"


def test_rating_out_of_range(client, user, restaurant):
    response = post_review(client, user, restaurant, rating=6)
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "rating"


def test_pending_review_hidden_until_approved(client, user, other_user, admin, restaurant):
    review_id = post_review(client, user, restaurant).json()["review"]["id"]

    public = client.get("/api/reviews", params={"restaurant_id": restaurant.id}).json()
    assert public["reviews"] == []
    assert client.get(f"/api/reviews/{review_id}").status_code == 404
    assert client.get(f"/api/reviews/{review_id}", headers=auth_header(other_user)).status_code == 404
    assert client.get(f"/api/reviews/{review_id}", headers=auth_header(user)).status_code == 200

    assert set_status(client, admin, review_id, "approved").json()["message"] == "Review approved successfully"

    public = client.get("/api/reviews", params={"restaurant_id": restaurant.id}).json()
    assert [r["id"] for r in public["reviews"]] == [review_id]
    restaurant_body = client.get(f"/api/restaurants/{restaurant.id}").json()["restaurant"]
    assert [r["id"] for r in restaurant_body["reviews"]] == [review_id]


def test_author_sees_all_own_reviews(client, db, user, restaurant):
    make_review(db, user, restaurant, status="pending")
    make_review(db, user, restaurant, status="rejected")
    make_review(db, user, restaurant, status="approved")

    own = client.get("/api/reviews", params={"user_id": user.id}, headers=auth_header(user)).json()
    assert own["pagination"]["total"] == 3

    anonymous = client.get("/api/reviews", params={"user_id": user.id}).json()
    assert [r["status"] for r in anonymous["reviews"]] == ["approved"]


def test_rating_follows_approved_reviews(client, user, other_user, admin, restaurant):
    first = post_review(client, user, restaurant, rating=4).json()["review"]["id"]
    second = post_review(client, other_user, restaurant, rating=5).json()["review"]["id"]
    assert restaurant_rating(client, restaurant) == 0

    set_status(client, admin, first, "approved")
    assert restaurant_rating(client, restaurant) == 4.0

    set_status(client, admin, second, "approved")
    assert restaurant_rating(client, restaurant) == 4.5

    client.delete(f"/api/reviews/{second}", headers=auth_header(other_user))
    assert restaurant_rating(client, restaurant) == 4.0

    set_status(client, admin, first, "rejected")
    assert restaurant_rating(client, restaurant) == 0


def test_author_edit_returns_review_to_moderation(client, db, user, admin, restaurant):
    review = make_review(db, user, restaurant, rating=3, status="approved")

    response = client.put(f"/api/reviews/{review.id}", headers=auth_header(user), json={"rating": 5})
    assert response.status_code == 200
    assert response.json()["review"]["rating"] == 5
    assert response.json()["review"]["status"] == "pending"

    set_status(client, admin, review.id, "approved")
    response = client.put(f"/api/reviews/{review.id}", headers=auth_header(admin), json={"comment": "Edited"})
    assert response.json()["review"]["status"] == "approved"
    assert restaurant_rating(client, restaurant) == 5.0


def test_only_owner_or_admin_can_modify(client, db, user, other_user, admin, restaurant):
    review = make_review(db, user, restaurant)

    response = client.put(f"/api/reviews/{review.id}", headers=auth_header(other_user), json={"rating": 1})
    assert response.status_code == 403
    assert response.json()["message"] == "Not authorized"
    assert client.delete(f"/api/reviews/{review.id}", headers=auth_header(other_user)).status_code == 403

    assert client.delete(f"/api/reviews/{review.id}", headers=auth_header(admin)).status_code == 200
    assert db.get(models.Review, review.id) is None


def test_update_rejects_null_rating(client, db, user, restaurant):
    review = make_review(db, user, restaurant)
    response = client.put(f"/api/reviews/{review.id}", headers=auth_header(user), json={"rating": None})
    assert response.status_code == 400


def test_like_and_unlike(client, db, user, other_user, restaurant):
    review = make_review(db, user, restaurant)
    headers = auth_header(other_user)

    response = client.post(f"/api/reviews/{review.id}/like", headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Liked successfully"

    response = client.post(f"/api/reviews/{review.id}/like", headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Already liked"

    body = client.get(f"/api/reviews/{review.id}", headers=headers).json()["review"]
    assert body["like_count"] == 1
    assert body["liked_by_viewer"] is True

    assert client.delete(f"/api/reviews/{review.id}/unlike", headers=headers).status_code == 200
    response = client.delete(f"/api/reviews/{review.id}/unlike", headers=headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Like not found"


def test_like_unknown_review(client, user):
    response = client.post("/api/reviews/999/like", headers=auth_header(user))
    assert response.status_code == 404


def test_liking_own_review_does_not_notify(client, db, user, restaurant):
    review = make_review(db, user, restaurant)
    client.post(f"/api/reviews/{review.id}/like", headers=auth_header(user))
    assert db.query(models.Notification).count() == 0
