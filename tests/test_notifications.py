import pytest
from conftest import auth_header, make_review
from starlette.websockets import WebSocketDisconnect

from happylunch.auth import create_access_token


def like(client, liker, review):
    return client.post(f"/api/reviews/{review.id}/like", headers=auth_header(liker))


def test_like_creates_notification(client, db, user, other_user, restaurant):
    review = make_review(db, user, restaurant)
    like(client, other_user, review)

    body = client.get("/api/notifications", headers=auth_header(user)).json()
    assert body["unread_count"] == 1
    notification = body["notifications"][0]
    assert notification["type"] == "like_review"
    assert notification["reference_id"] == review.id
    assert notification["message"] == "Bob liked your review"
    assert notification["is_read"] is False
    assert notification["restaurant"]["name"] == "Pho 24"

    assert client.get("/api/notifications", headers=auth_header(other_user)).json()["notifications"] == []


def test_mark_read(client, db, user, other_user, restaurant):
    review = make_review(db, user, restaurant)
    like(client, other_user, review)
    notification_id = client.get("/api/notifications", headers=auth_header(user)).json()["notifications"][0]["id"]

    response = client.put(f"/api/notifications/{notification_id}/read", headers=auth_header(other_user))
    assert response.status_code == 404

    response = client.put(f"/api/notifications/{notification_id}/read", headers=auth_header(user))
    assert response.status_code == 200
    assert client.get("/api/notifications", headers=auth_header(user)).json()["unread_count"] == 0


def test_mark_all_read(client, db, user, other_user, admin, restaurant):
    first = make_review(db, user, restaurant)
    second = make_review(db, user, restaurant)
    like(client, other_user, first)
    like(client, admin, second)

    response = client.put("/api/notifications/read-all", headers=auth_header(user))
    assert response.json()["updated"] == 2
    assert client.get("/api/notifications", headers=auth_header(user)).json()["unread_count"] == 0


def test_like_is_pushed_to_connected_author(client, db, user, other_user, restaurant):
    review = make_review(db, user, restaurant)
    token = create_access_token(user)

    with client.websocket_connect(f"/ws/notifications?token={token}") as websocket:
        like(client, other_user, review)
        message = websocket.receive_json()

    assert message["event"] == "new_notification"
    assert message["data"]["type"] == "like_review"
    assert message["data"]["reference_id"] == review.id


def test_like_without_connection_still_succeeds(client, db, user, other_user, restaurant):
    review = make_review(db, user, restaurant)
    assert like(client, other_user, review).status_code == 200


@pytest.mark.parametrize("query", ["", "?token=garbage"])
def test_socket_rejects_bad_token(client, query):
    with pytest.raises(WebSocketDisconnect) as excinfo:
        with client.websocket_connect(f"/ws/notifications{query}"):
            pass
    assert excinfo.value.code == 1008
