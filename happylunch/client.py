"""Python client for the Happy Lunch API.

``AuthStore`` keeps the session (token and user) in a small JSON file so it
survives restarts; ``ApiClient`` wraps the remaining endpoints and sends the
stored token automatically.
"""
import json
import logging
import os
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = os.path.join(os.path.expanduser("~"), ".happylunch", "auth.json")


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        return response.json().get("message") or default
    except (ValueError, AttributeError):
        return default


def read_json(file_path: str) -> Dict:
    try:
        with open(file_path, 'r') as f:
            return json.load(f)
    except (json.JSONDecodeError, FileNotFoundError):
        return {}


def write_json(file_path: str, data: Dict):
    directory = os.path.dirname(file_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(file_path, 'w') as f:
        json.dump(data, f, indent=2)


class AuthStore:
    """Persisted login state with one action per auth endpoint.

    Every action returns ``{"success": bool, "message": str}``; state is only
    replaced after the server confirms the change.
    """

    def __init__(self, http: httpx.Client, path: str = DEFAULT_STORE_PATH):
        self.http = http
        self.path = path
        stored = read_json(path)
        self.token: Optional[str] = stored.get("token")
        self.user: Optional[Dict] = stored.get("user")
        self.error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _save(self):
        write_json(self.path, {"token": self.token, "user": self.user})

    def _set_session(self, token: Optional[str], user: Optional[Dict]):
        self.token = token
        self.user = user
        self._save()

    def _fail(self, response: Optional[httpx.Response], default: str) -> Dict[str, Any]:
        message = _error_message(response, default) if response is not None else default
        self.error = message
        return {"success": False, "message": message}

    def _send(self, method: str, url: str, **kwargs) -> Optional[httpx.Response]:
        try:
            return self.http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            return None

    def register(self, email: str, password: str, name: str, **extra) -> Dict[str, Any]:
        response = self._send("POST", "/api/auth/register", json={
            "email": email, "password": password, "name": name, **extra,
        })
        if response is None or response.status_code != 201:
            return self._fail(response, "Registration failed")
        body = response.json()
        self._set_session(body["token"], body["user"])
        self.error = None
        return {"success": True, "message": body.get("message")}

    def login(self, email: str, password: str) -> Dict[str, Any]:
        response = self._send("POST", "/api/auth/login", json={"email": email, "password": password})
        if response is None or response.status_code != 200:
            return self._fail(response, "Login failed")
        body = response.json()
        self._set_session(body["token"], body["user"])
        self.error = None
        return {"success": True, "message": body.get("message")}

    def logout(self):
        self.error = None
        self._set_session(None, None)

    def get_current_user(self) -> Dict[str, Any]:
        if not self.token:
            return {"success": False, "message": "Not logged in"}
        response = self._send("GET", "/api/auth/me", headers=self.auth_headers())
        if response is None or response.status_code != 200:
            self._set_session(None, None)
            self.error = "Session expired"
            return {"success": False, "message": "Session expired"}
        self._set_session(self.token, response.json()["user"])
        self.error = None
        return {"success": True, "message": None}

    def change_password(self, current_password: str, new_password: str) -> Dict[str, Any]:
        response = self._send("PUT", "/api/auth/change-password", headers=self.auth_headers(), json={
            "current_password": current_password,
            "new_password": new_password,
        })
        if response is None or response.status_code != 200:
            return self._fail(response, "Failed to change password")
        self.error = None
        return {"success": True, "message": response.json().get("message")}

    def update_profile(self, **profile) -> Dict[str, Any]:
        response = self._send("PUT", "/api/auth/profile", headers=self.auth_headers(), json=profile)
        if response is None or response.status_code != 200:
            return self._fail(response, "Failed to update profile")
        body = response.json()
        self._set_session(self.token, body["user"])
        self.error = None
        return {"success": True, "message": body.get("message")}


class ApiClient:
    def __init__(self, base_url: str = "http://localhost:5000", store_path: str = DEFAULT_STORE_PATH,
                 http: Optional[httpx.Client] = None):
        self.http = http or httpx.Client(base_url=base_url, timeout=10.0)
        self.auth = AuthStore(self.http, store_path)

    def close(self):
        self.http.close()

    def _request(self, method: str, url: str, **kwargs) -> Dict:
        response = self.http.request(method, url, headers=self.auth.auth_headers(), **kwargs)
        body = response.json()
        if response.is_error:
            body.setdefault("success", False)
        return body

    def list_restaurants(self, **filters) -> Dict:
        return self._request("GET", "/api/restaurants", params=filters)

    def get_restaurant(self, restaurant_id: int) -> Dict:
        return self._request("GET", f"/api/restaurants/{restaurant_id}")

    def list_reviews(self, **filters) -> Dict:
        return self._request("GET", "/api/reviews", params=filters)

    def create_review(self, restaurant_id: int, rating: int, comment: Optional[str] = None,
                      image_urls: Optional[List[str]] = None, dish_names: Optional[List[str]] = None) -> Dict:
        return self._request("POST", "/api/reviews", json={
            "restaurant_id": restaurant_id,
            "rating": rating,
            "comment": comment,
            "image_urls": image_urls or [],
            "dish_names": dish_names or [],
        })

    def like_review(self, review_id: int) -> Dict:
        return self._request("POST", f"/api/reviews/{review_id}/like")

    def unlike_review(self, review_id: int) -> Dict:
        return self._request("DELETE", f"/api/reviews/{review_id}/unlike")

    def list_favorites(self) -> Dict:
        return self._request("GET", "/api/favorites")

    def add_favorite(self, restaurant_id: int) -> Dict:
        return self._request("POST", "/api/favorites", json={"restaurant_id": restaurant_id})

    def remove_favorite(self, restaurant_id: int) -> Dict:
        return self._request("DELETE", f"/api/favorites/{restaurant_id}")

    def list_notifications(self) -> Dict:
        return self._request("GET", "/api/notifications")

    def mark_notification_read(self, notification_id: int) -> Dict:
        return self._request("PUT", f"/api/notifications/{notification_id}/read")

    def mark_all_notifications_read(self) -> Dict:
        return self._request("PUT", "/api/notifications/read-all")
