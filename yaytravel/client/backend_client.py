# yaytravel/client/backend_client.py

import json
from pathlib import Path
from typing import Optional, Dict, Any, List

import requests

from yaytravel.client.errors import ApiError, NotAuthenticatedError, SessionExpiredError
from yaytravel.core.config_loader import settings
from yaytravel.core.logger import logger


class TokenStore:
    """Keeps the access token between runs, like the browser's localStorage."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or settings.TOKEN_FILE).expanduser()

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            return json.loads(self.path.read_text(encoding="utf-8")).get("access_token")
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable token file {self.path}: {e}")
            return None

    def save(self, token: str):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"access_token": token}), encoding="utf-8")

    def clear(self):
        if self.path.exists():
            self.path.unlink()


class BackendClient:
    """
    Talks to the YayTravel backend the way the chat UI does:
    user registration, OAuth2 password login, profile, conversations
    and trip plans.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_store: Optional[TokenStore] = None,
        session=None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.BACKEND_BASE_URL).rstrip("/")
        self.token_store = token_store or TokenStore()
        self.session = session or requests.Session()
        self.timeout = timeout or settings.request_timeout
        self.token: Optional[str] = self.token_store.load()

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------
    @staticmethod
    def _error_detail(response, default: str) -> str:
        try:
            detail = response.json().get("detail")
        except (ValueError, AttributeError):
            return default
        if not detail:
            return default
        return detail if isinstance(detail, str) else json.dumps(detail)

    def _request(self, method: str, path: str, error: str, auth: bool = True, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if auth:
            if not self.token:
                raise NotAuthenticatedError()
            headers["Authorization"] = f"Bearer {self.token}"

        response = self.session.request(
            method,
            f"{self.base_url}{path}",
            headers=headers,
            timeout=self.timeout,
            **kwargs,
        )

        if response.status_code == 401 and auth:
            logger.info("Backend rejected the stored token, logging out")
            self.logout()
            raise SessionExpiredError()
        if not 200 <= response.status_code < 300:
            raise ApiError(self._error_detail(response, error), status_code=response.status_code)
        return response.json()

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------
    def create_user(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/users/", "Failed to create user", auth=False, json=user_data)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        token_data = self._request(
            "POST", "/token", "Login failed", auth=False,
            data={"username": email, "password": password},
        )
        self.token = token_data["access_token"]
        self.token_store.save(self.token)
        return token_data

    def fetch_user_profile(self) -> Dict[str, Any]:
        return self._request("GET", "/users/me", "Failed to fetch user profile")

    def logout(self):
        self.token = None
        self.token_store.clear()

    def is_authenticated(self) -> bool:
        return bool(self.token)

    def get_token(self) -> Optional[str]:
        return self.token

    # ------------------------------------------------------------------
    # Conversations
    # ------------------------------------------------------------------
    def create_conversation(self, title: Optional[str] = None) -> str:
        body = {"title": title} if title else None
        return self._request("POST", "/conversations/", "Failed to create conversation", json=body)

    def get_conversations(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"status": status} if status else None
        return self._request("GET", "/conversations/", "Failed to fetch conversations", params=params)

    def add_message(self, conversation_id: str, content: str, role: str = "user") -> Dict[str, Any]:
        return self._request(
            "POST", f"/conversations/{conversation_id}/messages", "Failed to save message",
            json={"content": content, "role": role},
        )

    # ------------------------------------------------------------------
    # Trip plans
    # ------------------------------------------------------------------
    def get_trip_plan(self, conversation_id: str) -> Optional[Dict[str, Any]]:
        try:
            return self._request("GET", f"/plans/conversation/{conversation_id}", "Failed to fetch trip plan")
        except ApiError as e:
            if e.status_code == 404:
                return None
            raise

    def update_plan_status(self, plan_id: str, status: str) -> Dict[str, Any]:
        return self._request(
            "POST", f"/plans/{plan_id}/status", "Failed to update plan status",
            json={"status": status},
        )
