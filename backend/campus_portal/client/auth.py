"""
Client-side auth store.

Mirrors the browser store of the campus portal front end: one set of
register/login/logout/check-auth actions for every role, driven by
``ROLE_ROUTES``. The httpx client keeps the auth cookie between calls;
the user and token are also written to ``SessionStorage`` so a session can
be restored later.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import httpx

from ..core.roles import Role, ROLE_ROUTES, GENERIC_CHECK_AUTH, parse_role
from .storage import SessionStorage

logger = logging.getLogger(__name__)

USER_KEY = "user"
TOKEN_KEY = "token"

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@dataclass
class AuthState:
    is_authenticated: bool = False
    is_loading: bool = False
    user: Optional[Dict[str, Any]] = None


class AuthStore:
    def __init__(self, client: httpx.AsyncClient, storage: Optional[SessionStorage] = None,
                 api_prefix: str = "/api"):
        self.client = client
        self.storage = storage if storage is not None else SessionStorage()
        self.api_prefix = api_prefix
        self.state = AuthState()

    @staticmethod
    def _routes(role: Union[Role, str]):
        parsed = parse_role(role)
        if parsed is None:
            raise ValueError(f"Unknown role: {role}")
        return ROLE_ROUTES[parsed]

    def _current_role(self) -> Optional[Role]:
        if not self.state.user:
            return None
        return parse_role(self.state.user.get("role"))

    def _auth_headers(self) -> Dict[str, str]:
        # The cookie jar is empty after a restart; the stored token covers that case
        token = self.storage.get_item(TOKEN_KEY)
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(self, method: str, path: str, json_body: Optional[dict] = None,
                       headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        request_headers = self._auth_headers()
        request_headers.update(headers or {})
        try:
            response = await self.client.request(
                method, self.api_prefix + path, json=json_body, headers=request_headers
            )
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Auth request {method} {path} failed: {e}")
            return {"success": False, "message": "Request failed"}

        if not isinstance(payload, dict):
            return {"success": False, "message": "Unexpected response"}
        payload.setdefault("success", response.is_success)
        return payload

    def _persist(self, user: Dict[str, Any], token: Optional[str]):
        self.storage.set_item(USER_KEY, json.dumps(user))
        if token:
            self.storage.set_item(TOKEN_KEY, token)

    def _forget(self):
        self.storage.remove_item(USER_KEY)
        self.storage.remove_item(TOKEN_KEY)

    def set_user(self, user: Optional[Dict[str, Any]]):
        self.state.user = user
        self.state.is_authenticated = user is not None

    def clear_user(self):
        self.state.user = None
        self.state.is_authenticated = False
        self._forget()

    async def register(self, role: Union[Role, str], form: Dict[str, Any]) -> Dict[str, Any]:
        routes = self._routes(role)
        if not routes.can_self_register:
            raise ValueError(f"{routes.role.value} accounts cannot self-register")

        self.state.is_loading = True
        try:
            payload = await self._request("POST", routes.register, form)
        finally:
            self.state.is_loading = False

        success = bool(payload.get("success"))
        self.state.user = payload.get("user") if success else None
        self.state.is_authenticated = success
        return payload

    async def login(self, role: Union[Role, str], form: Dict[str, Any]) -> Dict[str, Any]:
        routes = self._routes(role)

        self.state.is_loading = True
        try:
            payload = await self._request("POST", routes.login, form)
        finally:
            self.state.is_loading = False

        user = payload.get("user")
        if payload.get("success") and user:
            self.set_user(user)
            self._persist(user, payload.get("token"))
        else:
            self.clear_user()
        return payload

    async def logout(self, role: Optional[Union[Role, str]] = None) -> Dict[str, Any]:
        role = parse_role(role) if role else self._current_role()
        # Every logout route revokes whatever token is presented
        routes = ROLE_ROUTES[role or Role.STUDENT]
        try:
            payload = await self._request("POST", routes.logout)
        finally:
            self.clear_user()
        return payload

    async def check_auth(self) -> Dict[str, Any]:
        role = self._current_role()
        path = ROLE_ROUTES[role].check_auth if role else GENERIC_CHECK_AUTH

        self.state.is_loading = True
        try:
            payload = await self._request("GET", path, headers=NO_CACHE_HEADERS)
        finally:
            self.state.is_loading = False

        user = payload.get("user")
        if payload.get("success") and user:
            self.set_user(user)
            self.storage.set_item(USER_KEY, json.dumps(user))
        else:
            self.clear_user()
        return payload

    async def restore_session(self) -> AuthState:
        """Load a stored user, or ask the server when nothing is stored"""
        if self.state.is_authenticated:
            return self.state

        stored = self.storage.get_item(USER_KEY)
        if stored:
            try:
                self.set_user(json.loads(stored))
            except ValueError:
                logger.warning("Discarding unreadable stored user")
                self.clear_user()
        else:
            await self.check_auth()
        return self.state
