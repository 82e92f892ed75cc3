# marketplace/identity.py
"""Identity provider capability and its managed-auth HTTP implementation.

The service never checks passwords or signs tokens itself. It forwards
credentials to the hosted auth API and trusts the user it hands back.
"""
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import httpx

from .errors import AuthenticationError, UpstreamError
from .utils import logger

TOKEN_REJECTED = (400, 401, 403)


@dataclass
class Caller:
    id: uuid.UUID
    email: str
    token: Optional[str] = None

    def public(self) -> Dict[str, Any]:
        return {"id": str(self.id), "email": self.email}


@dataclass
class SessionTokens:
    access_token: str
    refresh_token: str
    expires_in: Optional[int] = None
    expires_at: Optional[int] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_in": self.expires_in,
            "expires_at": self.expires_at,
        }


class IdentityProvider:
    """Operations the API needs from an auth backend."""

    def authenticate(self, token: str) -> Caller:
        raise NotImplementedError

    def register(self, email: str, password: str) -> Tuple[Caller, Optional[SessionTokens]]:
        raise NotImplementedError

    def establish_session(self, email: str, password: str) -> Tuple[Caller, SessionTokens]:
        raise NotImplementedError

    def invalidate_session(self, token: str) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = {}
    if isinstance(body, dict):
        for key in ("msg", "error_description", "message", "error"):
            if body.get(key):
                return str(body[key])
    return resp.reason_phrase or f"HTTP {resp.status_code}"


def _caller_from_user(user: Dict[str, Any], token: Optional[str] = None) -> Caller:
    try:
        user_id = uuid.UUID(str(user["id"]))
    except (KeyError, ValueError) as e:
        raise UpstreamError("Authentication service returned no user") from e
    return Caller(id=user_id, email=user.get("email") or "", token=token)


def _session_from_payload(data: Dict[str, Any]) -> Optional[SessionTokens]:
    if not data.get("access_token"):
        return None
    return SessionTokens(
        access_token=data["access_token"],
        refresh_token=data.get("refresh_token", ""),
        expires_in=data.get("expires_in"),
        expires_at=data.get("expires_at"),
    )


class ManagedAuthClient(IdentityProvider):
    """Client for the hosted auth REST API (``<AUTH_URL>/auth/v1``)."""

    def __init__(self, base_url: str, api_key: str = "", timeout: float = 10.0,
                 transport: Optional[httpx.BaseTransport] = None):
        if not base_url:
            raise RuntimeError("AUTH_URL not set")
        self._client = httpx.Client(
            base_url=base_url.rstrip("/") + "/auth/v1",
            headers={"apikey": api_key},
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, token: Optional[str] = None, **kwargs) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            return self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Auth service call %s %s failed: %s", method, path, e)
            raise UpstreamError("Authentication service unavailable") from e

    def authenticate(self, token: str) -> Caller:
        resp = self._request("GET", "/user", token=token)
        if resp.status_code in TOKEN_REJECTED:
            logger.info("Token rejected by auth service (%s)", resp.status_code)
            raise AuthenticationError("Invalid or expired token")
        if resp.is_error:
            logger.error("Auth service user lookup failed (%s)", resp.status_code)
            raise UpstreamError(_error_message(resp))
        return _caller_from_user(resp.json(), token=token)

    def register(self, email: str, password: str) -> Tuple[Caller, Optional[SessionTokens]]:
        resp = self._request("POST", "/signup", json={"email": email, "password": password})
        if resp.is_error:
            raise UpstreamError(_error_message(resp))
        data = resp.json()
        # autoconfirm projects answer with a session, others with the bare user
        session = _session_from_payload(data)
        user = data.get("user") or data
        return _caller_from_user(user, token=session.access_token if session else None), session

    def establish_session(self, email: str, password: str) -> Tuple[Caller, SessionTokens]:
        resp = self._request(
            "POST", "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if resp.is_error:
            raise AuthenticationError(_error_message(resp))
        data = resp.json()
        session = _session_from_payload(data)
        if session is None:
            raise UpstreamError("Authentication service returned no session")
        return _caller_from_user(data.get("user") or {}, token=session.access_token), session

    def invalidate_session(self, token: str) -> None:
        resp = self._request("POST", "/logout", token=token)
        if resp.is_error:
            raise UpstreamError(_error_message(resp))
