# marketplace/api/deps.py
"""Request dependencies resolving the caller from the bearer token."""
from typing import Optional

from fastapi import Depends, Header, Request

from ..errors import AuthenticationError
from ..identity import Caller, IdentityProvider


def get_identity(request: Request) -> IdentityProvider:
    return request.app.state.identity


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(
    authorization: Optional[str] = Header(None),
    identity: IdentityProvider = Depends(get_identity),
) -> Caller:
    token = _bearer_token(authorization)
    if token is None:
        raise AuthenticationError("No token provided")
    return identity.authenticate(token)


def get_optional_user(
    authorization: Optional[str] = Header(None),
    identity: IdentityProvider = Depends(get_identity),
) -> Optional[Caller]:
    token = _bearer_token(authorization)
    if token is None:
        return None
    try:
        return identity.authenticate(token)
    except AuthenticationError:
        # a stale token on a public route degrades to anonymous
        return None
