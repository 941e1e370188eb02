"""Bearer token authentication for the registry service."""

from dataclasses import dataclass
from functools import wraps
from typing import Optional
import logging
from flask import current_app, g, request
from jose import JWTError, jwt

from .exceptions import AuthenticationError

logger = logging.getLogger(__name__)

USER_ID_CLAIM = "userID"
ORGANIZATION_ID_CLAIM = "organizationID"
ALGORITHMS = ["HS256"]


@dataclass(frozen=True)
class Principal:
    """An authenticated user acting for an organization."""
    user_id: int
    organization_id: int


def _numeric_claim(claims: dict, name: str) -> int:
    value = claims.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise AuthenticationError(f"could not read {name} claim")
    return int(value)


def decode_principal(authorization: Optional[str], secret: str) -> Principal:
    """
    Verify a bearer token and extract the principal it carries.

    Args:
        authorization: Value of the Authorization header
        secret: HMAC secret the token must be signed with

    Returns:
        The authenticated principal

    Raises:
        AuthenticationError: If the header is missing, the token is invalid,
            or a required claim is absent
    """
    if not authorization:
        raise AuthenticationError("missing Authorization header")

    token = authorization
    if token.startswith("Bearer "):
        token = token[len("Bearer "):]

    try:
        claims = jwt.decode(token, secret, algorithms=ALGORITHMS)
    except JWTError as e:
        raise AuthenticationError(f"error parsing token: {str(e)}") from e

    return Principal(
        user_id=_numeric_claim(claims, USER_ID_CLAIM),
        organization_id=_numeric_claim(claims, ORGANIZATION_ID_CLAIM)
    )


def issue_token(principal: Principal, secret: str) -> str:
    """Sign a token for a principal."""
    return jwt.encode(
        {USER_ID_CLAIM: principal.user_id, ORGANIZATION_ID_CLAIM: principal.organization_id},
        secret,
        algorithm=ALGORITHMS[0]
    )


def require_principal(view):
    """Flask view decorator storing the request's principal on ``g.principal``."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        g.principal = decode_principal(
            request.headers.get("Authorization"),
            current_app.config["JWT_SECRET"]
        )
        logger.debug(f"Authenticated user {g.principal.user_id} of organization {g.principal.organization_id}")
        return view(*args, **kwargs)
    return wrapper
