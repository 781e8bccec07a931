"""
Xync Backend — Authorization Middleware
=======================================

What:  Establishes the caller's identity for every request, or rejects the
       request before it reaches routing.
How:   Reads `Authorization: Bearer <token>`, verifies the token against the
       server clock, and stores the user id on `request.state.user_id`.
       Route handlers receive it through the `get_current_user_id`
       dependency and pass it as the explicit owner argument of every
       service call.
Who:   Registered innermost in main.py.

Public Paths:
    The exemption list is a fixed set of exact paths, checked here before
    routing. Everything not listed requires a valid token, including paths
    that do not exist (unauthenticated callers get 401, not 404).

Responses:
    Missing or non-Bearer header → 401 "Authentication required"
    Malformed, forged or expired token → 401 "Invalid or expired token"
    Both carry `WWW-Authenticate: Bearer`. The specific cause is logged at
    INFO and never returned.
"""

import logging
from datetime import datetime, timezone
from typing import FrozenSet, Optional
from uuid import UUID

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from xync.config import settings
from xync.exceptions import AuthenticationError, MissingTokenError
from xync.middleware.request_id import request_id_var
from xync.security import verify_token

logger = logging.getLogger(__name__)

PUBLIC_PATHS: FrozenSet[str] = frozenset(
    {
        "/auth/register",
        "/auth/login",
        "/health",
        "/health/live",
        "/health/ready",
        "/metrics",
        "/docs",
        "/docs/oauth2-redirect",
        "/redoc",
        "/openapi.json",
    }
)

INVALID_TOKEN_MESSAGE = "Invalid or expired token"


def is_public_path(path: str) -> bool:
    return path.rstrip("/") in PUBLIC_PATHS or path in PUBLIC_PATHS


def extract_bearer_token(header: Optional[str]) -> str:
    """
    Return the token from an Authorization header value.

    Raises:
        MissingTokenError: header absent, not the Bearer scheme, or empty token
    """
    if not header:
        raise MissingTokenError()
    scheme, _, token = header.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        raise MissingTokenError()
    return token


def _unauthorized(message: str, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={
            "error": error,
            "message": message,
            "details": None,
            "request_id": request_id_var.get("") or None,
        },
        headers={"WWW-Authenticate": "Bearer"},
    )


class AuthenticationMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # CORS preflight never carries credentials
        if request.method == "OPTIONS" or is_public_path(request.url.path):
            return await call_next(request)

        try:
            token = extract_bearer_token(request.headers.get("Authorization"))
        except MissingTokenError as exc:
            return _unauthorized(exc.message, "authentication_required")

        try:
            user_id = verify_token(
                token,
                datetime.now(timezone.utc),
                secret=settings.jwt_secret,
                algorithm=settings.jwt_algorithm,
            )
        except AuthenticationError as exc:
            logger.info("Token rejected: %s", type(exc).__name__)
            return _unauthorized(INVALID_TOKEN_MESSAGE, "invalid_token")

        request.state.user_id = user_id
        return await call_next(request)


def get_current_user_id(request: Request) -> UUID:
    """
    FastAPI dependency: the authenticated caller's id.

    Only reachable behind AuthenticationMiddleware. If a route that uses it
    were ever added to PUBLIC_PATHS, the missing state is reported as 401
    rather than silently serving an anonymous caller.
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id is None:
        raise MissingTokenError()
    return user_id
