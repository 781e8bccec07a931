"""
Xync Backend — Credential Store & Token Service
===============================================

What:  Password hashing/verification and signed identity tokens.
How:   Passwords: argon2 (memory-hard, salted) through passlib's CryptContext.
       The salt and cost parameters live inside the returned hash string, so
       the users table needs a single column.
       Tokens: HMAC-signed JWTs (python-jose) carrying sub / iat / exp.
Who:   UserService (register, login) and the authorization middleware.

Every function here is pure over its explicit inputs: the current time,
the secret and the token lifetime are parameters, not globals. Nothing is
cached between calls apart from the one-off dummy hash, and nothing takes
a lock.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from xync.exceptions import InvalidTokenError, MalformedTokenError, TokenExpiredError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

DEFAULT_ALGORITHM = "HS256"


# ══════════════════════════════════════════════════════════════════════════
# Credential Store
# ══════════════════════════════════════════════════════════════════════════

def hash_password(password: str) -> str:
    """Return an opaque argon2 hash of `password` with an embedded random salt."""
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check `password` against a hash produced by hash_password().

    The comparison is done by the argon2 primitive, which recomputes the full
    hash before comparing, so timing does not depend on where a mismatch
    occurs. A stored value that is not a recognizable hash verifies as False.
    """
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """
    A throwaway hash used when a login names an unknown email.

    Verifying against it costs the same as a real verification, so response
    time does not reveal whether the account exists.
    """
    return hash_password("xync-dummy-password-never-matches")


# ══════════════════════════════════════════════════════════════════════════
# Token Service
# ══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


def _as_utc(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def issue_token(
    user_id: UUID,
    now: datetime,
    *,
    secret: str,
    lifetime_hours: int,
    algorithm: str = DEFAULT_ALGORITHM,
) -> IssuedToken:
    """
    Sign a token identifying `user_id`, valid until now + lifetime_hours.

    Claims are whole seconds, so `now` is truncated to the second and the
    returned `expires_at` equals the `exp` claim exactly.
    """
    issued_at = _as_utc(now).replace(microsecond=0)
    expires_at = issued_at + timedelta(hours=lifetime_hours)
    claims = {
        "sub": str(user_id),
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    token = jwt.encode(claims, secret, algorithm=algorithm)
    return IssuedToken(token=token, expires_at=expires_at)


def verify_token(
    token: str,
    now: datetime,
    *,
    secret: str,
    algorithm: str = DEFAULT_ALGORITHM,
) -> UUID:
    """
    Return the user id carried by `token`, or raise.

    Raises:
        MalformedTokenError: not a JWT, or required claims missing / mistyped
        InvalidTokenError:   signature does not verify under `secret`
        TokenExpiredError:   now >= exp

    Expiry is evaluated against the `now` argument; the library's own clock
    check is disabled.
    """
    try:
        jwt.get_unverified_claims(token)
    except JWTError as exc:
        raise MalformedTokenError() from exc

    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={
                "verify_exp": False,
                "verify_iat": False,
                "verify_nbf": False,
                "verify_sub": False,
                "verify_aud": False,
            },
        )
    except JWTError as exc:
        raise InvalidTokenError() from exc

    subject = claims.get("sub")
    expires = claims.get("exp")
    if not isinstance(subject, str) or isinstance(expires, bool) or not isinstance(expires, (int, float)):
        raise MalformedTokenError()
    try:
        user_id = UUID(subject)
    except ValueError as exc:
        raise MalformedTokenError() from exc

    if _as_utc(now).timestamp() >= expires:
        raise TokenExpiredError()

    return user_id
