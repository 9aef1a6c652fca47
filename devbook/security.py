"""
Devbook API — Credentials, Bearer Tokens & Ownership
=====================================================

What:  Password hashing (bcrypt), bearer token issuing/validation (PyJWT,
       HS256) and the ownership predicate used by every mutating handler.
Who:   TokenIssuer is built once in create_app() and shared by the
       authenticator and the AuthController. Password helpers are passed to
       the schemas as the `hasher` and called by the controllers.

Token format:
    {"authorized": true, "userID": <int>, "exp": <unix seconds>}

    Tokens are stateless: nothing is stored server-side, a token is valid
    until its `exp` instant.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from starlette.requests import Request

from devbook.exceptions import (
    AuthenticationError,
    ConfigurationError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_EXPIRATION = timedelta(hours=6)

# bcrypt ignores everything past 72 bytes, so longer passwords are refused
MAX_PASSWORD_BYTES = 72


# ══════════════════════════════════════════════════════════════════════════
# Passwords
# ══════════════════════════════════════════════════════════════════════════

def password_too_long(plaintext: str) -> bool:
    return len(plaintext.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(plaintext: str) -> str:
    """
    Hash a plaintext password with a fresh bcrypt salt.

    Raises:
        ValidationError: the password is longer than MAX_PASSWORD_BYTES.
    """
    if password_too_long(plaintext):
        raise ValidationError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    hashed = bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(hashed: str, plaintext: str) -> None:
    """
    Check a plaintext password against a stored bcrypt hash.

    Raises:
        AuthenticationError: the password does not match, or the stored
            value is not a bcrypt hash (e.g. an empty string), or the
            plaintext is too long to have been hashed.
    """
    if password_too_long(plaintext):
        raise AuthenticationError()
    try:
        matches = bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        matches = False
    if not matches:
        raise AuthenticationError()


# ══════════════════════════════════════════════════════════════════════════
# Ownership
# ══════════════════════════════════════════════════════════════════════════

def is_owner(caller_id: int, owner_id: Optional[int]) -> bool:
    """True when the authenticated caller owns the resource."""
    return owner_id is not None and caller_id == owner_id


# ══════════════════════════════════════════════════════════════════════════
# Bearer tokens
# ══════════════════════════════════════════════════════════════════════════

class TokenIssuer:
    """
    Issues and validates signed, time-limited bearer tokens.

    `validate_token()` and `extract_user_id()` are separate entry points:
    the authentication dependency only needs to know that a token is valid,
    handlers that act on behalf of the caller need the user id. Both run the
    full signature and expiry check.

    Raises:
        ConfigurationError: on construction without a signing secret.
    """

    def __init__(self, secret_key: str, expiration: timedelta = DEFAULT_EXPIRATION):
        if not secret_key:
            raise ConfigurationError(
                "SECRET_KEY is not configured; refusing to issue unsigned tokens"
            )
        self._secret_key = secret_key
        self.expiration = expiration

    def issue_token(self, user_id: int) -> str:
        """Mint a token for `user_id` valid for `self.expiration`."""
        expires_at = datetime.now(timezone.utc) + self.expiration
        claims = {
            "authorized": True,
            "exp": int(expires_at.timestamp()),
            "userID": user_id,
        }
        return jwt.encode(claims, self._secret_key, algorithm=ALGORITHM)

    def validate_token(self, request: Request) -> None:
        """Raise UnauthorizedError unless the request carries a valid token."""
        self._decode(self._bearer_token(request))

    def extract_user_id(self, request: Request) -> int:
        """Validate the request's token and return its `userID` claim."""
        claims = self._decode(self._bearer_token(request))
        user_id = claims.get("userID")
        # bool is a subclass of int
        if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id < 0:
            raise UnauthorizedError("Token does not carry a valid user identifier")
        return user_id

    @staticmethod
    def _bearer_token(request: Request) -> str:
        header = request.headers.get("Authorization")
        if not header:
            raise UnauthorizedError("Missing Authorization header")
        parts = header.split(" ")
        if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
            raise UnauthorizedError("Authorization header must use the Bearer scheme")
        return parts[1]

    def _decode(self, token: str) -> dict:
        try:
            return jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected bearer token: %s", str(e))
            raise UnauthorizedError("Invalid token")
