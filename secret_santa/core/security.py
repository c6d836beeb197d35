"""Admin capability: password login and signed bearer tokens.

Tokens have the form ``<issued_at>.<signature>`` where the signature is an
HMAC-SHA256 of the issue timestamp keyed by ``settings.secret_key``. They
carry no other state, so any worker sharing the secret key can verify them,
and rotating the key revokes every token at once.
"""
import hashlib
import hmac
import logging
import time

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from secret_santa.core.config import settings
from secret_santa.errors import AuthorizationError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

# Published defaults; a token signed with one of these could be forged by anyone.
PLACEHOLDER_SECRET_KEYS = {"", "change-me", "change-me-in-production"}


def signing_key_configured() -> bool:
    return settings.secret_key not in PLACEHOLDER_SECRET_KEYS


def _sign(payload: str) -> str:
    return hmac.new(
        settings.secret_key.encode("utf-8"),
        payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def issue_token(now: float | None = None) -> str:
    issued_at = str(int(now if now is not None else time.time()))
    return f"{issued_at}.{_sign(issued_at)}"


def verify_token(token: str, now: float | None = None) -> bool:
    """Check the signature and the age of an admin token."""
    issued_at, _, signature = token.partition(".")
    if not issued_at.isdigit() or not signature:
        return False
    if not signing_key_configured():
        return False
    if not hmac.compare_digest(signature.encode("utf-8"), _sign(issued_at).encode("utf-8")):
        return False

    age = (now if now is not None else time.time()) - int(issued_at)
    return 0 <= age <= settings.admin_token_ttl_minutes * 60


def login(password: str) -> str:
    """Exchange the admin password for a token.

    Raises AuthorizationError when the password is wrong or when no admin
    password is configured at all.
    """
    expected = settings.admin_password
    if not expected:
        logger.warning("Admin login attempted but ADMIN_PASSWORD is not set")
        raise AuthorizationError("Admin login is disabled")
    if not signing_key_configured():
        logger.warning("Admin login attempted but SECRET_KEY is unset or a placeholder")
        raise AuthorizationError("Admin login is disabled")

    if not hmac.compare_digest(password.encode("utf-8"), expected.encode("utf-8")):
        logger.info("Admin login rejected")
        raise AuthorizationError("Wrong password")

    logger.info("Admin logged in")
    return issue_token()


def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> None:
    """Dependency guarding every mutating admin endpoint.

    Runs before the route body, so a rejected request never changes state.
    """
    if credentials is None or not verify_token(credentials.credentials):
        raise AuthorizationError("Unauthorized")
