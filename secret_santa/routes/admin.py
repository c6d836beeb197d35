"""Admin login route."""
from fastapi import APIRouter
from pydantic import BaseModel

from secret_santa.core import security

router = APIRouter(prefix="/api/admin", tags=["admin"])


class LoginRequest(BaseModel):
    password: str


@router.post("/login")
async def admin_login(payload: LoginRequest):
    """
    Exchange the admin password for a bearer token.

    The token must be sent as ``Authorization: Bearer <token>`` to every
    admin endpoint. Returns 401 on a wrong password or when admin login is
    disabled.
    """
    return {"token": security.login(payload.password)}
