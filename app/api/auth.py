"""Static basic-auth credential check for staff routes"""

import secrets

import structlog
from fastapi import APIRouter, Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from app.config import settings
from app.errors import UnauthorizedError

router = APIRouter()
logger = structlog.get_logger()

# auto_error=False so a missing header gets the same 401 body as a wrong one
basic_scheme = HTTPBasic(auto_error=False)


def verify_credentials(username: str, password: str) -> bool:
    """Compare against the configured credential pair in constant time"""
    if not username or not password:
        return False
    user_ok = secrets.compare_digest(username.encode("utf-8"), settings.basic_auth_username.encode("utf-8"))
    password_ok = secrets.compare_digest(password.encode("utf-8"), settings.basic_auth_password.encode("utf-8"))
    return user_ok and password_ok


async def require_basic_auth(
    credentials: HTTPBasicCredentials = Depends(basic_scheme),
) -> str:
    """Dependency guarding staff routes; returns the authenticated username"""
    if credentials is None or not verify_credentials(credentials.username, credentials.password):
        logger.warning("Basic auth rejected", username=credentials.username if credentials else None)
        raise UnauthorizedError()
    return credentials.username


@router.get("/profile")
async def profile(username: str = Depends(require_basic_auth)):
    """Confirm the caller's credentials"""
    return {"authenticated": True, "message": "Basic authentication successful"}


@router.post("/validate")
async def validate_credentials(username: str = Depends(require_basic_auth)):
    """Validate credentials for a login form"""
    return {"valid": True, "authenticated": True, "message": "Basic authentication successful"}
