"""
Accounting Notes Backend: Admin Mode
====================================

What:  The `role` cookie that switches the frontend into edit mode, and the
       dependency that guards write endpoints with it.
How:   Login sets role=ADMIN; every guarded route depends on require_admin,
       which only compares the cookie value.

Cookie attributes:
    production  → SameSite=None; Secure; Domain=settings.cookie_domain
    otherwise   → SameSite=Lax, host-only
    Both        → HttpOnly, Path=/, Max-Age one day
"""

import logging
from typing import Optional

from fastapi import Cookie, Response

from app.config import settings
from app.exceptions import ForbiddenError
from app.models.user import UserRole

logger = logging.getLogger(__name__)

ROLE_COOKIE = "role"
COOKIE_MAX_AGE = 24 * 60 * 60


def _cookie_scope() -> dict:
    if settings.is_production:
        return {"samesite": "none", "secure": True, "domain": settings.cookie_domain, "path": "/"}
    return {"samesite": "lax", "secure": False, "domain": None, "path": "/"}


def set_admin_cookie(response: Response) -> None:
    response.set_cookie(
        key=ROLE_COOKIE,
        value=UserRole.ADMIN.value,
        max_age=COOKIE_MAX_AGE,
        httponly=True,
        **_cookie_scope(),
    )


def clear_admin_cookie(response: Response) -> None:
    response.delete_cookie(key=ROLE_COOKIE, httponly=True, **_cookie_scope())


async def require_admin(role: Optional[str] = Cookie(default=None)) -> None:
    """
    FastAPI dependency for write endpoints.

    Raises:
        ForbiddenError: cookie missing or not ADMIN (403)
    """
    if role != UserRole.ADMIN.value:
        logger.info("Admin-only operation refused (role=%r)", role)
        raise ForbiddenError()
