"""
Authentication for the Cart Fees admin routes.

Admin endpoints (/admin/*) use HTTP Basic Auth with credentials from the
environment (ADMIN_USERNAME, ADMIN_PASSWORD). Customer-facing checkout routes
are unauthenticated and identified only by their cart session.

Behavior:
---------
- 503 when ADMIN_PASSWORD is not configured (fail closed)
- 401 with a WWW-Authenticate header when credentials are wrong
- the username when authentication succeeds

Usage:
------
    from cart_fees.auth import verify_admin_credentials

    @router.get("/admin/fees")
    def list_fees(
        _admin: str = Depends(verify_admin_credentials),
        db: Session = Depends(get_db),
    ):
        ...
"""

import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from . import config


# Shared realm so browsers reuse credentials across admin pages.
security = HTTPBasic(realm="Cart Fees Admin")


def verify_admin_credentials(
    credentials: HTTPBasicCredentials = Depends(security),
) -> str:
    """
    FastAPI dependency guarding the admin routes.

    Both username and password are compared with secrets.compare_digest so
    response time does not depend on how much of either matched.
    """
    if not config.ADMIN_PASSWORD:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin authentication not configured. Set ADMIN_PASSWORD environment variable.",
        )

    username_correct = secrets.compare_digest(
        credentials.username.encode("utf-8"),
        config.ADMIN_USERNAME.encode("utf-8"),
    )
    password_correct = secrets.compare_digest(
        credentials.password.encode("utf-8"),
        config.ADMIN_PASSWORD.encode("utf-8"),
    )

    if not (username_correct and password_correct):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username
