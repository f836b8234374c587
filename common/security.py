"""
WallDecorator - Security Utilities
===================================
Bearer-token verification for inbound webhooks.
"""

import hmac
import logging
from typing import Optional

logger = logging.getLogger("walldecorator.security")


def verify_bearer(authorization: Optional[str], secret: str) -> bool:
    """
    Check an `Authorization: Bearer <token>` header against a shared secret
    (constant-time). With no secret configured, every request is accepted.
    """
    if not secret:
        logger.warning("Webhook secret not configured; skipping authorization check")
        return True
    expected = f"Bearer {secret}"
    return hmac.compare_digest((authorization or "").encode("utf-8"), expected.encode("utf-8"))
