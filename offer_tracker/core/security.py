"""Security utilities for JWT session tokens."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from offer_tracker.core.config import settings
from offer_tracker.db.enums import IdentityKind


# =============================================================================
# Session Token (JWT in cookie)
# =============================================================================

def create_session_token(subject_id: UUID, kind: IdentityKind | str) -> str:
    """
    Create signed session JWT.

    Always signs with current secret (JWT_SECRET). The kind claim keeps a
    user token from being accepted as an instructor token and vice versa.
    """
    kind_str = kind.value if isinstance(kind, IdentityKind) else kind
    payload = {
        "sub": str(subject_id),
        "kind": kind_str,
        "iat": datetime.now(timezone.utc),
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRES_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def decode_session_token(token: str, expected_kind: IdentityKind | None = None) -> dict:
    """
    Decode and verify session JWT.

    Tries current secret first, then previous (for rotation support).

    Raises:
        jwt.InvalidTokenError: If token invalid with all secrets or of the wrong kind
    """
    last_error: jwt.InvalidTokenError | None = None
    for secret in settings.jwt_secrets:
        try:
            payload = jwt.decode(token, secret, algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            last_error = e
            continue
        if expected_kind is not None and payload.get("kind") != expected_kind.value:
            raise jwt.InvalidTokenError("Token kind mismatch")
        return payload
    raise last_error  # type: ignore[misc]
