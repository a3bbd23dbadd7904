"""Rate limiting configuration for the tracker API."""

import os

from slowapi import Limiter
from slowapi.util import get_remote_address

from offer_tracker.core.config import settings

IS_TESTING = os.getenv("TESTING", "").lower() in ("1", "true", "yes")

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=not IS_TESTING and settings.RATE_LIMIT_API > 0,
)

# Applied to enrollment mutations (start, status change, clear)
MUTATION_LIMIT = f"{max(settings.RATE_LIMIT_API, 1)}/minute"
