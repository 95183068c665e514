"""
Shared rate limiter.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from land_planner.config import settings


limiter = Limiter(key_func=get_remote_address)

DEFAULT_LIMIT = f"{settings.rate_limit_requests}/minute"
