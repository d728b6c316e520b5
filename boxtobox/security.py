"""Rate limiting for public endpoints."""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Rate limiter using client IP
limiter = Limiter(key_func=get_remote_address)
