from slowapi import Limiter

from app.core import config
from app.features.users.dependencies import get_authorization_header


limiter = Limiter(key_func=get_authorization_header)


def mutation_rate_limit() -> str:
    """Limit for mutating routes, read from config on every request."""
    return config.RATE_LIMIT
