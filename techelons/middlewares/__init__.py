from techelons.middlewares.db_middleware import get_session
from techelons.middlewares.auth_middleware import require_admin
from techelons.middlewares.rate_limit_middleware import RateLimitMiddleware

__all__ = ["get_session", "require_admin", "RateLimitMiddleware"]
