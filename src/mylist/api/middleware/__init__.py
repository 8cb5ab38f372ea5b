"""Middleware for the list API.

Note: For CORS, use Starlette's built-in CORSMiddleware from starlette.middleware.cors
"""

from mylist.api.middleware.correlation import CorrelationMiddleware

__all__ = ["CorrelationMiddleware"]
