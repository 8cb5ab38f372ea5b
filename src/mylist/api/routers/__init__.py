"""API routers for the list service."""

from mylist.api.routers import health, mylist

__all__ = ["health", "mylist"]
