"""Bounded access to the durable store.

Every store operation runs inside its own session with a hard timeout.
Driver-level connectivity failures and timeouts become
``DependencyUnavailableError(component="store")``; domain errors raised by
the repositories pass through untouched.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mylist.core.errors import DependencyUnavailableError
from mylist.persistence.db import session_context

logger = logging.getLogger(__name__)

T = TypeVar("T")

STORE = "store"


class StoreGateway:
    """Runs unit-of-work callables against the durable store."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], timeout: float = 5.0):
        self.session_factory = session_factory
        self.timeout = timeout

    async def run(self, operation: str, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """Run ``work`` in a transaction, committing on success."""

        async def _unit_of_work() -> T:
            async with session_context(self.session_factory) as session:
                return await work(session)

        try:
            return await asyncio.wait_for(_unit_of_work(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Store operation {operation} timed out after {self.timeout}s")
            raise DependencyUnavailableError(
                STORE, f"Store operation {operation} timed out"
            ) from e
        except (OperationalError, InterfaceError) as e:
            logger.error(f"Store operation {operation} failed: {e}")
            raise DependencyUnavailableError(STORE, f"Store operation {operation} failed") from e
