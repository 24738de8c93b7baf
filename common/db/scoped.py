"""
Operation-scoped database sessions.

Connections are held only for the duration of one repository call, so a
billing attempt never keeps a connection checked out while it waits on the
payment gateway.

Usage:
    async with get_session() as session:
        result = await session.get(SubscriptionEntity, id)
    # Committed and released here

    async with transaction():
        await subscription_repo.update(id, update_model)
        await payment_log_repo.append(log_model)
    # Commits together, then releases
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from common.core.otel_axiom_exporter import get_logger
from common.db.session import AsyncSessionLocal, AsyncSessionLocalReadonly
from common.db.context import (
    get_current_session,
    set_current_session,
    reset_current_session,
    is_readonly_forced,
)

logger = get_logger(__name__)


def _session_factory(readonly: bool):
    # Resolved at call time so tests can swap the module-level factories
    return AsyncSessionLocalReadonly if readonly else AsyncSessionLocal


@asynccontextmanager
async def transaction(readonly: bool = False) -> AsyncGenerator[AsyncSession, None]:
    """
    Explicit transaction boundary.

    All DB operations inside share one session/connection.
    Commits on success (unless readonly), rolls back on exception.
    """
    effective_readonly = readonly or is_readonly_forced()

    start = time.perf_counter()
    async with _session_factory(effective_readonly)() as session:
        acquire_time = time.perf_counter() - start
        logger.debug(
            f"Transaction session acquire: {acquire_time * 1000:.2f}ms, readonly={effective_readonly}"
        )

        token = set_current_session(session, readonly=effective_readonly)
        try:
            yield session
            if not effective_readonly:
                await session.commit()
        except Exception as e:
            logger.error(f"Transaction rollback due to: {e}")
            await session.rollback()
            raise
        finally:
            reset_current_session(token, readonly=effective_readonly)


@asynccontextmanager
async def get_session(readonly: bool = False) -> AsyncGenerator[AsyncSession, None]:
    """
    Get a session for a single DB operation.

    Reuses the session of an enclosing ``transaction()``; otherwise acquires
    a new session, commits (unless readonly) and releases it immediately.
    """
    effective_readonly = readonly or is_readonly_forced()
    existing = get_current_session(readonly=effective_readonly)

    if existing:
        # Inside a transaction - the transaction owns commit/rollback
        yield existing
        return

    start = time.perf_counter()
    async with _session_factory(effective_readonly)() as session:
        acquire_time = time.perf_counter() - start
        logger.debug(
            f"Operation session acquire: {acquire_time * 1000:.2f}ms, readonly={effective_readonly}"
        )

        try:
            yield session
            if not effective_readonly:
                commit_start = time.perf_counter()
                await session.commit()
                commit_time = time.perf_counter() - commit_start
                logger.debug(f"Operation commit: {commit_time * 1000:.2f}ms")
        except Exception as e:
            logger.error(f"Operation rollback due to: {e}")
            await session.rollback()
            raise
