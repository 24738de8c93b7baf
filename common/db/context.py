"""
Database session context management.

Sessions live in ContextVars so that repository calls made inside an
explicit ``transaction()`` share one connection, while standalone calls
acquire and release their own. Each asyncio task gets a copy of the
context, so concurrent billing attempts never share a session.
"""

from contextvars import ContextVar
from functools import wraps
from typing import Optional, Callable, TypeVar, ParamSpec

from sqlalchemy.ext.asyncio import AsyncSession

# Current write session (if inside a write transaction)
_write_session: ContextVar[Optional[AsyncSession]] = ContextVar(
    "db_write_session", default=None
)

# Current read session (if inside a read transaction)
_read_session: ContextVar[Optional[AsyncSession]] = ContextVar(
    "db_read_session", default=None
)

# Forces all operations in this context to use readonly
_force_readonly: ContextVar[bool] = ContextVar("db_force_readonly", default=False)


def is_readonly_forced() -> bool:
    """Check if current context is forced to readonly."""
    return _force_readonly.get()


def get_current_session(readonly: bool = False) -> Optional[AsyncSession]:
    """Return the session of the enclosing transaction, if any."""
    if readonly or is_readonly_forced():
        return _read_session.get()
    return _write_session.get()


def set_current_session(session: AsyncSession, readonly: bool = False) -> object:
    if readonly:
        return _read_session.set(session)
    return _write_session.set(session)


def reset_current_session(token: object, readonly: bool = False) -> None:
    if readonly:
        _read_session.reset(token)
    else:
        _write_session.reset(token)


def in_transaction(readonly: bool = False) -> bool:
    return get_current_session(readonly=readonly) is not None


P = ParamSpec("P")
T = TypeVar("T")


def readonly(func: Callable[P, T]) -> Callable[P, T]:
    """
    Force every DB operation in this call chain onto readonly sessions.

    Usage:
        @readonly
        async def tenant_billing_report(tenant_id: int):
            subscriptions = await subscription_repo.list_by_tenant(tenant_id)
            logs = await payment_log_repo.list_by_tenant(tenant_id)
    """

    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        token = _force_readonly.set(True)
        try:
            return await func(*args, **kwargs)
        finally:
            _force_readonly.reset(token)

    return wrapper


def transactional(func: Callable[P, T]) -> Callable[P, T]:
    """Run the decorated coroutine inside one ``transaction()``."""

    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        from common.db.scoped import transaction as tx  # noqa: PLC0415

        async with tx():
            return await func(*args, **kwargs)

    return wrapper
