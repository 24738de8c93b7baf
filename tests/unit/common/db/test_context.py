import pytest
import asyncio

from common.db.context import (
    is_readonly_forced,
    get_current_session,
    set_current_session,
    reset_current_session,
    in_transaction,
    readonly,
    transactional,
    _force_readonly,
)
from packages.tenants.models.domain.tenant import TenantCreateModel
from packages.tenants.repositories.tenant_repository import TenantRepository


class TestContextVariables:
    """Test context variable behavior."""

    def test_default_state(self):
        assert is_readonly_forced() is False
        assert get_current_session(readonly=False) is None
        assert get_current_session(readonly=True) is None
        assert in_transaction(readonly=False) is False

    async def test_read_and_write_slots_are_separate(self, test_db):
        token = set_current_session(test_db, readonly=True)
        try:
            assert get_current_session(readonly=True) is test_db
            assert get_current_session(readonly=False) is None
        finally:
            reset_current_session(token, readonly=True)

        assert in_transaction(readonly=True) is False


class TestContextIsolation:
    """Concurrent billing attempts must never share a session."""

    async def test_concurrent_tasks_have_isolated_contexts(self, test_db):
        seen = {}

        async def attempt(task_id: str, owns_session: bool, delay: float):
            token = set_current_session(test_db) if owns_session else None
            await asyncio.sleep(delay)
            seen[task_id] = get_current_session() is test_db
            if token is not None:
                reset_current_session(token)

        await asyncio.gather(
            attempt("with_session", True, 0.01),
            attempt("without_session", False, 0.005),
        )

        assert seen == {"with_session": True, "without_session": False}

    async def test_readonly_flag_isolated_between_tasks(self):
        results = {}

        async def check(task_id: str, force: bool):
            token = _force_readonly.set(True) if force else None
            await asyncio.sleep(0.01)
            results[task_id] = is_readonly_forced()
            if token is not None:
                _force_readonly.reset(token)

        await asyncio.gather(check("report", True), check("billing", False))

        assert results == {"report": True, "billing": False}


class TestReadonlyDecorator:
    """Test the @readonly decorator."""

    async def test_sets_and_resets_flag(self):
        captured = None

        @readonly
        async def tenant_report(tenant_id: int, limit: int = 10):
            nonlocal captured
            captured = is_readonly_forced()
            return tenant_id, limit

        assert await tenant_report(3, limit=5) == (3, 5)
        assert captured is True
        assert is_readonly_forced() is False

    async def test_resets_on_exception(self):
        @readonly
        async def failing_report():
            raise ValueError("report failed")

        with pytest.raises(ValueError):
            await failing_report()

        assert is_readonly_forced() is False


class TestTransactionalDecorator:
    """Test the @transactional decorator with real repositories."""

    async def test_commits_all_writes(self):
        repo = TenantRepository()

        @transactional
        async def onboard():
            assert in_transaction() is True
            await repo.create(TenantCreateModel(name="Corner Cafe"))
            await repo.create(TenantCreateModel(name="Harbor Books"))

        await onboard()

        names = [tenant.name for tenant in await repo.get_multi()]
        assert names == ["Corner Cafe", "Harbor Books"]
        assert in_transaction() is False

    async def test_rolls_back_on_error(self):
        repo = TenantRepository()

        @transactional
        async def onboard():
            await repo.create(TenantCreateModel(name="Half Done Diner"))
            raise RuntimeError("enrollment failed")

        with pytest.raises(RuntimeError):
            await onboard()

        assert await repo.get_multi() == []
