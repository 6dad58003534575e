"""
Integration tests for PolicyStore.
"""

import asyncio

import pytest

from mbc_tracker.application.services import PolicyStore


@pytest.mark.integration
class TestPolicyStore:
    @pytest.mark.asyncio
    async def test_default_policy_comes_from_settings(self, uow_factory, test_settings):
        settings = test_settings.model_copy(
            update={"DEFAULT_CADENCE_DAYS": 28, "DEFAULT_MEASURES": ["GAD-7"]}
        )

        policy = await PolicyStore(uow_factory, settings).get_active_policy()

        assert policy.name == settings.POLICY_NAME
        assert policy.cadence_days == 28
        assert policy.grace_window_days == 3
        assert policy.expiration_days == 7
        assert policy.measures_required == ["GAD-7"]
        assert policy.require_at_intake is True

    @pytest.mark.asyncio
    async def test_persisted_policy_wins_over_later_defaults(self, uow_factory, test_settings):
        await PolicyStore(uow_factory, test_settings).get_active_policy()

        changed = test_settings.model_copy(update={"DEFAULT_CADENCE_DAYS": 7})
        policy = await PolicyStore(uow_factory, changed).get_active_policy()

        assert policy.cadence_days == 14

    @pytest.mark.asyncio
    async def test_concurrent_first_access_converges(self, uow_factory, test_settings):
        store = PolicyStore(uow_factory, test_settings)

        policies = await asyncio.gather(*(store.get_active_policy() for _ in range(5)))

        assert len({p.id for p in policies}) == 1
