"""
Policy store.

Resolves the active compliance policy. Callers resolve it once per request
or job run and hand the resulting ``Policy`` to the generator and the
aggregator; nothing caches it globally.
"""

import logging

from mbc_tracker.core.config.settings import Settings
from mbc_tracker.core.interfaces.unit_of_work import UnitOfWorkFactory
from mbc_tracker.domain.entities.policy import Policy

logger = logging.getLogger(__name__)


class PolicyStore:
    def __init__(self, uow_factory: UnitOfWorkFactory, settings: Settings):
        self._uow_factory = uow_factory
        self._settings = settings

    @property
    def policy_name(self) -> str:
        return self._settings.POLICY_NAME

    def default_policy(self) -> Policy:
        """The hard-coded policy persisted on first access."""
        return Policy(
            name=self._settings.POLICY_NAME,
            cadence_days=self._settings.DEFAULT_CADENCE_DAYS,
            grace_window_days=self._settings.DEFAULT_GRACE_WINDOW_DAYS,
            expiration_days=self._settings.DEFAULT_EXPIRATION_DAYS,
            measures_required=list(self._settings.DEFAULT_MEASURES),
            require_at_intake=self._settings.DEFAULT_REQUIRE_AT_INTAKE,
        )

    async def get_active_policy(self) -> Policy:
        """
        Return the named policy, creating the default on first access.

        Concurrent first-access calls converge on a single persisted row.
        """
        async with self._uow_factory() as uow:
            policy = await uow.policies.get_or_create(self.default_policy())
        logger.debug("Active policy resolved: %s", policy.name)
        return policy
