"""
Interface for the Policy Repository.
"""

from abc import ABC, abstractmethod

from mbc_tracker.domain.entities.policy import Policy


class IPolicyRepository(ABC):
    """Persistence contract for named compliance policies."""

    @abstractmethod
    async def get_by_name(self, name: str) -> Policy | None:
        """Return the policy with the given name, if it exists."""
        pass

    @abstractmethod
    async def get_or_create(self, default: Policy) -> Policy:
        """
        Return the policy named ``default.name``, inserting ``default`` if absent.

        Must be race-safe: concurrent callers converge on a single persisted
        row rather than one of them failing on a uniqueness conflict.
        """
        pass
