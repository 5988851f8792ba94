"""Identity cache port (durable per-profile record on the visitor side)."""

from abc import ABC, abstractmethod
from typing import Optional

from lead_funnel.domain.value_objects.contact_identity import ContactIdentity


class IdentityCache(ABC):
    """Port interface for the single cached identity of a browser profile."""

    @abstractmethod
    async def load(self) -> Optional[ContactIdentity]:
        """
        Load the cached identity.

        Returns:
            Cached identity, or None if nothing was stored
        """
        pass

    @abstractmethod
    async def store(self, identity: ContactIdentity) -> None:
        """
        Persist the identity for the next visit.

        Args:
            identity: Completed identity
        """
        pass
