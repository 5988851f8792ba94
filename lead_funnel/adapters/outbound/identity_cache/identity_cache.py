"""In-memory identity cache adapter."""

from typing import Optional

from lead_funnel.application.ports.identity_cache import IdentityCache
from lead_funnel.domain.value_objects.contact_identity import ContactIdentity


class InMemoryIdentityCache(IdentityCache):
    """Identity cache that lives as long as the process."""

    def __init__(self, identity: Optional[ContactIdentity] = None) -> None:
        self._identity = identity

    async def load(self) -> Optional[ContactIdentity]:
        """Load the cached identity."""
        return self._identity

    async def store(self, identity: ContactIdentity) -> None:
        """Persist the identity."""
        self._identity = identity
