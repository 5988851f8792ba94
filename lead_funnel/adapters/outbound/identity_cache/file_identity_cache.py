"""JSON-file identity cache adapter (one file per browser profile)."""

import json
from pathlib import Path
from typing import Optional

from lead_funnel.application.ports.identity_cache import IdentityCache
from lead_funnel.domain.value_objects.contact_identity import ContactIdentity
from lead_funnel.infrastructure.logging.logger import logger


class FileIdentityCache(IdentityCache):
    """Stores the profile's identity as `<directory>/<profile_id>.json`."""

    def __init__(self, directory: str, profile_id: str) -> None:
        """
        Initialize file cache.

        Args:
            directory: Directory holding profile files
            profile_id: Browser profile identifier
        """
        self._path = Path(directory) / f"{profile_id}.json"

    async def load(self) -> Optional[ContactIdentity]:
        """
        Load the cached identity.

        Returns:
            Cached identity, or None if missing or unreadable
        """
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            # Treat a corrupt profile file as "nothing cached"
            logger.warning(f"Error reading identity cache {self._path}: {str(e)}")
            return None
        return ContactIdentity(
            name=data.get("name"),
            phone=data.get("phone"),
            email=data.get("email"),
        )

    async def store(self, identity: ContactIdentity) -> None:
        """
        Persist the identity.

        Args:
            identity: Completed identity
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"name": identity.name, "phone": identity.phone, "email": identity.email}
        self._path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
