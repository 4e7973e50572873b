from __future__ import annotations

import asyncio
import logging

from ..codec.serializer import ConfigsSerializer
from ..core.registry import ConfigRegistry
from .backend import ConfigBackendService

logger = logging.getLogger(__name__)


class ConfigSynchronizer:
    """Keeps a registry in step with a remote backend.

    The fetch is awaited; the decode + apply runs synchronously with no await in
    between, so no other task on the loop sees a half-applied update.
    """

    def __init__(
        self,
        registry: ConfigRegistry,
        backend: ConfigBackendService,
        serializer: ConfigsSerializer | None = None,
    ) -> None:
        self.registry = registry
        self.backend = backend
        self.serializer = serializer or ConfigsSerializer()
        self._lock = asyncio.Lock()

    async def is_outdated(self) -> tuple[bool, int]:
        remote = await self.backend.get_remote_version()
        return remote > self.registry.version, remote

    async def check_for_update(self) -> bool:
        """Apply the remote config if it is newer than the registry. Returns True when applied."""

        async with self._lock:
            outdated, remote = await self.is_outdated()
            if not outdated:
                logger.debug("Configs up to date at version %d (remote %d)", self.registry.version, remote)
                return False

            payload = await self.backend.fetch_remote_configuration(remote)
            self.serializer.deserialize_into(payload, self.registry)
            logger.info("Applied remote configs version %d", self.registry.version)
            return True
