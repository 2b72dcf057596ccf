"""
Credential pool for account rotation.

Holds the API keys (one per upstream account) and the currently active one.
Many in-flight requests share a pool, so rotation is serialized with an
asyncio.Lock and uses compare-and-advance: a request can only move the pool
away from the credential it actually used.
"""

import asyncio

import structlog

logger = structlog.get_logger(__name__)


def mask_key(api_key: str) -> str:
    """Short, log-safe identifier for an API key."""
    if len(api_key) <= 8:
        return "***"
    return f"{api_key[:3]}...{api_key[-4:]}"


class CredentialPool:
    """
    Round-robin pool of upstream credentials.

    Attributes:
        rotations: Number of times the active credential actually changed
    """

    def __init__(self, api_keys: list[str]):
        """
        Initialize pool.

        Args:
            api_keys: Credentials in rotation order (duplicates removed)

        Raises:
            ValueError: No credentials supplied
        """
        keys = list(dict.fromkeys(k for k in api_keys if k))
        if not keys:
            raise ValueError("CredentialPool requires at least one API key")

        self._keys = keys
        self._index = 0
        self._lock = asyncio.Lock()
        self.rotations = 0

        logger.info("Credential pool initialized", size=len(keys), active=mask_key(keys[0]))

    def __len__(self) -> int:
        return len(self._keys)

    def active(self) -> str:
        """Currently active credential."""
        return self._keys[self._index]

    async def rotate(self, from_key: str) -> str:
        """
        Move off `from_key` and return the credential to use next.

        If another request already rotated away from `from_key`, the pool is
        left as is and the current active credential is returned.
        """
        async with self._lock:
            current = self._keys[self._index]
            if current != from_key:
                logger.debug(
                    "Credential already rotated by another request",
                    requested_from=mask_key(from_key),
                    active=mask_key(current),
                )
                return current

            if len(self._keys) == 1:
                logger.warning("Single credential configured, rotation has no effect")
                return current

            self._index = (self._index + 1) % len(self._keys)
            self.rotations += 1
            new_key = self._keys[self._index]

            logger.info(
                "Rotated credential",
                previous=mask_key(from_key),
                active=mask_key(new_key),
                rotations=self.rotations,
            )
            return new_key
