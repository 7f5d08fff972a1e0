"""
Per-environment bearer token cache.

Each environment owns one TokenState slot that moves through
EMPTY -> VALID -> EXPIRED -> VALID. Only ``get_token`` refreshes a slot.
Slots exist only for the environments given at construction; other names
are refused without being added.
Concurrent refreshes for the same environment are not deduplicated; the last
response to arrive wins.
"""
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from core.config import EnvironmentConfig, config, get_environment_config, normalize_environment
from core.exceptions import OCAPIError, TokenAcquisitionError
from core.observability import get_logger

logger = get_logger(__name__)


class TokenStatus(Enum):
    """Lifecycle of a cached token."""
    EMPTY = "empty"
    VALID = "valid"
    EXPIRED = "expired"


@dataclass
class TokenState:
    """Bearer token and its (early) expiry, as a wall-clock timestamp."""
    access_token: Optional[str] = None
    expires_at: Optional[float] = None

    def status(self, now: float) -> TokenStatus:
        if not self.access_token or self.expires_at is None:
            return TokenStatus.EMPTY
        if now < self.expires_at:
            return TokenStatus.VALID
        return TokenStatus.EXPIRED


class TokenCache:
    """
    In-memory token slots keyed by environment name.

    Usage:
        tokens = TokenCache(client)
        token = await tokens.get_token("PRD")
    """

    def __init__(
        self,
        client,
        environments: Iterable[str] = None,
        config_resolver: Callable[[str], EnvironmentConfig] = get_environment_config,
        clock: Callable[[], float] = time.time,
        expiry_margin: int = None,
    ):
        """
        Args:
            client: Object with an async ``request_token(env_config)`` (OCAPIClient)
            environments: Environments to pre-create EMPTY slots for
            config_resolver: Maps an environment name to its EnvironmentConfig
            clock: Wall-clock source, injectable for tests
            expiry_margin: Seconds subtracted from the server-declared lifetime
        """
        self.client = client
        self.config_resolver = config_resolver
        self.clock = clock
        self.expiry_margin = (
            config.api.token_expiry_margin_seconds if expiry_margin is None else expiry_margin
        )
        self._slots: Dict[str, TokenState] = {
            normalize_environment(name): TokenState()
            for name in (environments if environments is not None else config.environments)
        }

    def _slot(self, environment: str) -> TokenState:
        """Slot for a supported environment; never creates one."""
        slot = self._slots.get(environment)
        if slot is None:
            raise TokenAcquisitionError(environment, "not a supported environment")
        return slot

    @property
    def environments(self) -> List[str]:
        return list(self._slots)

    def state(self, environment: Optional[str] = None) -> TokenStatus:
        """Current status of an environment's slot (EMPTY for unsupported names)."""
        slot = self._slots.get(normalize_environment(environment))
        if slot is None:
            return TokenStatus.EMPTY
        return slot.status(self.clock())

    def invalidate(self, environment: Optional[str] = None) -> None:
        """Drop the cached token so the next call refreshes."""
        name = normalize_environment(environment)
        if name in self._slots:
            self._slots[name] = TokenState()

    async def get_token(self, environment: Optional[str] = None) -> str:
        """
        Return a valid bearer token, refreshing it when EMPTY or EXPIRED.

        Raises:
            TokenAcquisitionError: Unsupported environment, missing configuration
                or upstream auth failure
        """
        name = normalize_environment(environment)
        slot = self._slot(name)

        if slot.status(self.clock()) is TokenStatus.VALID:
            logger.debug(f"Using cached access token for {name} environment")
            return slot.access_token

        return await self.refresh(name)

    async def refresh(self, environment: str) -> str:
        """Exchange credentials for a new token and store it."""
        name = normalize_environment(environment)
        self._slot(name)
        env_config = self.config_resolver(name)
        if not env_config.is_complete:
            logger.error(
                f"Cannot refresh token: {name} environment is not configured",
                extra=env_config.describe(),
            )
            raise TokenAcquisitionError(name, "base URL or client id not configured")

        logger.info(f"Fetching a new access token for {name} environment")
        try:
            body = await self.client.request_token(env_config)
            expires_in = int(body.get("expires_in", 0))
        except TokenAcquisitionError:
            raise
        except (OCAPIError, TypeError, ValueError) as e:
            raise TokenAcquisitionError(name, str(e)) from e

        state = TokenState(
            access_token=body["access_token"],
            expires_at=self.clock() + (expires_in - self.expiry_margin),
        )
        self._slots[name] = state
        logger.info(
            f"Cached new token for {name} environment",
            extra={"expires_in": expires_in},
        )
        return state.access_token
