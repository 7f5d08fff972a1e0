"""
Async HTTP client for the Salesforce Commerce Cloud Open Commerce API (OCAPI).

Covers the two calls the dashboard needs:
- OAuth credential exchange (``/dw/oauth2/access_token``)
- Order search (``/dw/shop/<version>/order_search``)

One httpx.AsyncClient is shared across environments; each call receives the
EnvironmentConfig it should talk to. There is no retry: a failed call raises
immediately.
"""
from typing import Any, Dict, Optional

import httpx

from core.config import EnvironmentConfig, config
from core.exceptions import OrderFetchError, OCAPIDataError, TokenAcquisitionError
from core.observability import get_logger, get_correlation_id, Timer

logger = get_logger(__name__)


class OCAPIClient:
    """
    Async HTTP client for OCAPI.

    Usage:
        async with OCAPIClient() as client:
            token = await client.request_token(env_config)
            page = await client.search_orders(env_config, token["access_token"], payload)
    """

    def __init__(
        self,
        version: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize OCAPI client.

        Args:
            version: Shop API version (defaults to OCAPI_VERSION env var)
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.version = version or config.api.version
        self.timeout = timeout or config.api.request_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def connect(self) -> None:
        """Create HTTP client with connection pooling."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                transport=self._transport,
                limits=httpx.Limits(
                    max_keepalive_connections=10,
                    max_connections=20,
                ),
            )

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "OCAPIClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def token_url(self, env_config: EnvironmentConfig) -> str:
        return f"{env_config.base_url}/dw/oauth2/access_token"

    def order_search_url(self, env_config: EnvironmentConfig) -> str:
        return f"{env_config.base_url}/dw/shop/{self.version}/order_search"

    async def _post(self, url: str, operation: str, **kwargs) -> httpx.Response:
        """Execute a single POST. Transport errors propagate as httpx.HTTPError."""
        if not self._client:
            await self.connect()

        headers = dict(kwargs.pop("headers", None) or {})
        correlation_id = get_correlation_id()
        if correlation_id:
            headers["X-Request-ID"] = correlation_id

        with Timer(f"ocapi_{operation}", logger):
            return await self._client.post(url, headers=headers, **kwargs)

    async def request_token(self, env_config: EnvironmentConfig) -> Dict[str, Any]:
        """
        Exchange client id + pre-shared authorization header for a bearer token.

        Returns:
            Token response with 'access_token' and 'expires_in'

        Raises:
            TokenAcquisitionError: Transport failure, error status or malformed body
        """
        try:
            response = await self._post(
                self.token_url(env_config),
                "access_token",
                params={"client_id": env_config.client_id},
                data={"grant_type": config.api.grant_type},
                headers={"Authorization": env_config.auth_header},
            )
        except httpx.HTTPError as e:
            logger.error(
                f"Token request failed for {env_config.name}: {e}",
                extra={"environment": env_config.name, "error": str(e)},
            )
            raise TokenAcquisitionError(env_config.name, str(e)) from e

        if response.status_code >= 400:
            error_text = response.text[:500]
            logger.error(
                f"Token endpoint returned {response.status_code} for {env_config.name}",
                extra={"environment": env_config.name, "status_code": response.status_code},
            )
            raise TokenAcquisitionError(
                env_config.name, error_text, status_code=response.status_code
            )

        try:
            body = response.json()
        except ValueError as e:
            raise TokenAcquisitionError(env_config.name, "Token response is not JSON") from e

        if not isinstance(body, dict) or not body.get("access_token"):
            raise TokenAcquisitionError(env_config.name, "Token response missing access_token")

        return body

    async def search_orders(
        self,
        env_config: EnvironmentConfig,
        token: str,
        payload: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Run one order_search request (one page).

        Returns:
            API response with 'hits' list and 'total'

        Raises:
            OrderFetchError: Transport failure or error status
            OCAPIDataError: Body is not a JSON object
        """
        start = payload.get("start")
        try:
            response = await self._post(
                self.order_search_url(env_config),
                "order_search",
                json=payload,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.TimeoutException as e:
            logger.error(
                f"Order search timeout at start={start}",
                extra={"environment": env_config.name, "timeout": self.timeout},
            )
            raise OrderFetchError(
                f"Order search timeout after {self.timeout}s", start=start
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                f"Order search failed at start={start}: {e}",
                extra={"environment": env_config.name, "error": str(e)},
            )
            raise OrderFetchError("Order search request failed", str(e), start=start) from e

        if response.status_code >= 400:
            error_text = response.text[:500]
            logger.error(
                f"Order search returned {response.status_code}: {error_text}",
                extra={"environment": env_config.name, "status_code": response.status_code},
            )
            raise OrderFetchError(
                f"Order search returned {response.status_code}",
                error_text,
                status_code=response.status_code,
                start=start,
            )

        try:
            return response.json()
        except ValueError as e:
            raise OCAPIDataError(
                "Order search response is not JSON",
                expected="dict",
                got=response.headers.get("content-type", "unknown"),
            ) from e


# ═══════════════════════════════════════════════════════════════════════════════
# SINGLETON INSTANCE
# ═══════════════════════════════════════════════════════════════════════════════

_client_instance: Optional[OCAPIClient] = None


def get_client() -> OCAPIClient:
    """Get singleton OCAPI client instance."""
    global _client_instance
    if _client_instance is None:
        _client_instance = OCAPIClient()
    return _client_instance


async def close_client() -> None:
    """Close the singleton client's connections."""
    global _client_instance
    if _client_instance is not None:
        await _client_instance.close()
        _client_instance = None
