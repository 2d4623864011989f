"""Client-credentials authentication against the ADH identity service."""
import time
from typing import AsyncGenerator, Optional

import httpx
import structlog

from shared.exceptions import AuthenticationError

logger = structlog.get_logger()

class AuthenticationHandler(httpx.Auth):
    """Attach an ADH bearer token to every request and refresh it before it expires.

    The token endpoint is discovered once from the identity service's
    OpenID configuration. A 401 answer drops the cached token and the request
    is retried a single time with a fresh one.
    """
    
    WELL_KNOWN_PATH = "/identity/.well-known/openid-configuration"
    
    def __init__(
        self,
        resource: str,
        client_id: str,
        client_secret: str,
        refresh_skew: int = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0
    ):
        self.resource = resource.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_skew = refresh_skew
        self._transport = transport
        self._timeout = timeout
        self._token_endpoint: Optional[str] = None
        self._access_token: Optional[str] = None
        self._expires_at = 0.0
    
    def sync_auth_flow(self, request: httpx.Request):
        raise RuntimeError("AuthenticationHandler only supports httpx.AsyncClient")
    
    async def async_auth_flow(self, request: httpx.Request) -> AsyncGenerator[httpx.Request, httpx.Response]:
        token = await self.get_token()
        request.headers["Authorization"] = f"Bearer {token}"
        response = yield request
        
        if response.status_code == 401:
            logger.warning("Request was rejected as unauthorized, refreshing token", url=str(request.url))
            self.invalidate()
            token = await self.get_token()
            request.headers["Authorization"] = f"Bearer {token}"
            yield request
    
    def invalidate(self) -> None:
        self._access_token = None
        self._expires_at = 0.0
    
    @property
    def token_is_valid(self) -> bool:
        return self._access_token is not None and time.monotonic() < self._expires_at - self.refresh_skew
    
    async def get_token(self) -> str:
        """Return a cached token, fetching a new one when missing or about to expire."""
        if self.token_is_valid:
            return self._access_token
        
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            if self._token_endpoint is None:
                self._token_endpoint = await self._discover_token_endpoint(client)
            
            try:
                response = await client.post(
                    self._token_endpoint,
                    data={
                        "grant_type": "client_credentials",
                        "client_id": self.client_id,
                        "client_secret": self.client_secret
                    }
                )
            except httpx.HTTPError as e:
                logger.error("Failed to reach token endpoint", error=str(e), token_endpoint=self._token_endpoint)
                raise AuthenticationError(f"Could not reach token endpoint: {e}") from e
        
        if response.status_code != 200:
            logger.error(
                "Token request was rejected",
                status_code=response.status_code,
                client_id=self.client_id
            )
            raise AuthenticationError(
                f"Token request failed with {response.status_code}: {response.text[:500]}"
            )
        
        body = response.json()
        access_token = body.get("access_token")
        if not access_token:
            raise AuthenticationError("Token response did not contain an access_token")
        
        self._access_token = access_token
        self._expires_at = time.monotonic() + float(body.get("expires_in", 3600))
        logger.info("Obtained access token", expires_in=body.get("expires_in"))
        return self._access_token
    
    async def _discover_token_endpoint(self, client: httpx.AsyncClient) -> str:
        url = f"{self.resource}{self.WELL_KNOWN_PATH}"
        try:
            response = await client.get(url, headers={"Accept": "application/json"})
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Failed to discover token endpoint", error=str(e), url=url)
            raise AuthenticationError(f"Could not discover token endpoint at {url}: {e}") from e
        
        token_endpoint = response.json().get("token_endpoint")
        if not token_endpoint:
            raise AuthenticationError(f"OpenID configuration at {url} has no token_endpoint")
        logger.info("Discovered token endpoint", token_endpoint=token_endpoint)
        return token_endpoint
