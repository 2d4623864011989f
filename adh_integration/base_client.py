"""Shared request handling for the ADH REST clients."""
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
import structlog

from adh_integration.config import AdhConfig
from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    RemoteServiceError,
    ResourceConflictError,
    ResourceNotFoundError,
)

logger = structlog.get_logger()

class BaseAdhClient:
    """Common plumbing for the SDS and Data View clients.

    All clients share one httpx.AsyncClient, so authentication and the
    verbosity hook apply to every call.
    """
    
    def __init__(self, http: httpx.AsyncClient, config: AdhConfig):
        self.http = http
        self.config = config
    
    def _url(self, *parts: str) -> str:
        path = "/".join(quote(part, safe="") for part in parts)
        return f"{self.config.namespace_url}/{path}"
    
    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        allowed: tuple = ()
    ) -> httpx.Response:
        """Send a request and map error statuses onto the sample's exceptions.

        Statuses listed in `allowed` are returned to the caller instead of raising.
        """
        try:
            response = await self.http.request(method, url, json=json, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Request to ADH failed", method=method, url=url, error=str(e), error_type=type(e).__name__)
            raise RemoteServiceError(f"{method} {url} failed: {e}") from e
        
        if response.status_code not in allowed:
            await self._raise_for_status(response, method)
        return response
    
    async def _raise_for_status(self, response: httpx.Response, method: str) -> None:
        if response.status_code < 400:
            return
        
        await response.aread()
        status = response.status_code
        operation_id = response.headers.get("Operation-Id")
        snippet = (response.text or "").strip()[:2000]
        message = f"{method} {response.request.url} returned {status} {response.reason_phrase}: {snippet}"
        
        if status == 404:
            # Absence is an expected outcome of existence checks, keep it out of the error log
            logger.info("ADH resource not found", method=method, url=str(response.request.url))
            raise ResourceNotFoundError(message, status_code=status, operation_id=operation_id)
        
        logger.error(
            "ADH request returned an error",
            method=method,
            url=str(response.request.url),
            status_code=status,
            operation_id=operation_id
        )
        if status == 401:
            raise AuthenticationError(message)
        if status == 403:
            raise AuthorizationError(message)
        if status == 409:
            raise ResourceConflictError(message, status_code=status, operation_id=operation_id)
        raise RemoteServiceError(message, status_code=status, operation_id=operation_id)
