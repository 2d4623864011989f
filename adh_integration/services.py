"""Construction of the three ADH service handles."""
from typing import Optional

import httpx
import structlog

from adh_integration.auth import AuthenticationHandler
from adh_integration.config import AdhConfig
from adh_integration.dataview_client import DataViewClient
from adh_integration.sds_client import SdsDataClient, SdsMetadataClient
from adh_integration.verbosity import VerbosityHeaderHandler

logger = structlog.get_logger()

class AdhServices:
    """Metadata, data and Data View clients sharing one token cache.

    SDS calls and Data View calls go through separate HTTP clients; only the
    Data View client sends the Accept-Verbosity header.
    """
    
    def __init__(
        self,
        http: httpx.AsyncClient,
        data_view_http: httpx.AsyncClient,
        auth: AuthenticationHandler,
        verbosity: VerbosityHeaderHandler,
        config: AdhConfig
    ):
        self.http = http
        self.data_view_http = data_view_http
        self.auth = auth
        self.verbosity = verbosity
        self.config = config
        self.metadata = SdsMetadataClient(http, config)
        self.data = SdsDataClient(http, config)
        self.data_views = DataViewClient(data_view_http, config)
    
    @classmethod
    def create(
        cls,
        config: AdhConfig,
        verbosity: Optional[VerbosityHeaderHandler] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "AdhServices":
        config.ensure_configured()
        verbosity = verbosity or VerbosityHeaderHandler(verbose=True)
        auth = AuthenticationHandler(
            resource=config.base_url,
            client_id=config.client_id,
            client_secret=config.client_secret,
            refresh_skew=config.token_refresh_skew,
            transport=transport,
            timeout=config.request_timeout
        )
        http = httpx.AsyncClient(
            auth=auth,
            timeout=config.request_timeout,
            transport=transport,
            headers={"Accept": "application/json"}
        )
        # Only Data View requests carry Accept-Verbosity
        data_view_http = httpx.AsyncClient(
            auth=auth,
            timeout=config.request_timeout,
            transport=transport,
            headers={"Accept": "application/json"},
            event_hooks={"request": [verbosity]}
        )
        logger.info(
            "Created ADH service clients",
            resource=config.base_url,
            tenant_id=config.tenant_id,
            namespace_id=config.namespace_id,
            api_version=config.api_version
        )
        return cls(http, data_view_http, auth, verbosity, config)
    
    async def authenticate(self) -> None:
        """Fetch the first token eagerly so bad credentials fail fast."""
        await self.auth.get_token()
    
    async def aclose(self) -> None:
        try:
            await self.data_view_http.aclose()
        finally:
            await self.http.aclose()
