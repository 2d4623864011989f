"""AVEVA Data Hub (ADH) connection configuration."""
import json
from pathlib import Path
from typing import Optional, Union

from pydantic.alias_generators import to_snake
from pydantic_settings import BaseSettings

from adh_integration.models import OutputFormat
from shared.exceptions import ConfigurationError

class AdhConfig(BaseSettings):
    """ADH connection configuration."""
    tenant_id: Optional[str] = None
    namespace_id: Optional[str] = None
    resource: str = "https://uswe.datahub.connect.aveva.com"
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    api_version: str = "v1"
    request_timeout: float = 30.0
    token_refresh_skew: int = 60  # seconds before expiry at which the token is refreshed
    output_format: OutputFormat = OutputFormat.DEFAULT
    
    class Config:
        env_file = ".env"
        env_prefix = "ADH_"
    
    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "AdhConfig":
        """Load settings from an appsettings.json file (TenantId, NamespaceId, Resource, ...).

        Keys missing from the file fall back to ADH_* environment variables.
        """
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Settings file {path} is not valid JSON: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Settings file {path} must contain a JSON object")
        
        values = {to_snake(key): value for key, value in raw.items()}
        known = {name: value for name, value in values.items() if name in cls.model_fields}
        return cls(**known)
    
    def is_configured(self) -> bool:
        """Check if ADH is properly configured."""
        return all([self.tenant_id, self.namespace_id, self.resource, self.client_id, self.client_secret])
    
    def ensure_configured(self) -> None:
        if not self.is_configured():
            raise ConfigurationError(
                "ADH not configured. Required: TenantId, NamespaceId, Resource, ClientId, ClientSecret. "
                f"Current: tenant={self.tenant_id}, namespace={self.namespace_id}, "
                f"resource={self.resource}, client_id={'*' if self.client_id else None}"
            )
    
    @property
    def base_url(self) -> str:
        return self.resource.rstrip("/")
    
    @property
    def namespace_url(self) -> str:
        """Root of every tenant/namespace scoped resource."""
        return f"{self.base_url}/api/{self.api_version}/Tenants/{self.tenant_id}/Namespaces/{self.namespace_id}"
