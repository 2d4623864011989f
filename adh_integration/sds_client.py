"""Sequential Data Store (SDS) metadata and data clients."""
from typing import Sequence

import structlog
from pydantic import BaseModel

from adh_integration.base_client import BaseAdhClient
from adh_integration.models import SdsStream, SdsType

logger = structlog.get_logger()

class SdsMetadataClient(BaseAdhClient):
    """CRUD for SDS types and streams."""
    
    async def get_or_create_type(self, sds_type: SdsType) -> SdsType:
        """Create the type, or return the existing one when an identical type is already there."""
        response = await self._request("POST", self._url("Types", sds_type.id), json=sds_type.to_wire(), allowed=(302,))
        if response.status_code == 302:
            logger.info("Type already exists", type_id=sds_type.id)
            return await self.get_type(sds_type.id)
        logger.info("Created type", type_id=sds_type.id)
        return SdsType.model_validate(response.json())
    
    async def get_type(self, type_id: str) -> SdsType:
        response = await self._request("GET", self._url("Types", type_id))
        return SdsType.model_validate(response.json())
    
    async def delete_type(self, type_id: str) -> None:
        await self._request("DELETE", self._url("Types", type_id))
        logger.info("Deleted type", type_id=type_id)
    
    async def get_or_create_stream(self, stream: SdsStream) -> SdsStream:
        """Create the stream, or return the existing one when an identical stream is already there."""
        response = await self._request("POST", self._url("Streams", stream.id), json=stream.to_wire(), allowed=(302,))
        if response.status_code == 302:
            logger.info("Stream already exists", stream_id=stream.id)
            return await self.get_stream(stream.id)
        logger.info("Created stream", stream_id=stream.id, type_id=stream.type_id)
        return SdsStream.model_validate(response.json())
    
    async def get_stream(self, stream_id: str) -> SdsStream:
        response = await self._request("GET", self._url("Streams", stream_id))
        return SdsStream.model_validate(response.json())
    
    async def delete_stream(self, stream_id: str) -> None:
        await self._request("DELETE", self._url("Streams", stream_id))
        logger.info("Deleted stream", stream_id=stream_id)

class SdsDataClient(BaseAdhClient):
    """Event data access for SDS streams."""
    
    async def insert_values(self, stream_id: str, values: Sequence[BaseModel]) -> None:
        """Insert events into a stream; the index of each event must not exist yet."""
        payload = [value.model_dump(mode="json", by_alias=True, exclude_none=True) for value in values]
        await self._request("POST", self._url("Streams", stream_id, "Data"), json=payload)
        logger.info("Inserted values", stream_id=stream_id, count=len(payload))
