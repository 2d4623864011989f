"""ADH Data Views REST client."""
from datetime import datetime, timedelta
from typing import Any, AsyncIterator, Dict, Optional

import structlog

from adh_integration.base_client import BaseAdhClient
from adh_integration.models import DataItem, DataRequestOptions, DataView, FieldSet, ResolvedItems
from adh_integration.rows import iter_rows
from adh_integration.verbosity import VERBOSITY_HEADER, verbosity_value
from shared.utils import format_index, format_timespan

logger = structlog.get_logger()

class DataViewClient(BaseAdhClient):
    """Data View definitions, resolution and computed data."""

    async def create_or_update_data_view(self, data_view: DataView) -> DataView:
        """Persist the whole definition.

        There is no concurrency token: whatever was changed remotely since the
        local copy was fetched is overwritten.
        """
        response = await self._request("PUT", self._url("DataViews", data_view.id), json=data_view.to_wire())
        logger.info("Saved data view", data_view_id=data_view.id, status_code=response.status_code)
        if response.status_code == 204 or not response.content:
            return data_view
        return DataView.model_validate(response.json())

    async def get_data_view(self, data_view_id: str) -> DataView:
        response = await self._request("GET", self._url("DataViews", data_view_id))
        return DataView.model_validate(response.json())

    async def delete_data_view(self, data_view_id: str) -> None:
        await self._request("DELETE", self._url("DataViews", data_view_id))
        logger.info("Deleted data view", data_view_id=data_view_id)

    async def get_data_items(self, data_view_id: str, query_id: str) -> ResolvedItems[DataItem]:
        """Items the query resolved to that are eligible for the view."""
        url = self._url("DataViews", data_view_id, "Resolved", "DataItems", query_id)
        response = await self._request("GET", url)
        return ResolvedItems[DataItem].model_validate(response.json())

    async def get_ineligible_data_items(self, data_view_id: str, query_id: str) -> ResolvedItems[DataItem]:
        """Items matching the query's resource kind that cannot take part in the view."""
        url = self._url("DataViews", data_view_id, "Resolved", "IneligibleDataItems", query_id)
        response = await self._request("GET", url)
        return ResolvedItems[DataItem].model_validate(response.json())

    async def get_available_field_sets(self, data_view_id: str) -> ResolvedItems[FieldSet]:
        """Field sets the current queries make available but the view does not include yet."""
        url = self._url("DataViews", data_view_id, "Resolved", "AvailableFieldSets")
        response = await self._request("GET", url)
        return ResolvedItems[FieldSet].model_validate(response.json())

    def get_data_interpolated(
        self,
        data_view_id: str,
        start: datetime,
        end: datetime,
        interval: timedelta,
        options: Optional[DataRequestOptions] = None
    ) -> AsyncIterator[str]:
        """Stream rows resampled onto a fixed grid from start to end (both inclusive)."""
        params = {
            "startIndex": format_index(start),
            "endIndex": format_index(end),
            "interval": format_timespan(interval),
        }
        return self._stream_data(data_view_id, "Interpolated", params, options or DataRequestOptions())

    def get_data_stored(
        self,
        data_view_id: str,
        start: datetime,
        end: datetime,
        options: Optional[DataRequestOptions] = None
    ) -> AsyncIterator[str]:
        """Stream rows at the stored event indexes between start and end."""
        params = {
            "startIndex": format_index(start),
            "endIndex": format_index(end),
        }
        return self._stream_data(data_view_id, "Stored", params, options or DataRequestOptions())

    async def _stream_data(
        self,
        data_view_id: str,
        kind: str,
        params: Dict[str, Any],
        options: DataRequestOptions
    ) -> AsyncIterator[str]:
        """Follow the `next` links page by page, yielding rows as they are decoded.

        The result is forward-only: once consumed it cannot be restarted.
        """
        params = dict(params, form=options.form.value, cache=options.cache.value)
        if options.count is not None:
            params["count"] = options.count
        if options.filter:
            params["filter"] = options.filter

        headers = {}
        if options.verbose is not None:
            headers[VERBOSITY_HEADER] = verbosity_value(options.verbose)

        url: Optional[str] = self._url("DataViews", data_view_id, "Data", kind)
        page_params: Optional[Dict[str, Any]] = params
        page = 0
        rows = 0
        while url:
            async with self.http.stream("GET", url, params=page_params, headers=headers) as response:
                await self._raise_for_status(response, "GET")
                async for row in iter_rows(response, options.form, first_page=page == 0):
                    rows += 1
                    yield row
                url = response.links.get("next", {}).get("url")
            # next links already carry the full query string
            page_params = None
            page += 1

        logger.info("Retrieved data view data", data_view_id=data_view_id, kind=kind, pages=page, rows=rows)
