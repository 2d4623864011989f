"""Console output of computed Data View results."""
from datetime import datetime, timedelta
from typing import AsyncIterator, Callable, Optional

import structlog

from adh_integration.dataview_client import DataViewClient
from adh_integration.models import CacheBehavior, DataRequestOptions, OutputFormat
from shared.utils import expected_interpolated_row_count

logger = structlog.get_logger()

Echo = Callable[[str], None]

def _options(form: OutputFormat, verbose: Optional[bool]) -> DataRequestOptions:
    # Always recompute so repeated runs never read a stale cached render
    return DataRequestOptions(form=form, cache=CacheBehavior.REFRESH, verbose=verbose)

async def _write_rows(rows: AsyncIterator[str], echo: Echo) -> int:
    count = 0
    async for row in rows:
        echo(row)
        count += 1
    echo("")
    return count

async def output_interpolated_data(
    client: DataViewClient,
    data_view_id: str,
    start: datetime,
    end: datetime,
    interval: timedelta,
    form: OutputFormat = OutputFormat.DEFAULT,
    verbose: Optional[bool] = None,
    echo: Echo = print
) -> int:
    """Print interpolated rows as they arrive; returns how many rows were printed."""
    rows = client.get_data_interpolated(data_view_id, start, end, interval, _options(form, verbose))
    count = await _write_rows(rows, echo)
    logger.debug(
        "Printed interpolated data",
        data_view_id=data_view_id,
        rows=count,
        expected_rows_per_group=expected_interpolated_row_count(start, end, interval)
    )
    return count

async def output_stored_data(
    client: DataViewClient,
    data_view_id: str,
    start: datetime,
    end: datetime,
    form: OutputFormat = OutputFormat.DEFAULT,
    verbose: Optional[bool] = None,
    echo: Echo = print
) -> int:
    """Print stored rows as they arrive; returns how many rows were printed."""
    rows = client.get_data_stored(data_view_id, start, end, _options(form, verbose))
    count = await _write_rows(rows, echo)
    logger.debug("Printed stored data", data_view_id=data_view_id, rows=count)
    return count
