"""Decode one streamed page of Data View results into rows."""
import json
from typing import AsyncIterator

import httpx

from adh_integration.models import OutputFormat

async def iter_rows(response: httpx.Response, form: OutputFormat, first_page: bool = True) -> AsyncIterator[str]:
    """Yield the rows of one page in server order.

    CSV forms are consumed line by line as the body arrives. With `csvh` every
    page starts with the header line; it is only kept on the first page so the
    concatenated output reads as one table. JSON pages are a single array and are
    parsed whole, each element re-encoded compactly.
    """
    if form == OutputFormat.DEFAULT:
        body = await response.aread()
        if not body.strip():
            return
        payload = json.loads(body)
        if not isinstance(payload, list):
            payload = [payload]
        for item in payload:
            yield json.dumps(item, separators=(",", ":"))
        return
    
    skip_header = form == OutputFormat.CSV_HEADER and not first_page
    async for line in response.aiter_lines():
        line = line.rstrip("\r\n")
        if not line:
            continue
        if skip_header:
            skip_header = False
            continue
        yield line
