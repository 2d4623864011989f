"""
Shared pytest fixtures.

`FakeAdhService` is a small in-memory stand-in for the ADH identity, SDS and
Data Views endpoints, served through httpx.MockTransport so the real clients
run unchanged against it.
"""

import fnmatch
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qs

import httpx
import pytest

from adh_integration.config import AdhConfig
from orchestrator.config import WorkflowConfig

RESOURCE = "https://adh.test"
TENANT_ID = "tenant-1"
NAMESPACE_ID = "sample-ns"
NAMESPACE_PATH = f"/api/v1/Tenants/{TENANT_ID}/Namespaces/{NAMESPACE_ID}/"
TOKEN_PATH = "/identity/connect/token"
WELL_KNOWN_PATH = "/identity/.well-known/openid-configuration"


def parse_index(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_timespan(value: str) -> timedelta:
    days = 0
    if "." in value.split(":")[0]:
        day_part, value = value.split(".", 1)
        days = int(day_part)
    hours, minutes, seconds = value.split(":")
    return timedelta(days=days, hours=int(hours), minutes=int(minutes), seconds=float(seconds))


def _json(status: int, body: Any = None, headers: Optional[Dict[str, str]] = None) -> httpx.Response:
    if body is None:
        return httpx.Response(status, headers=headers)
    return httpx.Response(status, json=body, headers=headers)


class FakeAdhService:
    """In-memory ADH namespace with just enough behaviour for the sample."""

    def __init__(self, token_lifetime: int = 3600, page_size: Optional[int] = None):
        self.token_lifetime = token_lifetime
        self.page_size = page_size
        self.types: Dict[str, dict] = {}
        self.streams: Dict[str, dict] = {}
        self.events: Dict[str, Dict[datetime, dict]] = {}
        self.data_views: Dict[str, dict] = {}
        self.requests: List[httpx.Request] = []
        self.valid_tokens: set = set()
        self.tokens_issued = 0
        self.discovery_calls = 0
        # (method, relative path) -> status code to answer instead of handling the call
        self.failures: Dict[Tuple[str, str], int] = {}
        # relative paths whose DELETE answers 204 but leaves the resource in place
        self.sticky: set = set()

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def revoke_tokens(self) -> None:
        self.valid_tokens.clear()

    def api_requests(self, method: Optional[str] = None) -> List[httpx.Request]:
        return [
            request for request in self.requests
            if request.url.path.startswith(NAMESPACE_PATH) and (method is None or request.method == method)
        ]

    # --- dispatch -----------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        # httpx re-sends the same Request object on auth retries, so keep a snapshot
        self.requests.append(
            httpx.Request(request.method, request.url, headers=dict(request.headers), content=request.content)
        )
        path = request.url.path

        if path == WELL_KNOWN_PATH:
            self.discovery_calls += 1
            return _json(200, {"issuer": f"{RESOURCE}/identity", "token_endpoint": f"{RESOURCE}{TOKEN_PATH}"})
        if path == TOKEN_PATH:
            return self._issue_token(request)

        auth = request.headers.get("Authorization", "")
        if not auth.startswith("Bearer ") or auth[len("Bearer "):] not in self.valid_tokens:
            return _json(401, {"Error": "Unauthorized"})

        if not path.startswith(NAMESPACE_PATH):
            return _json(404)
        relative = path[len(NAMESPACE_PATH):]
        if (request.method, relative) in self.failures:
            return _json(self.failures[(request.method, relative)], {"Error": "Injected failure"},
                         headers={"Operation-Id": "op-123"})

        parts = relative.split("/")
        collection = parts[0]
        if collection == "Types" and len(parts) == 2:
            return self._crud(request, self.types, parts[1], relative)
        if collection == "Streams" and len(parts) == 2:
            body = json.loads(request.content) if request.method == "POST" else None
            if body is not None and body.get("TypeId") not in self.types:
                return _json(400, {"Error": f"Type {body.get('TypeId')} does not exist"})
            return self._crud(request, self.streams, parts[1], relative)
        if collection == "Streams" and len(parts) == 3 and parts[2] == "Data" and request.method == "POST":
            return self._insert(parts[1], json.loads(request.content))
        if collection == "DataViews":
            return self._data_views(request, parts[1:], relative)
        return _json(404)

    def _issue_token(self, request: httpx.Request) -> httpx.Response:
        form = parse_qs(request.content.decode())
        if form.get("grant_type") != ["client_credentials"] or form.get("client_secret") != ["secret"]:
            return _json(400, {"error": "invalid_client"})
        self.tokens_issued += 1
        token = f"token-{self.tokens_issued}"
        self.valid_tokens.add(token)
        return _json(200, {"access_token": token, "expires_in": self.token_lifetime, "token_type": "Bearer"})

    def _crud(self, request: httpx.Request, store: Dict[str, dict], resource_id: str, relative: str) -> httpx.Response:
        if request.method == "GET":
            if resource_id not in store:
                return _json(404, {"Error": f"{resource_id} not found"})
            return _json(200, store[resource_id])
        if request.method == "DELETE":
            if resource_id not in store:
                return _json(404, {"Error": f"{resource_id} not found"})
            if relative not in self.sticky:
                del store[resource_id]
                self.events.pop(resource_id, None)
            return _json(204)
        if request.method in ("POST", "PUT"):
            body = json.loads(request.content)
            if request.method == "POST" and resource_id in store:
                if store[resource_id] == body:
                    return _json(302, headers={"Location": str(request.url)})
                return _json(409, {"Error": "Conflict"})
            created = resource_id not in store
            store[resource_id] = body
            if store is self.streams:
                self.events.setdefault(resource_id, {})
            return _json(201 if created else 200, body)
        return _json(405)

    def _insert(self, stream_id: str, rows: List[dict]) -> httpx.Response:
        if stream_id not in self.streams:
            return _json(404, {"Error": f"{stream_id} not found"})
        stored = self.events[stream_id]
        for row in rows:
            index = parse_index(row["Time"])
            if index in stored:
                return _json(409, {"Error": f"Index {row['Time']} already exists"})
            stored[index] = row
        return _json(200)

    # --- data views ---------------------------------------------------------

    def _data_views(self, request: httpx.Request, parts: List[str], relative: str) -> httpx.Response:
        view_id = parts[0]
        if len(parts) == 1:
            return self._crud(request, self.data_views, view_id, relative)
        if view_id not in self.data_views:
            return _json(404, {"Error": f"{view_id} not found"})
        view = self.data_views[view_id]
        if parts[1:3] == ["Resolved", "DataItems"]:
            return _json(200, {"Items": [self._data_item(stream) for stream in self._resolve(view, parts[3])]})
        if parts[1:3] == ["Resolved", "IneligibleDataItems"]:
            return _json(200, {"Items": []})
        if parts[1:3] == ["Resolved", "AvailableFieldSets"]:
            return _json(200, {"Items": self._available_field_sets(view)})
        if parts[1] == "Data" and parts[2] in ("Interpolated", "Stored"):
            return self._data(request, view, parts[2])
        return _json(404)

    def _data_item(self, stream: dict) -> dict:
        return {"Id": stream["Id"], "Name": stream.get("Name"), "TypeId": stream["TypeId"], "ResourceType": "Stream"}

    def _resolve(self, view: dict, query_id: str) -> List[dict]:
        for query in view.get("Queries", []):
            if query["Id"] == query_id:
                return [stream for stream_id, stream in sorted(self.streams.items())
                        if fnmatch.fnmatchcase(stream_id, query["Value"])]
        return []

    def _value_properties(self, stream: dict) -> List[str]:
        sds_type = self.types[stream["TypeId"]]
        return [prop["Id"] for prop in sds_type["Properties"] if not prop.get("IsKey")]

    def _available_field_sets(self, view: dict) -> List[dict]:
        included = {field_set["QueryId"] for field_set in view.get("DataFieldSets", [])}
        field_sets = []
        for query in view.get("Queries", []):
            if query["Id"] in included:
                continue
            keys: List[str] = []
            for stream in self._resolve(view, query["Id"]):
                for prop in self._value_properties(stream):
                    if prop not in keys:
                        keys.append(prop)
            field_sets.append({
                "QueryId": query["Id"],
                "DataFields": [
                    {"Source": "PropertyId", "Keys": [key], "Label": "{IdentifyingValue} {FirstKey}"}
                    for key in keys
                ],
            })
        return field_sets

    def _columns(self, view: dict) -> List[Tuple[dict, dict, str]]:
        columns = []
        for field_set in view.get("DataFieldSets", []):
            streams = self._resolve(view, field_set["QueryId"])
            for stream in streams:
                properties = self._value_properties(stream)
                for field in field_set["DataFields"]:
                    if not any(key in properties for key in field["Keys"]):
                        continue
                    label = f"{stream['Id']} {field['Keys'][0]}"
                    if field.get("SummaryType"):
                        label += f" {field['SummaryType']}"
                    columns.append((stream, field, label))
        return columns

    def _cell(self, event: Optional[dict], field: dict) -> Any:
        if event is None:
            return None
        for key in field["Keys"]:
            if event.get(key) is not None:
                return event[key]
        return None

    def _data(self, request: httpx.Request, view: dict, kind: str) -> httpx.Response:
        params = request.url.params
        start = parse_index(params["startIndex"])
        end = parse_index(params["endIndex"])
        form = params.get("form", "default")
        verbose = request.headers.get("Accept-Verbosity", "verbose") != "non-verbose"
        columns = self._columns(view)

        if kind == "Interpolated":
            interval = parse_timespan(params["interval"])
            indexes = []
            index = start
            while index <= end:
                indexes.append(index)
                index += interval
        else:
            indexes = sorted({
                index
                for stream, _, _ in columns
                for index in self.events.get(stream["Id"], {})
                if start <= index <= end
            })

        rows = []
        for index in indexes:
            row: Dict[str, Any] = {"Timestamp": index.isoformat().replace("+00:00", "Z")}
            for stream, field, label in columns:
                stored = self.events.get(stream["Id"], {})
                if kind == "Interpolated":
                    previous = [t for t in stored if t <= index]
                    event = stored[max(previous)] if previous else None
                else:
                    event = stored.get(index)
                row[label] = self._cell(event, field)
            rows.append(row)

        page = int(params.get("page", "0"))
        headers = {}
        if self.page_size:
            total_pages = max(1, -(-len(rows) // self.page_size))
            rows = rows[page * self.page_size:(page + 1) * self.page_size]
            if page + 1 < total_pages:
                next_url = request.url.copy_merge_params({"page": str(page + 1)})
                headers["Link"] = f'<{next_url}>; rel="next"'

        labels = ["Timestamp"] + [label for _, _, label in columns]
        if form == "default":
            if not verbose:
                rows = [{key: value for key, value in row.items() if value is not None} for row in rows]
            return httpx.Response(200, json=rows, headers=headers)

        lines = []
        if form == "csvh":
            lines.append(",".join(labels))
        for row in rows:
            lines.append(",".join("" if row.get(label) is None else str(row[label]) for label in labels))
        return httpx.Response(200, text="\n".join(lines) + "\n", headers=headers)


@pytest.fixture
def fake_adh() -> FakeAdhService:
    return FakeAdhService()


@pytest.fixture
def adh_config() -> AdhConfig:
    return AdhConfig(
        tenant_id=TENANT_ID,
        namespace_id=NAMESPACE_ID,
        resource=RESOURCE,
        client_id="client",
        client_secret="secret",
        api_version="v1",
    )


@pytest.fixture
def workflow_config() -> WorkflowConfig:
    return WorkflowConfig(consistency_delay=0)
