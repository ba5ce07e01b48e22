"""Tests for the httpx ClearlyDefined client against a MockTransport fake."""

import asyncio

import httpx
import pytest

from conftest import BASE_URL, DEFINED_PAYLOAD, LODASH, request_json
from core.config import AppSettings
from core.domain.coordinates import Coordinates
from core.domain.harvest_status import HarvestStatus
from core.domain.models import (
    ContributionInfo,
    ContributionPatch,
    ContributionType,
    Curation,
    CurationLicensed,
    HarvestRequest,
    Patch,
)
from core.domain.server import Server
from core.errors import RemoteServiceError, SchemaViolation, TransportError
from adapters.clearly_defined_client import ClearlyDefinedClient


def _run(coro):
    return asyncio.run(coro)


def _json(payload, status=200):
    return lambda request: httpx.Response(status, json=payload)


class TestBaseAddress:
    def _client(self, *args, **kwargs):
        kwargs.setdefault("settings", AppSettings(server=Server.PRODUCTION, base_url=None))
        return ClearlyDefinedClient(*args, http_client=httpx.AsyncClient(), **kwargs)

    def test_local_server(self):
        assert self._client(Server.LOCAL).base_url == "http://localhost:4000"

    def test_url_override_takes_precedence(self):
        assert self._client(Server.LOCAL, "https://mirror.example/api").base_url == "https://mirror.example/api"

    def test_default_is_production(self):
        assert self._client().base_url == "https://api.clearlydefined.io"

    def test_settings_are_used_without_explicit_selection(self):
        settings = AppSettings(server=Server.DEVELOPMENT, base_url=None)
        assert self._client(settings=settings).base_url == "https://dev-api.clearlydefined.io"

        settings = AppSettings(server=Server.DEVELOPMENT, base_url="http://cd.internal:4000")
        assert self._client(settings=settings).base_url == "http://cd.internal:4000"

    def test_explicit_server_beats_settings_override(self):
        settings = AppSettings(base_url="http://cd.internal:4000")

        assert self._client(Server.LOCAL, settings=settings).base_url == "http://localhost:4000"


class TestDefinitions:
    def test_batch_issues_a_single_post(self, fake_service, lodash):
        fake = fake_service(_json({LODASH: DEFINED_PAYLOAD}))

        result = _run(fake.client().batch_get_definitions({lodash}))

        assert len(fake.requests) == 1
        request = fake.requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}/definitions"
        assert request_json(request) == [LODASH]
        assert list(result) == [lodash]
        assert result[lodash].harvest_status() is HarvestStatus.HARVESTED

    def test_batch_encodes_every_coordinate_once(self, fake_service, lodash):
        other = Coordinates.from_string("maven/mavencentral/org.slf4j/slf4j-api/2.0.9")
        fake = fake_service(_json({}))

        _run(fake.client().batch_get_definitions([lodash, other, lodash]))

        assert request_json(fake.requests[0]) == [LODASH, "maven/mavencentral/org.slf4j/slf4j-api/2.0.9"]

    def test_search(self, fake_service):
        uris = ["npm/npmjs/-/lodash/4.17.20", "npm/npmjs/-/lodash/4.17.21"]
        fake = fake_service(_json(uris))

        result = _run(fake.client().search_definitions("lodash"))

        request = fake.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/definitions"
        assert request.url.params["pattern"] == "lodash"
        assert result == uris

    def test_missing_required_field_is_a_schema_violation(self, fake_service, lodash):
        payload = dict(DEFINED_PAYLOAD)
        payload.pop("_meta")
        fake = fake_service(_json({LODASH: payload}))

        with pytest.raises(SchemaViolation) as excinfo:
            _run(fake.client().batch_get_definitions([lodash]))

        assert excinfo.value.field is not None
        assert excinfo.value.field.endswith("_meta")

    def test_non_json_body_is_a_schema_violation(self, fake_service, lodash):
        fake = fake_service(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

        with pytest.raises(SchemaViolation):
            _run(fake.client().batch_get_definitions([lodash]))


class TestCurations:
    def test_get_curation_path(self, fake_service):
        fake = fake_service(_json({"licensed": {"declared": "Apache-2.0"}}))
        coordinates = Coordinates.from_string("maven/mavencentral/org.apache.commons/commons-lang3/3.14.0")

        curation = _run(fake.client().get_curation(coordinates))

        request = fake.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/curations/maven/mavencentral/org.apache.commons/commons-lang3/3.14.0"
        assert curation.licensed.declared == "Apache-2.0"

    def test_get_curation_uses_placeholder_and_encoding(self, fake_service):
        fake = fake_service(_json({}))
        coordinates = Coordinates(type="git", provider="github", name="a/b", revision="1.0")

        _run(fake.client().get_curation(coordinates))

        assert fake.requests[0].url.raw_path == b"/curations/git/github/-/a%2Fb/1.0"

    def test_get_curation_requires_revision(self, fake_service):
        fake = fake_service(_json({}))

        with pytest.raises(ValueError):
            _run(fake.client().get_curation(Coordinates.from_string("npm/npmjs/-/lodash")))

        assert fake.requests == []

    def test_batch_get_curations(self, fake_service, lodash):
        fake = fake_service(
            _json({LODASH: {"curations": {LODASH: {"licensed": {"declared": "MIT"}}}, "contributions": []}})
        )

        result = _run(fake.client().batch_get_curations([lodash]))

        request = fake.requests[0]
        assert (request.method, request.url.path) == ("POST", "/curations")
        assert request_json(request) == [LODASH]
        assert result[lodash].curations[lodash].licensed.declared == "MIT"

    def test_submit_curation(self, fake_service, lodash):
        fake = fake_service(_json({"prNumber": 42, "url": "https://github.com/clearlydefined/curated-data/pull/42"}))
        patch = ContributionPatch(
            contribution_info=ContributionInfo(
                type=ContributionType.INCORRECT,
                summary="Fix lodash license",
                details="Declared license is wrong.",
                resolution="See package.json.",
                removed_definitions=False,
            ),
            patches=[
                Patch(
                    coordinates=Coordinates.from_string("npm/npmjs/-/lodash"),
                    revisions={"4.17.21": Curation(licensed=CurationLicensed(declared="MIT"))},
                )
            ],
        )

        summary = _run(fake.client().submit_curation(patch))

        request = fake.requests[0]
        assert (request.method, request.url.path) == ("PATCH", "/curations")
        assert request_json(request) == patch.to_wire()
        assert summary.pr_number == 42


class TestHarvest:
    def test_request_harvest(self, fake_service):
        fake = fake_service(lambda request: httpx.Response(201, text="Harvest queued"))
        requests = [HarvestRequest(coordinates=LODASH), HarvestRequest(tool="scancode", coordinates=LODASH)]

        reply = _run(fake.client().request_harvest(requests))

        request = fake.requests[0]
        assert (request.method, request.url.path) == ("POST", "/harvest")
        assert request_json(request) == [{"coordinates": LODASH}, {"tool": "scancode", "coordinates": LODASH}]
        assert reply == "Harvest queued"

    def test_list_harvest_tools(self, fake_service, lodash):
        fake = fake_service(_json(["clearlydefined", "licensee", "scancode"]))

        tools = _run(fake.client().list_harvest_tools(lodash))

        request = fake.requests[0]
        assert request.url.path == "/harvest/npm/npmjs/-/lodash/4.17.21"
        assert request.url.params["form"] == "list"
        assert tools == ["clearlydefined", "licensee", "scancode"]

    def test_harvest_tool_data_is_streamed(self, fake_service, lodash):
        body = b"x" * 100_000
        fake = fake_service(lambda request: httpx.Response(200, content=body))

        async def collect():
            chunks = []
            async for chunk in fake.client().get_harvest_tool_data(lodash, "scancode", "32.0.8"):
                chunks.append(chunk)
            return chunks

        chunks = _run(collect())

        request = fake.requests[0]
        assert request.url.path == "/harvest/npm/npmjs/-/lodash/4.17.21/scancode/32.0.8"
        assert request.url.params["form"] == "streamed"
        assert b"".join(chunks) == body

    def test_harvest_tool_data_error(self, fake_service, lodash):
        fake = fake_service(lambda request: httpx.Response(404, text="Not found"))

        async def collect():
            return [chunk async for chunk in fake.client().get_harvest_tool_data(lodash, "scancode", "1")]

        with pytest.raises(RemoteServiceError) as excinfo:
            _run(collect())

        assert excinfo.value.status_code == 404
        assert excinfo.value.body == "Not found"


class TestErrors:
    @pytest.mark.parametrize(
        "call",
        [
            lambda client, c: client.batch_get_definitions([c]),
            lambda client, c: client.search_definitions("lodash"),
            lambda client, c: client.get_curation(c),
            lambda client, c: client.batch_get_curations([c]),
            lambda client, c: client.request_harvest([HarvestRequest(coordinates=str(c))]),
            lambda client, c: client.list_harvest_tools(c),
        ],
    )
    def test_404_is_a_remote_service_error(self, fake_service, lodash, call):
        fake = fake_service(lambda request: httpx.Response(404, json={"error": "not found"}))

        with pytest.raises(RemoteServiceError) as excinfo:
            _run(call(fake.client(), lodash))

        assert excinfo.value.status_code == 404
        assert "not found" in excinfo.value.body

    def test_server_error_carries_method_and_url(self, fake_service, lodash):
        fake = fake_service(lambda request: httpx.Response(503, text="unavailable"))

        with pytest.raises(RemoteServiceError) as excinfo:
            _run(fake.client().list_harvest_tools(lodash))

        assert excinfo.value.method == "GET"
        assert excinfo.value.url.endswith("/harvest/npm/npmjs/-/lodash/4.17.21")
        assert "503" in str(excinfo.value)

    def test_connection_failure_is_a_transport_error(self, fake_service, lodash):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        fake = fake_service(refuse)

        with pytest.raises(TransportError):
            _run(fake.client().batch_get_definitions([lodash]))

    def test_timeout_is_a_transport_error(self, fake_service, lodash):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        fake = fake_service(slow)

        with pytest.raises(TransportError):
            _run(fake.client().search_definitions("lodash"))


def test_owned_http_client_is_closed():
    client = ClearlyDefinedClient(url=BASE_URL, settings=AppSettings())

    async def use():
        async with client:
            pass

    _run(use())

    assert client._http.is_closed


def test_borrowed_http_client_stays_open():
    http_client = httpx.AsyncClient()
    client = ClearlyDefinedClient(url=BASE_URL, http_client=http_client, settings=AppSettings())

    _run(client.aclose())

    assert not http_client.is_closed


def test_empty_namespace_finds_its_batch_result(fake_service):
    fake = fake_service(_json({LODASH: DEFINED_PAYLOAD}))
    requested = Coordinates(type="npm", provider="npmjs", namespace="", name="lodash", revision="4.17.21")

    result = _run(fake.client().batch_get_definitions([requested]))

    assert request_json(fake.requests[0]) == [LODASH]
    assert result[requested].scores.effective == 88
