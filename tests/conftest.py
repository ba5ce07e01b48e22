"""Shared fixtures: sample payloads and a ClearlyDefined fake backed by httpx.MockTransport."""

from __future__ import annotations

import copy
import json
from typing import Any, Callable

import httpx
import pytest

from adapters.clearly_defined_client import ClearlyDefinedClient
from core.config import AppSettings
from core.domain.coordinates import Coordinates

BASE_URL = "https://cd.test"

LODASH = "npm/npmjs/-/lodash/4.17.21"

DEFINED_PAYLOAD: dict[str, Any] = {
    "coordinates": {"type": "npm", "provider": "npmjs", "name": "lodash", "revision": "4.17.21"},
    "described": {
        "releaseDate": "2021-02-20",
        "sourceLocation": {
            "type": "git",
            "provider": "github",
            "namespace": "lodash",
            "name": "lodash",
            "revision": "f299b52f39486275a9e6483b60a410e06520c538",
            "url": "https://github.com/lodash/lodash/tree/f299b52f39486275a9e6483b60a410e06520c538",
        },
        "urls": {
            "registry": "https://npmjs.com/package/lodash",
            "version": "https://npmjs.com/package/lodash/v/4.17.21",
            "download": "https://registry.npmjs.com/lodash/-/lodash-4.17.21.tgz",
        },
        "hashes": {"sha1": "679591c564c3bffaae8454cf0b3df370c3d6911c"},
        "files": 1054,
        "tools": ["clearlydefined/1.0.0", "licensee/1.0.0", "scancode/1.0.0"],
        "toolScore": {"total": 100, "date": 30, "source": 70},
        "score": {"total": 100, "date": 30, "source": 70},
    },
    "licensed": {
        "declared": "MIT",
        "toolScore": {"total": 76, "declared": 30, "discovered": 6, "consistency": 15, "spdx": 15, "texts": 10},
        "facets": {
            "core": {
                "attribution": {"unknown": 1040, "parties": ["Copyright OpenJS Foundation and other contributors"]},
                "discovered": {"unknown": 1051, "expressions": ["MIT"]},
                "files": 1054,
            }
        },
        "score": {"total": 76, "declared": 30, "discovered": 6, "consistency": 15, "spdx": 15, "texts": 10},
    },
    "files": [
        {
            "path": "package/LICENSE",
            "license": "MIT",
            "natures": ["license"],
            "hashes": {"sha1": "a6e3b8a2c1b5b2c4e2f4d9b9c1f0d3e6a7b8c9d0"},
        }
    ],
    "scores": {"effective": 88, "tool": 88},
    "_id": LODASH,
    "_meta": {"schemaVersion": "1.6.1", "updated": "2021-05-01T00:00:00.000Z"},
}


def defined_payload(coordinates: str, *, tools: list[str] | None = None) -> dict[str, Any]:
    """Copy of the sample definition for other coordinates / tool lists."""

    payload = copy.deepcopy(DEFINED_PAYLOAD)
    payload["coordinates"] = Coordinates.from_string(coordinates).model_dump(exclude_none=True)
    payload["_id"] = coordinates
    if tools is None:
        payload["described"].pop("tools")
    else:
        payload["described"]["tools"] = tools
    return payload


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content.decode("utf-8"))


class FakeClearlyDefined:
    """Records requests and answers them with `handler`."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def _dispatch(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def client(self, **kwargs: Any) -> ClearlyDefinedClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self._dispatch))
        kwargs.setdefault("url", BASE_URL)
        kwargs.setdefault("settings", AppSettings())
        return ClearlyDefinedClient(http_client=http_client, **kwargs)


@pytest.fixture
def fake_service() -> Callable[[Callable[[httpx.Request], httpx.Response]], FakeClearlyDefined]:
    return FakeClearlyDefined


@pytest.fixture
def lodash() -> Coordinates:
    return Coordinates(type="npm", provider="npmjs", name="lodash", revision="4.17.21")
