"""Pytest configuration and fixtures for basebase.

HTTP is simulated with httpx.MockTransport in front of FakeBasebaseServer, an
in-memory stand-in for the documents / runQuery / tasks endpoints. No test
touches the network.
"""

import json
import time
from typing import Any
from urllib.parse import unquote

import httpx
import pytest
from jose import jwt

from basebase.core.config import BasebaseConfig
from basebase.core.registry import AppRegistry, Basebase, create_basebase
from basebase.domain.enums import QueryStrategy
from basebase.firestore._rest_encoding import decode_document, encode_document

TEST_BASE_URL = "https://basebase.test"
TEST_PROJECT = "testproj"
TEST_API_KEY = "bb_testproj_0123456789abcdef"
_DOCUMENTS_MARKER = "/databases/(default)/documents"
_UPDATE_TIME = "2024-05-01T12:00:00.123456789Z"


def make_token(exp_offset_seconds: int | None = 3600, **claims: Any) -> str:
    """HS256 JWT with an exp claim relative to now (None for no exp)."""
    payload: dict[str, Any] = {"sub": "user-1", **claims}
    if exp_offset_seconds is not None:
        payload["exp"] = int(time.time()) + exp_offset_seconds
    return jwt.encode(payload, "test-secret", algorithm="HS256")


def _json_response(status: int, body: Any) -> httpx.Response:
    return httpx.Response(status, json=body)


def _not_found(message: str = "Document not found") -> httpx.Response:
    return _json_response(
        404, {"error": {"code": 404, "message": message, "status": "NOT_FOUND"}}
    )


def _set_nested(target: dict[str, Any], dotted: str, source: dict[str, Any]) -> None:
    parts = dotted.split(".")
    value: Any = source
    for part in parts:
        if not isinstance(value, dict) or part not in value:
            value = None
            break
        value = value[part]
    node = target
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


class FakeBasebaseServer:
    """In-memory documents store speaking the REST wire format.

    Documents are keyed by resource name (``projects/p/databases/(default)/
    documents/users/u1``) and stored decoded. Every request is appended to
    ``requests`` so tests can inspect what was sent.
    """

    def __init__(self) -> None:
        self.documents: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.task_responses: dict[str, Any] = {}
        self.run_query_response: Any = None
        self.fail_with: tuple[int, Any] | None = None
        self.healthy = True
        self._next_id = 0

    # -- helpers for tests -------------------------------------------------

    def put(self, path: str, data: dict[str, Any], project: str = TEST_PROJECT) -> None:
        """Seed a document by relative path, e.g. put("users/alice", {...})."""
        self.documents[self.resource_name(path, project)] = data

    def read(self, path: str, project: str = TEST_PROJECT) -> dict[str, Any] | None:
        return self.documents.get(self.resource_name(path, project))

    @staticmethod
    def resource_name(path: str, project: str = TEST_PROJECT) -> str:
        return f"projects/{project}{_DOCUMENTS_MARKER}/{path}"

    def last_body(self) -> Any:
        return json.loads(self.requests[-1].content)

    # -- transport ---------------------------------------------------------

    def _wire(self, name: str) -> dict[str, Any]:
        doc = encode_document(self.documents[name])
        doc["name"] = name
        doc["updateTime"] = _UPDATE_TIME
        return doc

    def _children(self, collection_name: str) -> list[str]:
        prefix = f"{collection_name}/"
        return sorted(
            name
            for name in self.documents
            if name.startswith(prefix) and "/" not in name[len(prefix):]
        )

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            status, body = self.fail_with
            return _json_response(status, body)
        path = unquote(request.url.path)
        if path == "/health":
            if self.healthy:
                return _json_response(200, {"status": "ok"})
            return _json_response(503, {"error": {"message": "Service unavailable"}})
        if path in ("/requestCode", "/verifyCode"):
            return self._auth(path, request)
        if not request.headers.get("Authorization", "").startswith("Bearer "):
            return _json_response(401, {"error": {"message": "Missing bearer token"}})
        name = path.removeprefix("/v1/")
        if name.endswith(":runQuery"):
            return self._run_query(name.removesuffix(":runQuery"), request)
        if name.endswith(":do"):
            task = name.removesuffix(":do").rsplit("/", 1)[-1]
            return _json_response(200, self.task_responses.get(task, {"result": None}))
        _, _, relative = name.partition(f"{_DOCUMENTS_MARKER}/")
        if len(relative.split("/")) % 2 == 1:
            return self._collection(name, request)
        return self._document(name, request)

    def _auth(self, path: str, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if path == "/requestCode":
            return _json_response(200, {"message": "Code sent", "phone": body["phone"]})
        if body.get("code") != "123456":
            return _json_response(400, {"error": "Invalid verification code"})
        return _json_response(
            200,
            {
                "token": make_token(),
                "user": {"id": "user-1", "name": "Alice", "phone": body["phone"]},
                "project": {"id": TEST_PROJECT, "name": "Test Project"},
            },
        )

    def _collection(self, name: str, request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            self._next_id += 1
            doc_name = f"{name}/auto{self._next_id}"
            self.documents[doc_name] = decode_document(json.loads(request.content))
            return _json_response(200, self._wire(doc_name))
        children = self._children(name)
        page_size = int(request.url.params.get("pageSize", "300"))
        offset = int(request.url.params.get("pageToken", "0"))
        page = children[offset : offset + page_size]
        body: dict[str, Any] = {"documents": [self._wire(n) for n in page]}
        if offset + page_size < len(children):
            body["nextPageToken"] = str(offset + page_size)
        return _json_response(200, body if page else {})

    def _document(self, name: str, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            if name not in self.documents:
                return _not_found()
            return _json_response(200, self._wire(name))
        if request.method == "DELETE":
            self.documents.pop(name, None)
            return _json_response(200, {})
        # PATCH
        incoming = decode_document(json.loads(request.content))
        mask = request.url.params.get_list("updateMask.fieldPaths")
        must_exist = request.url.params.get("currentDocument.exists") == "true"
        if must_exist and name not in self.documents:
            return _not_found(f"No document to update: {name}")
        if mask:
            current = dict(self.documents.get(name, {}))
            for field_path in mask:
                _set_nested(current, field_path, incoming)
            self.documents[name] = current
        else:
            self.documents[name] = incoming
        return _json_response(200, self._wire(name))

    def _run_query(self, parent: str, request: httpx.Request) -> httpx.Response:
        if self.run_query_response is not None:
            return _json_response(200, self.run_query_response)
        structured = json.loads(request.content)["structuredQuery"]
        collection_id = structured["from"][0]["collectionId"]
        names = self._children(f"{parent}/{collection_id}")
        limit = structured.get("limit")
        if limit is not None:
            names = names[:limit]
        results = [{"document": self._wire(n), "readTime": _UPDATE_TIME} for n in names]
        # An empty result is a single envelope without a document.
        return _json_response(200, results or [{"readTime": _UPDATE_TIME}])


@pytest.fixture
def server() -> FakeBasebaseServer:
    return FakeBasebaseServer()


@pytest.fixture
async def http_client(server: FakeBasebaseServer) -> httpx.AsyncClient:
    """AsyncClient routed to the fake server."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(server.handle)) as client:
        yield client


@pytest.fixture
def token() -> str:
    return make_token()


@pytest.fixture
def config(token: str) -> BasebaseConfig:
    return BasebaseConfig(
        api_key=TEST_API_KEY,
        project_id=TEST_PROJECT,
        base_url=TEST_BASE_URL,
        token=token,
    )


@pytest.fixture
async def registry(http_client: httpx.AsyncClient) -> AppRegistry:
    """Fresh registry per test; cleared afterwards."""
    reg = AppRegistry(http_client=http_client)
    yield reg
    await reg.clear()


@pytest.fixture
def bb(registry: AppRegistry, config: BasebaseConfig) -> Basebase:
    """Default instance (structured queries)."""
    return registry.initialize_basebase(config)


@pytest.fixture
def client_bb(config: BasebaseConfig, http_client: httpx.AsyncClient) -> Basebase:
    """Instance that executes queries client-side."""
    return create_basebase(
        config.model_copy(update={"query_strategy": QueryStrategy.CLIENT}),
        name="client-side",
        http_client=http_client,
    )
