import asyncio
import json
from typing import Dict, List, Optional

import httpx
import pytest

from config.settings import Settings
from curator.core.local_store import MemoryLocalStore
from curator.models import CuratorResponse
from curator.store import GalleryStore


PNG_DATA_URL = "data:image/png;base64,iVBORw0KGgo="


class FakeGenerator:
    """Stand-in for ContentGenerationClient with scripted results."""

    def __init__(
        self,
        comment: str = "Nice",
        title: str = "Hi",
        painting: Optional[str] = PNG_DATA_URL,
        curator_error: Optional[Exception] = None,
        painting_error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.comment = comment
        self.title = title
        self.painting = painting
        self.curator_error = curator_error
        self.painting_error = painting_error
        self.delay = delay
        self.curator_calls: List[tuple] = []
        self.painting_calls: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def _enter(self):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1

    async def generate_curator_response(self, answer_text, language):
        self.curator_calls.append((answer_text, language))
        await self._enter()
        if self.curator_error is not None:
            raise self.curator_error
        return CuratorResponse(comment=self.comment, title=self.title)

    async def generate_painting(self, prompt_text, inline_image=None):
        self.painting_calls.append((prompt_text, inline_image))
        await self._enter()
        if self.painting_error is not None:
            raise self.painting_error
        return self.painting


class FakeFirestore:
    """In-memory Firestore REST endpoint served through httpx.MockTransport."""

    def __init__(self):
        self.documents: Dict[str, dict] = {}
        self.requests: List[httpx.Request] = []
        self.fail_writes = False
        self.fail_reads = False
        self._next_id = 1

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "POST":
            if self.fail_writes:
                return httpx.Response(503, json={"error": {"message": "unavailable"}})
            doc_id = f"gallery{self._next_id}"
            self._next_id += 1
            body = json.loads(request.content)
            name = f"{path}/{doc_id}".lstrip("/")
            self.documents[doc_id] = {"name": name, "fields": body["fields"]}
            return httpx.Response(200, json=self.documents[doc_id])
        if request.method == "GET":
            if self.fail_reads:
                return httpx.Response(500, json={"error": {"message": "boom"}})
            doc_id = path.rsplit("/", 1)[-1]
            if doc_id not in self.documents:
                return httpx.Response(404, json={"error": {"status": "NOT_FOUND"}})
            return httpx.Response(200, json=self.documents[doc_id])
        return httpx.Response(405)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def settings():
    s = Settings()
    s.google_api_key = "test-key"
    s.firestore_project = "meowseum-test"
    s.firestore_api_key = "web-key"
    s.local_store_dir = None
    s.generation_timeout = 5.0
    s.max_clients = 1000
    return s


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def firestore():
    return FakeFirestore()


@pytest.fixture
def local_store():
    return MemoryLocalStore()


@pytest.fixture
def store(local_store, settings, firestore):
    return GalleryStore(local_store, settings, transport=firestore.transport)
