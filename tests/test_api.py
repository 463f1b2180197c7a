import time

import pytest
from fastapi.testclient import TestClient

from app.main import app, get_registry
from app.sessions import ShellRegistry
from curator.core.local_store import JsonFileLocalStore
from curator.core.localization import QUESTIONS
from tests.conftest import PNG_DATA_URL, FakeGenerator


CLIENT = {"client_id": "browser-1"}


@pytest.fixture
def registry(settings, firestore):
    return ShellRegistry(settings, generator=FakeGenerator(), transport=firestore.transport)


@pytest.fixture
def client(registry):
    app.dependency_overrides[get_registry] = lambda: registry
    with TestClient(app, headers={"user-agent": "pytest-browser"}) as c:
        yield c
    app.dependency_overrides.clear()


def wait_for_save(client):
    for _ in range(100):
        state = client.get("/api/shell", params=CLIENT).json()
        if state["save"] and state["save"]["status"] != "pending":
            return state
        time.sleep(0.01)
    raise AssertionError("save never finished")


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_texts_per_language(client):
    body = client.get("/api/texts", params={"lang": "zh"}).json()
    assert body["questions"] == QUESTIONS["zh"]
    assert body["texts"]["createBtn"] == "开启你的展览"

    assert client.get("/api/texts", params={"lang": "fr"}).status_code == 422


def test_full_interview_to_saved_gallery(client, firestore):
    state = client.get("/api/shell", params=CLIENT).json()
    assert state == {"mode": "landing", "language": "en", "has_history": False, "save": None}

    snap = client.post("/api/interview/start", json=CLIENT).json()
    assert snap["step"] == "input"
    assert snap["total"] == len(QUESTIONS["en"])

    for i in range(snap["total"]):
        body = client.post("/api/interview/submit", json={**CLIENT, "answer": f"memory {i}"}).json()
        assert body["step"] == "result"
        assert body["title"] == "Hi"
        result = client.post("/api/interview/advance", json=CLIENT).json()

    assert result["complete"] is True
    cards = result["gallery"]["cards"]
    assert len(cards) == len(QUESTIONS["en"])
    assert cards[0]["exhibit"] == "Exhibit 01"
    assert result["gallery"]["shell"]["mode"] == "gallery"

    state = wait_for_save(client)
    assert state["save"]["status"] == "saved"
    assert state["has_history"] is True
    stored = next(iter(firestore.documents.values()))
    assert stored["fields"]["deviceAgent"] == {"stringValue": "pytest-browser"}

    assert client.post("/api/restart", json=CLIENT).json()["mode"] == "landing"
    mine = client.post("/api/gallery/mine", json=CLIENT).json()
    assert mine["found"] is True
    assert len(mine["gallery"]["cards"]) == len(QUESTIONS["en"])


def test_failed_generation_keeps_answer(client, registry):
    registry.generator.painting = None
    client.post("/api/interview/start", json=CLIENT)

    body = client.post(
        "/api/interview/submit", json={**CLIENT, "answer": "Hello", "image": PNG_DATA_URL}
    ).json()

    assert body["step"] == "input"
    assert body["answer"] == "Hello"
    assert body["image"] == PNG_DATA_URL
    assert body["memory_count"] == 0
    assert body["notice"]


def test_empty_submission_is_422(client):
    client.post("/api/interview/start", json=CLIENT)
    response = client.post("/api/interview/submit", json={**CLIENT, "answer": "  "})
    assert response.status_code == 422


def test_bad_image_is_422(client):
    client.post("/api/interview/start", json=CLIENT)
    response = client.post("/api/interview/answer", json={**CLIENT, "image": "data:image/png;base64,@@"})
    assert response.status_code == 422


def test_clear_image(client):
    client.post("/api/interview/start", json=CLIENT)
    client.post("/api/interview/answer", json={**CLIENT, "image": PNG_DATA_URL})

    body = client.delete("/api/interview/image", params=CLIENT).json()
    assert body["image"] is None


def test_advance_before_result_is_409(client):
    client.post("/api/interview/start", json=CLIENT)
    response = client.post("/api/interview/advance", json=CLIENT)
    assert response.status_code == 409
    assert response.json()["step"] == "input"


def test_submit_without_interview_is_409(client):
    response = client.post("/api/interview/submit", json={**CLIENT, "answer": "hi"})
    assert response.status_code == 409


def test_submit_without_api_key_is_500(client, settings):
    settings.google_api_key = None
    client.post("/api/interview/start", json=CLIENT)
    response = client.post("/api/interview/submit", json={**CLIENT, "answer": "hi"})
    assert response.status_code == 500


def test_language_toggle_switches_questions(client):
    assert client.post("/api/language/toggle", json=CLIENT).json()["language"] == "zh"
    snap = client.post("/api/interview/start", json=CLIENT).json()
    assert snap["question"] == QUESTIONS["zh"][0]


def test_view_mine_without_history(client):
    body = client.post("/api/gallery/mine", json=CLIENT).json()
    assert body["found"] is False
    assert body["shell"]["mode"] == "landing"


def test_clients_are_isolated(client):
    client.post("/api/interview/start", json=CLIENT)
    other = client.get("/api/shell", params={"client_id": "browser-2"}).json()
    assert other["mode"] == "landing"


def test_registry_uses_file_store_when_configured(settings, tmp_path):
    settings.local_store_dir = str(tmp_path)
    registry = ShellRegistry(settings, generator=FakeGenerator())

    store = registry.local_store_for("browser-1")
    assert isinstance(store, JsonFileLocalStore)
    assert registry.local_store_for("browser-1") is store
    assert registry.get("browser-1") is registry.get("browser-1")
    assert len(registry) == 1


def test_registry_releases_least_recent_client_over_cap(settings):
    settings.max_clients = 2
    registry = ShellRegistry(settings, generator=FakeGenerator())

    first = registry.get("browser-1")
    first.start_interview()
    registry.get("browser-2")
    registry.get("browser-1")
    registry.get("browser-3")

    assert len(registry) == 2
    assert "browser-2" not in registry
    assert "browser-1" in registry and "browser-3" in registry
    assert first.interview is not None

    registry.get("browser-4")
    assert len(registry) == 2
    assert "browser-1" not in registry
    assert first.interview is None
    assert first.gallery is None
    assert len(registry._local_stores) == 2


def test_registry_cap_holds_for_bare_local_stores(settings):
    settings.max_clients = 3
    registry = ShellRegistry(settings, generator=FakeGenerator())
    kept = registry.get("browser-0")

    for i in range(1, 10):
        registry.local_store_for(f"browser-{i}")

    assert len(registry._local_stores) == 3
    assert registry.get("browser-0") is kept
