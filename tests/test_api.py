import pytest
from fastapi.testclient import TestClient

from flashlingo.app import create_app


@pytest.fixture
def client(test_settings):
    app = create_app(test_settings)
    with TestClient(app) as client:
        yield client


def test_list_vocabulary(client):
    response = client.get("/api/vocabulary")
    assert response.status_code == 200
    data = response.json()
    assert [item["id"] for item in data] == ["chat", "chien", "maison"]
    assert data[0]["secondary_text"] == "Katze"


def test_list_vocabulary_alphabetical_reverse_direction(client):
    response = client.get(
        "/api/vocabulary",
        params={"sort": "alphabetical", "direction": "secondary-to-primary"},
    )
    assert [item["secondary_text"] for item in response.json()] == ["Haus", "Hund", "Katze"]


def test_search(client):
    assert [item["id"] for item in client.get("/api/vocabulary/search", params={"q": "HUND"}).json()] == ["chien"]
    assert client.get("/api/vocabulary/search").json() == []


def test_review_flow(client):
    cards = client.get("/api/review/due", params={"count": 2}).json()
    assert len(cards) == 2
    assert {card["id"] for card in cards} <= {"chat", "chien", "maison"}

    for card in cards:
        response = client.post("/api/review", json={"item_id": card["id"], "was_correct": True})
        assert response.status_code == 200
        assert response.json()["record"]["interval"] == 1

    remaining = client.get("/api/review/due", params={"count": 2}).json()
    assert len(remaining) == 1
    client.post("/api/review", json={"item_id": remaining[0]["id"], "was_correct": True})

    stats = client.get("/api/statistics").json()
    assert stats["total_items"] == 3
    assert stats["items_with_records"] == 3
    assert stats["progress_percent"] == 100
    assert stats["average_success_rate"] == 1.0


def test_flashcard_direction(client):
    cards = client.get("/api/review/due", params={"count": 3, "direction": "secondary-to-primary"}).json()
    by_id = {card["id"]: card for card in cards}
    assert by_id["chat"]["prompt"] == "Katze"
    assert by_id["chat"]["answer"] == "chat"


def test_negative_count_returns_empty(client):
    assert client.get("/api/review/due", params={"count": -3}).json() == []


def test_review_record_endpoint(client):
    assert client.get("/api/review/chat").status_code == 404
    client.post("/api/review", json={"item_id": "chat", "was_correct": False})
    record = client.get("/api/review/chat").json()
    assert record["review_count"] == 1
    assert record["ease"] == pytest.approx(2.3)
    assert len(record["history"]) == 1


def test_repeated_misses_flag_item_hard(client):
    for _ in range(3):
        client.post("/api/review", json={"item_id": "chien", "was_correct": False})

    items = {item["id"]: item for item in client.get("/api/vocabulary").json()}
    assert items["chien"]["difficulty"] == "hard"

    difficult = client.get("/api/review/difficult").json()
    assert [card["id"] for card in difficult] == ["chien"]


def test_mark_difficult(client):
    response = client.post("/api/vocabulary/maison/difficult")
    assert response.status_code == 200
    assert response.json()["ease"] == pytest.approx(1.5)

    items = {item["id"]: item for item in client.get("/api/vocabulary").json()}
    assert items["maison"]["difficulty"] == "hard"

    assert client.post("/api/vocabulary/inconnu/difficult").status_code == 404


def test_mark_learned(client):
    assert client.post("/api/vocabulary/chat/learned").json()["review_count"] == 0
    assert client.get("/api/statistics").json()["items_with_records"] == 1
    assert client.post("/api/vocabulary/inconnu/learned").status_code == 404


def test_reset(client):
    client.post("/api/review", json={"item_id": "chat", "was_correct": True})
    assert client.post("/api/reset").json() == {"status": "success"}
    assert client.get("/api/statistics").json()["items_with_records"] == 0


def test_state_survives_restart(test_settings):
    with TestClient(create_app(test_settings)) as client:
        client.post("/api/review", json={"item_id": "chat", "was_correct": True})

    with TestClient(create_app(test_settings)) as client:
        assert client.get("/api/review/chat").json()["review_count"] == 1


def test_missing_catalog_then_reload(test_settings, tmp_path, catalog_file):
    test_settings.CATALOG_FILE = str(tmp_path / "later.json")
    with TestClient(create_app(test_settings)) as client:
        assert client.get("/api/vocabulary").status_code == 503
        assert client.get("/api/review/due").status_code == 503
        assert client.post("/api/vocabulary/reload").status_code == 500

        (tmp_path / "later.json").write_text(catalog_file.read_text(encoding="utf-8"), encoding="utf-8")
        response = client.post("/api/vocabulary/reload")
        assert response.json() == {"status": "success", "count": 3}
        assert len(client.get("/api/vocabulary").json()) == 3


def test_review_unknown_word_is_rejected(client):
    response = client.post("/api/review", json={"item_id": "chta", "was_correct": True})
    assert response.status_code == 404

    stats = client.get("/api/statistics").json()
    assert stats["items_with_records"] == 0
    assert stats["progress_percent"] == 0


def test_review_requires_an_outcome(client):
    assert client.post("/api/review", json={"item_id": "chat"}).status_code == 400


def test_typed_answer_is_graded(client):
    response = client.post("/api/review", json={"item_id": "chat", "answer": "  katze! "})
    outcome = response.json()
    assert outcome["was_correct"] is True
    assert outcome["skipped"] is False
    assert outcome["correct_answer"] == "Katze"
    assert outcome["record"]["review_count"] == 1

    response = client.post(
        "/api/review",
        json={"item_id": "chien", "answer": "Hund", "direction": "secondary-to-primary"},
    )
    assert response.json()["was_correct"] is False
    assert response.json()["correct_answer"] == "chien"


def test_skipped_answer_leaves_schedule_alone(client):
    outcome = client.post("/api/review", json={"item_id": "maison", "answer": ""}).json()
    assert outcome["skipped"] is True
    assert outcome["record"] is None
    assert client.get("/api/review/maison").status_code == 404


def test_multiple_choice_options(client):
    question = client.get("/api/review/chat/options", params={"direction": "primary-to-secondary"}).json()
    assert question["prompt"] == "chat"
    assert sorted(question["options"]) == ["Haus", "Hund", "Katze"]
    assert client.get("/api/review/inconnu/options").status_code == 404


def test_session_statistics(client):
    client.post("/api/session/start")
    stats = client.post("/api/session/end", json={"correct": 4, "total": 5}).json()
    assert stats["total_sessions"] == 1
    assert stats["accuracy_percent"] == 80
    assert stats["current_streak"] == 1

    assert client.post("/api/session/end", json={"correct": 6, "total": 5}).status_code == 400

    client.post("/api/vocabulary/chat/learned")
    assert client.get("/api/session/stats").json()["words_learned"] == {"chat": 1}

    assert client.post("/api/session/reset").json() == {"status": "success"}
    assert client.get("/api/session/stats").json()["total_sessions"] == 0
