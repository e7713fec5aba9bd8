"""Tests for flashcard set and dashboard endpoints."""

from fastapi import status

from app.core.dependencies import get_card_store
from app.core.exceptions import FormatError, GeneratorConfigError, UpstreamError
from app.flashcards.models import SUBJECTS
from app.main import app
from tests.conftest import register

SET_DATA = {"grade": 8, "subject": "Fen Bilimleri", "topic": "Fotosentez"}


async def create_set(client, headers, **overrides):
    return await client.post("/api/v1/sets", json={**SET_DATA, **overrides}, headers=headers)


class TestSubjects:
    async def test_lists_subjects_and_grades(self, client):
        response = await client.get("/api/v1/sets/subjects")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["subjects"] == list(SUBJECTS)
        assert data["grades"] == list(range(1, 13))


class TestCreateSet:
    async def test_create_set_with_generated_cards(self, client, auth_headers, fake_generator):
        fake_generator.cards = ["A", "B", "C"]

        response = await create_set(client, auth_headers, topic="  Fotosentez ")

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["created_cards"] == 3
        assert data["flashcard_set"]["topic"] == "Fotosentez"
        assert data["flashcard_set"]["completed"] is False
        assert fake_generator.calls == [(8, "Fen Bilimleri", "Fotosentez", 10)]

        detail = await client.get(f"/api/v1/sets/{data['flashcard_set']['id']}", headers=auth_headers)
        assert [c["content"] for c in detail.json()["flashcards"]] == ["A", "B", "C"]
        assert [c["order_index"] for c in detail.json()["flashcards"]] == [0, 1, 2]

    async def test_requires_authentication(self, client):
        response = await client.post("/api/v1/sets", json=SET_DATA)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_unknown_subject_is_an_invalid_step(self, client, auth_headers):
        response = await create_set(client, auth_headers, subject="Astroloji")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["code"] == "INVALID_STEP"

    async def test_grade_out_of_range_is_rejected(self, client, auth_headers):
        response = await create_set(client, auth_headers, grade=13)

        assert response.status_code == 422

    async def test_blank_topic_is_rejected(self, client, auth_headers):
        response = await create_set(client, auth_headers, topic="   ")

        assert response.status_code == 422

    async def test_ai_failure_leaves_no_set_behind(self, client, auth_headers, fake_generator):
        fake_generator.error = UpstreamError("AI service error")

        response = await create_set(client, auth_headers)

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.json()["code"] == "AI_SERVICE_ERROR"
        dashboard = await client.get("/api/v1/sets", headers=auth_headers)
        assert dashboard.json()["total_sets"] == 0

    async def test_unreadable_ai_reply(self, client, auth_headers, fake_generator):
        fake_generator.error = FormatError("AI response is not valid JSON")

        response = await create_set(client, auth_headers)

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.json()["code"] == "AI_FORMAT_ERROR"

    async def test_ai_not_configured(self, client, auth_headers, fake_generator):
        fake_generator.error = GeneratorConfigError("OpenAI API key is not configured")

        response = await create_set(client, auth_headers)

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["code"] == "AI_NOT_CONFIGURED"

    async def test_store_failure_asks_to_retry(self, client, auth_headers, fake_store, fake_generator):
        fake_store.fail_creates = True
        app.dependency_overrides[get_card_store] = lambda: fake_store

        response = await create_set(client, auth_headers)

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["code"] == "STORE_ERROR"
        assert fake_generator.calls == []


class TestDashboard:
    async def test_empty_dashboard(self, client, auth_headers):
        response = await client.get("/api/v1/sets", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "current": [],
            "past": [],
            "total_sets": 0,
            "completed_sets": 0,
            "completion_percentage": 0,
        }

    async def test_sets_are_split_into_current_and_past(self, client, auth_headers, card_store):
        first = (await create_set(client, auth_headers, topic="Hücre")).json()["flashcard_set"]
        await create_set(client, auth_headers, topic="Fotosentez")
        await create_set(client, auth_headers, topic="Ekosistem")
        await card_store.mark_set_completed(first["id"])

        data = (await client.get("/api/v1/sets", headers=auth_headers)).json()

        assert [s["topic"] for s in data["past"]] == ["Hücre"]
        assert sorted(s["topic"] for s in data["current"]) == ["Ekosistem", "Fotosentez"]
        assert data["total_sets"] == 3
        assert data["completed_sets"] == 1
        assert data["completion_percentage"] == 33

    async def test_sets_of_other_users_are_hidden(self, client, auth_headers):
        created = (await create_set(client, auth_headers)).json()["flashcard_set"]
        other_headers = await register(client, "other@example.com")

        dashboard = await client.get("/api/v1/sets", headers=other_headers)
        detail = await client.get(f"/api/v1/sets/{created['id']}", headers=other_headers)

        assert dashboard.json()["total_sets"] == 0
        assert detail.status_code == status.HTTP_404_NOT_FOUND
        assert detail.json()["code"] == "SET_NOT_FOUND"


class TestDeleteSet:
    async def test_delete_set(self, client, auth_headers):
        created = (await create_set(client, auth_headers)).json()["flashcard_set"]

        response = await client.delete(f"/api/v1/sets/{created['id']}", headers=auth_headers)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        detail = await client.get(f"/api/v1/sets/{created['id']}", headers=auth_headers)
        assert detail.status_code == status.HTTP_404_NOT_FOUND

    async def test_delete_unknown_set(self, client, auth_headers):
        response = await client.delete("/api/v1/sets/missing", headers=auth_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["code"] == "SET_NOT_FOUND"

    async def test_delete_set_ends_its_study_sessions(self, client, auth_headers, registry):
        created = (await create_set(client, auth_headers)).json()["flashcard_set"]
        other = (await create_set(client, auth_headers)).json()["flashcard_set"]
        for _ in range(3):
            started = await client.post(f"/api/v1/study/sets/{created['id']}/sessions", headers=auth_headers)
            assert started.status_code == status.HTTP_201_CREATED
        kept = await client.post(f"/api/v1/study/sets/{other['id']}/sessions", headers=auth_headers)
        assert len(registry) == 4

        response = await client.delete(f"/api/v1/sets/{created['id']}", headers=auth_headers)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert len(registry) == 1
        state = await client.get(f"/api/v1/study/sessions/{kept.json()['session_id']}", headers=auth_headers)
        assert state.status_code == status.HTTP_200_OK
