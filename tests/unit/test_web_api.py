"""
Unit tests for the HTTP API (auth, processing endpoint, run history and exports).
"""

import pytest
from fastapi.testclient import TestClient

from src.extraction.exceptions import RateLimitedError
from src.extraction.processor import TranscriptProcessor
from src.llm.provider import LLMProvider
from src.web.app import create_app
from src.web.auth import user_id_for_token
from tests.fixtures.fake_llm import FakeBackend
from tests.fixtures.sample_outputs import CACHING_REPLY, CONTEXT_PACK, TRANSCRIPT, reply_text

TOKEN = "session-token"
AUTH = {"Authorization": f"Bearer {TOKEN}"}


def _client(settings, backend: FakeBackend) -> TestClient:
    processor = TranscriptProcessor(settings, provider=LLMProvider(settings, backend=backend))
    return TestClient(create_app(settings=settings, processor=processor, session_tokens={TOKEN}))


def _body(**overrides) -> dict:
    body = {"transcript": TRANSCRIPT, "contextPack": CONTEXT_PACK, "model": "gemini"}
    body.update(overrides)
    return body


def _form(**metadata) -> dict:
    return {
        "transcript": TRANSCRIPT,
        "context_pack": CONTEXT_PACK,
        "model": "gemini",
        "metadata": {"client_name": "Acme Corp", "fiscal_year": "2024", **metadata},
    }


@pytest.mark.unit
class TestAuth:
    def test_missing_token(self, settings):
        backend = FakeBackend(reply_text(CACHING_REPLY))
        with _client(settings, backend) as client:
            response = client.post("/api/process-transcript", json=_body())
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized - no token provided"}
        assert backend.calls == []

    def test_invalid_token(self, settings):
        backend = FakeBackend(reply_text(CACHING_REPLY))
        with _client(settings, backend) as client:
            response = client.post(
                "/api/process-transcript",
                json=_body(),
                headers={"Authorization": "Bearer nope"},
            )
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized - invalid token"}
        assert backend.calls == []

    def test_history_requires_auth(self, settings):
        with _client(settings, FakeBackend()) as client:
            assert client.get("/api/runs").status_code == 401

    def test_health_is_public(self, settings):
        with _client(settings, FakeBackend()) as client:
            response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_user_id_is_stable(self):
        assert user_id_for_token("a") == user_id_for_token("a")
        assert user_id_for_token("a") != user_id_for_token("b")


@pytest.mark.unit
class TestProcessTranscript:
    def test_structured_success(self, settings):
        with _client(settings, FakeBackend(reply_text(CACHING_REPLY, fenced=True))) as client:
            response = client.post("/api/process-transcript", json=_body(), headers=AUTH)
        assert response.status_code == 200
        data = response.json()
        assert data["model_used"] == "google/gemini-2.5-flash"
        assert data["output"]["candidate_projects"][0]["label"] == "Consistent caching layer"

    def test_unstructured_returns_content(self, settings):
        with _client(settings, FakeBackend("Plain notes.")) as client:
            response = client.post(
                "/api/process-transcript",
                json=_body(disableStructuredOutput=True),
                headers=AUTH,
            )
        assert response.status_code == 200
        assert response.json() == {"content": "Plain notes.", "model_used": "google/gemini-2.5-flash"}

    @pytest.mark.parametrize(
        "body, message",
        [
            (_body(transcript=""), "Transcript is required and must be a string"),
            (_body(contextPack=None), "Context pack is required and must be a string"),
            (_body(model="llama"), "Invalid model selection. Allowed models: openai, claude, gemini"),
        ],
    )
    def test_validation_errors(self, settings, body, message):
        backend = FakeBackend(reply_text(CACHING_REPLY))
        with _client(settings, backend) as client:
            response = client.post("/api/process-transcript", json=body, headers=AUTH)
        assert response.status_code == 400
        assert response.json() == {"error": message}
        assert backend.calls == []

    def test_oversized_transcript(self, settings):
        transcript = "x" * (settings.limits.transcript_max_chars + 1)
        with _client(settings, FakeBackend()) as client:
            response = client.post(
                "/api/process-transcript", json=_body(transcript=transcript), headers=AUTH
            )
        assert response.status_code == 400
        assert "exceeds maximum length" in response.json()["error"]

    def test_non_json_body(self, settings):
        with _client(settings, FakeBackend()) as client:
            response = client.post(
                "/api/process-transcript",
                content=b"not json",
                headers={**AUTH, "Content-Type": "application/json"},
            )
        assert response.status_code == 400

    def test_parse_failure_keeps_raw_reply(self, settings):
        with _client(settings, FakeBackend("I could not find any projects.")) as client:
            response = client.post("/api/process-transcript", json=_body(), headers=AUTH)
        assert response.status_code == 422
        assert response.json()["raw_content"] == "I could not find any projects."

    def test_rate_limited(self, settings):
        backend = FakeBackend(RateLimitedError("Rate limit exceeded. Please try again later.", 429))
        with _client(settings, backend) as client:
            response = client.post("/api/process-transcript", json=_body(), headers=AUTH)
        assert response.status_code == 429
        assert response.json() == {"error": "Rate limit exceeded. Please try again later."}


@pytest.mark.unit
class TestRuns:
    def test_submit_then_browse(self, settings):
        with _client(settings, FakeBackend(reply_text(CACHING_REPLY))) as client:
            submitted = client.post("/api/runs", json=_form(), headers=AUTH)
            assert submitted.status_code == 200
            data = submitted.json()
            assert data["saved"] is True
            assert data["warning"] is None
            run = data["run"]
            assert run["user_id"] == user_id_for_token(TOKEN)
            assert run["client_name"] == "Acme Corp"
            assert run["is_structured"] is True

            listed = client.get("/api/runs", headers=AUTH).json()
            assert [item["id"] for item in listed] == [run["id"]]
            assert listed[0]["counts"]["drafting_material"] == 2

            fetched = client.get(f"/api/runs/{run['id']}", headers=AUTH).json()
            assert fetched["output_work_performed"][0]["component"] == "Cache layer"

    def test_unstructured_submission_stores_raw_output(self, settings):
        form = {**_form(), "disable_structured_output": True}
        with _client(settings, FakeBackend("Free-form notes.")) as client:
            run = client.post("/api/runs", json=form, headers=AUTH).json()["run"]
        assert run["is_structured"] is False
        assert run["raw_output"] == "Free-form notes."
        assert run["output_candidate_projects"] is None

    def test_failed_submission_saves_nothing(self, settings):
        backend = FakeBackend(RateLimitedError("Rate limit exceeded. Please try again later.", 429))
        with _client(settings, backend) as client:
            response = client.post("/api/runs", json=_form(), headers=AUTH)
            assert response.status_code == 429
            assert client.get("/api/runs", headers=AUTH).json() == []

    def test_evaluation_update(self, settings):
        with _client(settings, FakeBackend(reply_text(CACHING_REPLY))) as client:
            run_id = client.post("/api/runs", json=_form(), headers=AUTH).json()["run"]["id"]
            response = client.patch(
                f"/api/runs/{run_id}/evaluation",
                json={"eval_work_performed": 4, "eval_notes_overall": "Solid"},
                headers=AUTH,
            )
            assert response.status_code == 200
            assert response.json()["eval_work_performed"] == 4

            second = client.patch(
                f"/api/runs/{run_id}/evaluation", json={"eval_iterations": 2}, headers=AUTH
            ).json()
        assert second["eval_work_performed"] == 4
        assert second["eval_iterations"] == 2
        assert second["eval_notes_overall"] == "Solid"

    def test_evaluation_score_out_of_range(self, settings):
        with _client(settings, FakeBackend(reply_text(CACHING_REPLY))) as client:
            run_id = client.post("/api/runs", json=_form(), headers=AUTH).json()["run"]["id"]
            response = client.patch(
                f"/api/runs/{run_id}/evaluation", json={"eval_big_picture": 9}, headers=AUTH
            )
        assert response.status_code == 422

    def test_unknown_run(self, settings):
        with _client(settings, FakeBackend()) as client:
            assert client.get("/api/runs/missing", headers=AUTH).status_code == 404
            response = client.patch(
                "/api/runs/missing/evaluation", json={"eval_iterations": 2}, headers=AUTH
            )
            assert response.status_code == 404

    @pytest.mark.parametrize(
        "fmt, media_type",
        [("json", "application/json"), ("csv", "text/csv"), ("html", "text/html")],
    )
    def test_export_downloads(self, settings, fmt, media_type):
        with _client(settings, FakeBackend(reply_text(CACHING_REPLY))) as client:
            run_id = client.post("/api/runs", json=_form(), headers=AUTH).json()["run"]["id"]
            response = client.get(f"/api/runs/{run_id}/export/{fmt}", headers=AUTH)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith(media_type)
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="sred-run-Acme-Corp-')
        assert disposition.endswith(f'.{fmt}"')

    def test_export_unknown_format(self, settings):
        with _client(settings, FakeBackend(reply_text(CACHING_REPLY))) as client:
            run_id = client.post("/api/runs", json=_form(), headers=AUTH).json()["run"]["id"]
            response = client.get(f"/api/runs/{run_id}/export/pdf", headers=AUTH)
        assert response.status_code == 400

    def test_export_all(self, settings):
        backend = FakeBackend(reply_text(CACHING_REPLY), reply_text(CACHING_REPLY))
        with _client(settings, backend) as client:
            client.post("/api/runs", json=_form(), headers=AUTH)
            client.post("/api/runs", json=_form(client_name="Beta"), headers=AUTH)
            response = client.get("/api/runs/export", headers=AUTH)
        assert response.status_code == 200
        assert 'filename="sred-all-runs-' in response.headers["content-disposition"]
        assert len(response.json()) == 2
