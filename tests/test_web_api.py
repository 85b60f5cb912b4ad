"""
Tests for the Flask API: conversation actions, requirement processing,
generation and the simulated build lifecycle.
"""

import random
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from heavylifter import __version__
from heavylifter.config import Settings
from heavylifter.conversation_store import ConversationStore
from web_app import create_app


class ImmediateThread:
    """Stands in for threading.Thread and runs the target on start()."""

    def __init__(self, target=None, daemon=None, **kwargs):
        self.target = target

    def start(self):
        self.target()


@pytest.fixture
def settings():
    return Settings(
        analysis_delay=0,
        build_step_delay=0,
        confidence_mode="signals",
        log_level="WARNING",
    )


@pytest.fixture
def app(settings):
    app = create_app(settings, rng=random.Random(0))
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def converse(client, action, **fields):
    return client.post("/api/voice/conversation", json={"action": action, **fields})


def generated_app(client, idea="A simple todo app", platforms=None):
    response = client.post("/api/generate", json={
        "idea": idea,
        "platforms": platforms or {"web": True},
    })
    assert response.status_code == 200
    return response.get_json()


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.get_json()
    assert data["status"] == "ok"
    assert data["version"] == __version__
    assert data["conversations"] == 0


class TestConversationEndpoint:
    def test_start(self, client):
        response = converse(client, "start", userId="user-1")
        assert response.status_code == 200
        data = response.get_json()
        assert data["conversationId"].startswith("conv_")
        assert data["message"]["role"] == "assistant"
        assert data["currentState"]["currentStep"] == "greeting"
        assert data["currentState"]["userId"] == "user-1"
        assert len(data["currentState"]["messages"]) == 1

    def test_full_conversation(self, client):
        conversation_id = converse(client, "start").get_json()["conversationId"]

        steps = [
            ("I want to build a todo app", "requirement_gathering", False),
            ("It should work on web and mobile", "requirement_gathering", False),
            ("I need reminders and user login", "clarification", False),
            ("Yes, that's exactly right", "completion", True),
        ]
        for text, expected_step, requires_action in steps:
            response = converse(client, "send_message", conversationId=conversation_id, message=text)
            assert response.status_code == 200
            data = response.get_json()
            assert data["userMessage"]["content"] == text
            assert data["currentState"]["currentStep"] == expected_step
            assert data["requiresAction"] is requires_action

        state = converse(client, "get_conversation", conversationId=conversation_id).get_json()
        assert len(state["messages"]) == 9
        assert state["extractedRequirements"] == {
            "platforms": ["web", "android"],
            "features": ["authentication"],
        }

        ended = converse(client, "end_conversation", conversationId=conversation_id).get_json()
        assert ended["finalRequirements"]["platforms"] == ["web", "android"]
        assert ended["conversationSummary"]["userMessages"] == 4
        assert ended["conversationSummary"]["assistantMessages"] == 6

    def test_unknown_conversation(self, client):
        for action in ("send_message", "get_conversation", "end_conversation"):
            response = converse(client, action, conversationId="conv_missing", message="hi")
            assert response.status_code == 404
            assert response.get_json() == {"error": "Conversation not found"}

    def test_missing_message(self, client):
        conversation_id = converse(client, "start").get_json()["conversationId"]
        response = converse(client, "send_message", conversationId=conversation_id)
        assert response.status_code == 400
        state = converse(client, "get_conversation", conversationId=conversation_id).get_json()
        assert len(state["messages"]) == 1

    def test_invalid_action(self, client):
        response = converse(client, "dance")
        assert response.status_code == 400
        assert response.get_json() == {"error": "Invalid action"}

    def test_body_must_be_json(self, client):
        response = client.post("/api/voice/conversation", data="action=start")
        assert response.status_code == 400

    def test_injected_store(self, settings):
        store = ConversationStore()
        app = create_app(settings, store=store)
        conversation_id = converse(app.test_client(), "start").get_json()["conversationId"]
        assert conversation_id in store


class TestProcessRequirements:
    def test_confirmation(self, client):
        response = client.post("/api/voice/process-requirements", json={
            "transcript": "I want a todo app for web and iphone with login",
            "history": [],
        })
        assert response.status_code == 200
        data = response.get_json()
        assert data["confidence"] == 0.9
        assert data["requirements"]["platforms"] == ["web", "ios"]
        assert data["requirements"]["technicalRequirements"]["authentication"] is True
        assert data["conversationResponse"]["type"] == "confirmation"
        assert data["nextState"] == "gathering_requirements"

    def test_low_confidence_clarification(self, client):
        response = client.post("/api/voice/process-requirements", json={
            "transcript": "hello",
            "currentState": "refining",
            "previousRequirements": {"platforms": ["ios"]},
        })
        data = response.get_json()
        assert data["confidence"] == 0.7
        assert data["conversationResponse"]["type"] == "clarification"
        assert len(data["conversationResponse"]["questions"]) == 3
        assert data["requirements"]["platforms"] == ["web"]
        assert data["nextState"] == "refining"

    def test_transcript_required(self, client):
        response = client.post("/api/voice/process-requirements", json={"history": []})
        assert response.status_code == 400
        assert response.get_json() == {"error": "Transcript is required"}


class TestSpeechEndpoints:
    def test_transcribe(self, client):
        response = client.post("/api/voice/transcribe", json={"audioData": "AAAA"})
        assert response.status_code == 200
        data = response.get_json()
        assert data["transcript"]
        assert 0.7 <= data["confidence"] < 1.0

    def test_text_to_speech(self, client):
        response = client.post("/api/voice/text-to-speech", json={"text": "Hello world"})
        assert response.status_code == 200
        data = response.get_json()
        assert data["audioData"]
        assert data["duration"] == 1.0
        assert data["ssmlGender"] == "NEUTRAL"

    def test_text_to_speech_requires_text(self, client):
        response = client.post("/api/voice/text-to-speech", json={"text": "  "})
        assert response.status_code == 400


class TestGenerate:
    def test_generate(self, client):
        data = generated_app(client)
        assert data["name"] == "SimpleTodo"
        assert data["platforms"] == ["web"]
        assert [f["path"] for f in data["generatedFiles"]] == [
            "web/app/page.jsx",
            "web/package.json",
            "web/next.config.js",
        ]
        assert data["buildCommand"] == "(cd web && npm install && npm run build)"

    def test_generate_with_platform_names(self, client):
        data = generated_app(client, "fitness tracker", ["ios", "android"])
        assert data["platforms"] == ["android", "ios"]
        assert len(data["generatedFiles"]) == 6

    def test_idea_required(self, client):
        response = client.post("/api/generate", json={"idea": "  ", "platforms": {"web": True}})
        assert response.status_code == 400
        assert response.get_json() == {"error": "Please provide your app idea"}

    def test_platform_required(self, client):
        response = client.post("/api/generate", json={"idea": "todo", "platforms": {"web": False}})
        assert response.status_code == 400
        assert response.get_json() == {"error": "Please select at least one platform"}

    def test_unexpected_error_is_internal(self, client):
        with patch("web_app.generate_app", side_effect=RuntimeError("template exploded")):
            response = client.post("/api/generate", json={"idea": "todo", "platforms": ["web"]})
        assert response.status_code == 500
        assert response.get_json() == {"error": "Request failed"}


class TestBuildLifecycle:
    def test_build_start_runs_in_thread(self, client):
        app_data = generated_app(client)
        with patch("web_app.threading.Thread") as mock_thread:
            mock_thread.return_value.start = MagicMock()
            response = client.post("/api/build/start", json={"app": app_data})

        assert response.status_code == 200
        assert response.get_json()["buildId"].startswith("build-")
        mock_thread.assert_called_once()
        assert mock_thread.call_args.kwargs["daemon"] is True
        mock_thread.return_value.start.assert_called_once()

    def test_only_one_active_build(self, client):
        app_data = generated_app(client)
        with patch("web_app.threading.Thread") as mock_thread:
            mock_thread.return_value.start = MagicMock()
            first = client.post("/api/build/start", json={"app": app_data})
            second = client.post("/api/build/start", json={"app": app_data})

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.get_json() == {"error": "A build is already running"}

    def test_completed_build_and_download(self, client):
        app_data = generated_app(client, platforms={"web": True, "ios": True})
        with patch("web_app.threading.Thread", ImmediateThread):
            build_id = client.post("/api/build/start", json={"app": app_data}).get_json()["buildId"]

        status = client.get(f"/api/build/status?build_id={build_id}").get_json()
        assert status["status"] == "completed"
        assert status["overallProgress"] == 100
        assert status["appName"] == "SimpleTodo"
        assert [p["progress"] for p in status["platforms"]] == [100, 100]
        assert status["platforms"][1]["downloadUrl"] == (
            f"/api/build/download?build_id={build_id}&platform=ios"
        )

        response = client.get(f"/api/build/download?build_id={build_id}&platform=web")
        assert response.status_code == 200
        assert response.mimetype == "text/javascript"
        assert 'filename="simpletodo-web.js"' in response.headers["Content-Disposition"]
        body = response.get_data(as_text=True)
        assert body.startswith("// web/app/page.jsx\n")
        assert "// ios/" not in body

        missing = client.get(f"/api/build/download?build_id={build_id}&platform=android")
        assert missing.status_code == 404

    def test_download_filename_ignores_unsafe_app_name(self, client):
        app_data = generated_app(client)
        app_data["name"] = 'Evil"\r\nSet-Cookie: x=1'
        with patch("web_app.threading.Thread", ImmediateThread):
            build_id = client.post("/api/build/start", json={"app": app_data}).get_json()["buildId"]

        response = client.get(f"/api/build/download?build_id={build_id}&platform=web")
        assert response.status_code == 200
        disposition = response.headers["Content-Disposition"]
        assert disposition == 'attachment; filename="evil-set-cookie-x-1-web.js"'
        assert "Set-Cookie" not in response.headers

    def test_new_build_allowed_after_completion(self, client):
        with patch("web_app.threading.Thread", ImmediateThread):
            first = client.post("/api/build/start", json={"idea": "todo", "platforms": ["web"]})
            second = client.post("/api/build/start", json={"idea": "todo", "platforms": ["web"]})
        assert first.status_code == 200
        assert second.status_code == 200

    def test_download_before_completion(self, client):
        with patch("web_app.threading.Thread") as mock_thread:
            mock_thread.return_value.start = MagicMock()
            build_id = client.post(
                "/api/build/start", json={"idea": "todo", "platforms": ["web"]}
            ).get_json()["buildId"]

        response = client.get(f"/api/build/download?build_id={build_id}&platform=web")
        assert response.status_code == 409

    def test_stop(self, client):
        with patch("web_app.threading.Thread") as mock_thread:
            mock_thread.return_value.start = MagicMock()
            build_id = client.post(
                "/api/build/start", json={"idea": "todo", "platforms": ["web"]}
            ).get_json()["buildId"]

            response = client.post("/api/build/stop", json={"buildId": build_id})
            assert response.get_json() == {"stopped": True}

            status = client.get(f"/api/build/status?build_id={build_id}").get_json()
            assert status["status"] == "failed"

            again = client.post("/api/build/start", json={"idea": "todo", "platforms": ["web"]})
            assert again.status_code == 200

    def test_status_errors(self, client):
        assert client.get("/api/build/status").status_code == 400
        response = client.get("/api/build/status?build_id=build-missing")
        assert response.status_code == 404
        assert response.get_json() == {"error": "Build not found"}
        assert client.post("/api/build/stop", json={"buildId": "build-missing"}).status_code == 404

    def test_invalid_app(self, client):
        response = client.post("/api/build/start", json={"app": {"name": "Broken"}})
        assert response.status_code == 400

        app_data = generated_app(client)
        app_data["platforms"] = []
        response = client.post("/api/build/start", json={"app": app_data})
        assert response.status_code == 400

    def test_unknown_route_stays_404(self, client):
        assert client.get("/api/nope").status_code == 404
