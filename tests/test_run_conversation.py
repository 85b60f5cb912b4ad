"""
Tests for the terminal client's generate/build/save helpers.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from heavylifter.builders.app_generator import generate_app
from heavylifter.client import HeavyLifterAPIError
from run_conversation import app_idea, generate_and_build, main, save_files, watch_build


def finished_state(status="completed"):
    return {
        "status": status,
        "platforms": [{"platform": "web", "status": status, "progress": 100}],
    }


def test_save_files(tmp_path):
    app = generate_app("A simple todo app", ["web", "ios"]).to_dict()
    root = save_files(app, tmp_path)

    assert root == tmp_path / "SimpleTodo"
    assert (root / "web" / "app" / "page.jsx").exists()
    assert (root / "ios" / "app.json").read_text() == app["generatedFiles"][-1]["content"]


def test_watch_build_polls_until_finished():
    client = MagicMock()
    client.build_status.side_effect = [
        {"status": "building", "platforms": [{"platform": "web", "status": "building", "progress": 40}]},
        finished_state(),
    ]
    state = watch_build(client, "build-1", poll_interval=0)
    assert state["status"] == "completed"
    assert client.build_status.call_count == 2


def test_generate_and_build_uses_conversation(tmp_path):
    app = generate_app("I want to build a todo app", ["android"]).to_dict()
    client = MagicMock()
    client.generate.return_value = app
    client.start_build.return_value = "build-1"
    client.build_status.return_value = finished_state()

    conversation = {
        "messages": [
            {"role": "assistant", "content": "Hello!"},
            {"role": "user", "content": "I want to build a todo app"},
            {"role": "user", "content": "android please"},
        ],
        "extractedRequirements": {"platforms": ["android"], "features": []},
    }
    generate_and_build(client, conversation, tmp_path)

    client.generate.assert_called_once_with("I want to build a todo app", ["android"])
    client.start_build.assert_called_once_with(app)
    assert (tmp_path / app["name"] / "android" / "App.js").exists()


def test_failed_build_saves_nothing(tmp_path):
    app = generate_app("todo", ["web"]).to_dict()
    client = MagicMock()
    client.generate.return_value = app
    client.build_status.return_value = finished_state("failed")

    generate_and_build(client, {"messages": [], "extractedRequirements": None}, tmp_path)

    client.generate.assert_called_once_with("", ["web"])
    assert not (tmp_path / app["name"]).exists()


def test_app_idea_skips_small_talk():
    messages = [
        {"role": "assistant", "content": "Hello!"},
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "What kind of app?"},
        {"role": "user", "content": "I want to build a todo app"},
        {"role": "user", "content": "make it work on web"},
    ]
    assert app_idea(messages) == "I want to build a todo app"


def test_app_idea_falls_back_to_first_user_message():
    messages = [{"role": "user", "content": "hi"}, {"role": "user", "content": "hmm"}]
    assert app_idea(messages) == "hi"
    assert app_idea([]) == ""


def test_generate_uses_idea_after_greeting_small_talk(tmp_path):
    client = MagicMock()
    client.generate.return_value = generate_app("I want to build a todo app", ["web"]).to_dict()
    client.build_status.return_value = finished_state("failed")

    conversation = {
        "messages": [
            {"role": "user", "content": "hi"},
            {"role": "user", "content": "I want to build a todo app"},
        ],
        "extractedRequirements": {"platforms": ["web"]},
    }
    generate_and_build(client, conversation, tmp_path)

    client.generate.assert_called_once_with("I want to build a todo app", ["web"])


class TestMainErrors:
    def _client(self):
        client = MagicMock()
        client.start_conversation.return_value = {
            "conversationId": "conv_1",
            "message": {"content": "Hello!"},
        }
        return client

    def test_lost_conversation_exits_cleanly(self, monkeypatch, capsys):
        client = self._client()
        client.send_message.side_effect = HeavyLifterAPIError(
            "HTTP 404 via http://x/api/voice/conversation: Conversation not found", status_code=404
        )
        monkeypatch.setattr(sys, "argv", ["run_conversation.py", "--url", "http://x"])
        monkeypatch.setattr("builtins.input", lambda prompt="": "I want a todo app")

        with patch("run_conversation.HeavyLifterClient", return_value=client):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        assert "Conversation not found" in capsys.readouterr().out
        client.end_conversation.assert_not_called()

    def test_status_error_exits_cleanly(self, monkeypatch, capsys):
        client = self._client()
        client.get_conversation.side_effect = HeavyLifterAPIError("Connection error via http://x")
        monkeypatch.setattr(sys, "argv", ["run_conversation.py", "--url", "http://x"])
        monkeypatch.setattr("builtins.input", lambda prompt="": "status")

        with patch("run_conversation.HeavyLifterClient", return_value=client):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        assert "Server error: Connection error" in capsys.readouterr().out
