from __future__ import annotations

import json
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from app.api.deps import get_ai_service
from app.core.config import settings
from app.core.errors import InvalidInputError, UpstreamError
from app.main import app
from app.schemas.entry import Mood
from app.services.ai import AIService, is_supported_audio
from tests.conftest import auth_headers, login


class FakeOpenAI:
    def __init__(self, transcript="Client stocked shelves.", content=None, error=None):
        self.calls = []
        self._transcript = transcript
        self._content = content
        self._error = error
        self.audio = SimpleNamespace(transcriptions=SimpleNamespace(create=self._transcribe))
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._complete))

    def _transcribe(self, **kwargs):
        self.calls.append(("transcribe", kwargs))
        if self._error:
            raise self._error
        return self._transcript

    def _complete(self, **kwargs):
        self.calls.append(("complete", kwargs))
        if self._error:
            raise self._error
        message = SimpleNamespace(content=self._content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


NOTE_JSON = json.dumps(
    {
        "formattedNote": "**Tasks & Productivity:** Stocked shelves.",
        "summary": "Steady progress toward the IPE goal.",
        "tags": ["Tasks", "Independence"],
    }
)


@pytest.mark.parametrize(
    "filename, content_type, expected",
    [
        ("note.webm", "audio/webm", True),
        ("note.bin", "audio/mpeg", True),
        ("recording.m4a", None, True),
        ("notes.txt", "text/plain", False),
        (None, None, False),
    ],
)
def test_supported_audio(filename, content_type, expected):
    assert is_supported_audio(filename, content_type) is expected


def test_transcribe_passes_audio_through():
    fake = FakeOpenAI(transcript="  Client stocked shelves.  ")

    text = AIService(client=fake).transcribe("note.webm", "audio/webm", b"audio-bytes")

    assert text == "Client stocked shelves."
    _, kwargs = fake.calls[0]
    assert kwargs["file"] == ("note.webm", b"audio-bytes", "audio/webm")
    assert kwargs["language"] == "en"


def test_transcribe_rejects_bad_input():
    service = AIService(client=FakeOpenAI())

    with pytest.raises(InvalidInputError):
        service.transcribe("note.webm", "audio/webm", b"")
    with pytest.raises(InvalidInputError):
        service.transcribe("notes.txt", "text/plain", b"hello")


def test_transcribe_upstream_failure():
    with pytest.raises(UpstreamError):
        AIService(client=FakeOpenAI(error=OpenAIError("boom"))).transcribe("a.mp3", "audio/mpeg", b"x")


def test_missing_api_key_is_upstream_error():
    with pytest.raises(UpstreamError):
        AIService().transcribe("a.mp3", "audio/mpeg", b"x")


def test_format_note_parses_json():
    fake = FakeOpenAI(content=NOTE_JSON)

    note = AIService(client=fake).format_note(
        "stocked shelves",
        client_name="Casey Client",
        ipe_goal="Retail associate",
        mood=Mood.GOOD,
    )

    assert note.formatted_note.startswith("**Tasks & Productivity:**")
    assert note.tags == ["Tasks", "Independence"]
    _, kwargs = fake.calls[0]
    assert kwargs["response_format"] == {"type": "json_object"}
    system_prompt = kwargs["messages"][0]["content"]
    assert "Casey Client" in system_prompt
    assert "Retail associate" in system_prompt
    assert "positive" in system_prompt


@pytest.mark.parametrize("content", [None, "not json", json.dumps({"summary": "no note"})])
def test_format_note_rejects_bad_responses(content):
    with pytest.raises(UpstreamError):
        AIService(client=FakeOpenAI(content=content)).format_note("stocked shelves")


def test_format_note_requires_transcript():
    with pytest.raises(InvalidInputError):
        AIService(client=FakeOpenAI(content=NOTE_JSON)).format_note("   ")


def test_ai_routes(client, coach_user):
    fake = FakeOpenAI(content=NOTE_JSON)
    app.dependency_overrides[get_ai_service] = lambda: AIService(client=fake)
    try:
        headers = auth_headers(login(client, "coach@example.com"))

        transcribed = client.post(
            f"{settings.api_v1_str}/ai/transcribe",
            files={"audio": ("note.webm", b"audio-bytes", "audio/webm")},
            headers=headers,
        )
        formatted = client.post(
            f"{settings.api_v1_str}/ai/format-note",
            json={"transcript": "stocked shelves", "mood": "good"},
            headers=headers,
        )
        rejected = client.post(
            f"{settings.api_v1_str}/ai/transcribe",
            files={"audio": ("notes.txt", b"hello", "text/plain")},
            headers=headers,
        )
    finally:
        app.dependency_overrides.pop(get_ai_service, None)

    assert transcribed.status_code == 200
    assert transcribed.json() == {"transcript": "Client stocked shelves."}
    assert formatted.status_code == 200
    assert formatted.json()["summary"] == "Steady progress toward the IPE goal."
    assert rejected.status_code == 400
    assert rejected.json()["error"] == "invalid_input"
