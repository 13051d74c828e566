from __future__ import annotations

import json
from typing import Any

from openai import OpenAI, OpenAIError

from app.core.config import settings
from app.core.errors import InvalidInputError, UpstreamError
from app.core.logging_setup import logger
from app.schemas.ai import FormattedNote
from app.schemas.entry import Mood

AUDIO_FORMATS = ("webm", "mp3", "mpeg", "wav", "m4a", "mp4", "ogg")

DEFAULT_IPE_GOAL = "competitive integrated employment"

MOOD_LABELS = {
    Mood.GOOD: "positive",
    Mood.NEUTRAL: "neutral",
    Mood.BAD: "needs attention",
}

SYSTEM_PROMPT = """You write Department of Rehabilitation job coaching notes.
Turn the job coach's spoken transcript into a concise, professional note in vocational language.

Client: {client_name}
Client goals: {client_goals}
IPE goal: {ipe_goal}
Session mood: {mood}

The note must contain these four headers, in this order, each followed by its text:
**Tasks & Productivity:**
**Barriers & Behaviors:**
**Interventions:**
**Progress on Goals:**

Guidance:
- Only report what the transcript supports. Never invent metrics.
- Barriers & Behaviors: write "None observed during session." when nothing is mentioned.
- Interventions: name one of Observation / Stand-by Assistance, Verbal Prompt, Modeling / Demonstration,
  Physical Assistance / Hand-over-Hand. Use Observation / Stand-by Assistance when the coach does not
  describe helping.
- Progress on Goals: relate the session to the IPE goal and the client goals.

Answer with a JSON object:
{{"formattedNote": "<note with the four sections>",
  "summary": "<one or two sentences on progress toward the IPE goal>",
  "tags": ["<short tag>", "..."]}}
Pick tags from: Tasks, Productivity, Attendance, Communication, Social Skills, Behavior, Safety,
Verbal Prompt, Modeling, Physical Assistance, Observation, Independence, Skill Acquisition, IPE Progress."""


def is_supported_audio(filename: str | None, content_type: str | None) -> bool:
    candidates = [(content_type or "").lower()]
    if filename and "." in filename:
        candidates.append(filename.rsplit(".", 1)[-1].lower())
    return any(fmt in candidate for candidate in candidates for fmt in AUDIO_FORMATS)


class AIService:
    """Speech-to-text and note formatting through the OpenAI API."""

    def __init__(self, client: Any | None = None) -> None:
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            if not settings.openai_api_key:
                raise UpstreamError("OpenAI API key not configured")
            self._client = OpenAI(api_key=settings.openai_api_key, timeout=settings.openai_timeout_seconds)
        return self._client

    def transcribe(self, filename: str | None, content_type: str | None, data: bytes) -> str:
        if not data:
            raise InvalidInputError("No audio file provided")
        if not is_supported_audio(filename, content_type):
            raise InvalidInputError("Invalid audio format. Supported: " + ", ".join(AUDIO_FORMATS))

        try:
            transcript = self.client.audio.transcriptions.create(
                model=settings.openai_transcription_model,
                file=(filename or "audio.webm", data, content_type or "application/octet-stream"),
                language="en",
                response_format="text",
            )
        except OpenAIError as exc:
            logger.error("Transcription failed: %s", exc)
            raise UpstreamError("Transcription service unavailable") from exc

        text = transcript if isinstance(transcript, str) else getattr(transcript, "text", "")
        return (text or "").strip()

    def format_note(
        self,
        transcript: str,
        client_name: str | None = None,
        client_goals: str | None = None,
        ipe_goal: str | None = None,
        mood: Mood = Mood.NEUTRAL,
    ) -> FormattedNote:
        if not (transcript or "").strip():
            raise InvalidInputError("No transcript provided")

        prompt = SYSTEM_PROMPT.format(
            client_name=client_name or "Client",
            client_goals=client_goals or "Not specified",
            ipe_goal=ipe_goal or DEFAULT_IPE_GOAL,
            mood=MOOD_LABELS[mood],
        )
        try:
            completion = self.client.chat.completions.create(
                model=settings.openai_model,
                messages=[
                    {"role": "system", "content": prompt},
                    {"role": "user", "content": f'Format this coaching note: "{transcript.strip()}"'},
                ],
                temperature=0.7,
                max_tokens=1000,
                response_format={"type": "json_object"},
            )
        except OpenAIError as exc:
            logger.error("Note formatting failed: %s", exc)
            raise UpstreamError("Note formatting service unavailable") from exc

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise UpstreamError("No response from AI")
        try:
            payload = json.loads(content)
        except json.JSONDecodeError as exc:
            logger.error("AI returned malformed JSON: %s", exc)
            raise UpstreamError("AI returned an invalid response") from exc

        note = payload.get("formattedNote") if isinstance(payload, dict) else None
        if not isinstance(note, str) or not note.strip():
            raise UpstreamError("AI returned an invalid response")
        tags = payload.get("tags") or []
        return FormattedNote(
            formatted_note=note.strip(),
            summary=str(payload.get("summary") or ""),
            tags=[str(tag) for tag in tags if tag] if isinstance(tags, list) else [],
        )
