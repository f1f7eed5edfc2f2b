"""
Script breakdown using Groq LLM.

Turns raw script text into scenes and shots ready for ingestion.
"""
import json
import re
from typing import Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_groq import ChatGroq
from pydantic import ValidationError as PydanticValidationError

from studio.config import settings
from studio.exceptions import ValidationError
from studio.models import CameraMovement, ParsedScript, ShotMood
from studio.utils.logging import get_logger

logger = get_logger(__name__)

_CAMERA_OPTIONS = ", ".join(m.value for m in CameraMovement)
_MOOD_OPTIONS = ", ".join(m.value for m in ShotMood)

SCRIPT_PARSER_SYSTEM_PROMPT = f"""You are a professional video production assistant. Your job is to analyze scripts and break them down into scenes and shots for video production.

1. Identify natural scene breaks (changes in location, time, or major narrative shifts).
2. For each scene give a descriptive title and the location.
3. Break each scene into individual shots of roughly 4 seconds each.
4. For each shot give a detailed visual description of what the camera sees, a camera movement, a mood and a duration in seconds.

Output ONLY JSON in this exact format:
{{
  "scenes": [
    {{
      "sceneIndex": 0,
      "title": "Scene title",
      "location": "Desert camp at sunset",
      "shots": [
        {{
          "shotIndex": 0,
          "description": "Wide establishing shot of a desert landscape with tents in the distance, golden sunset light",
          "cameraMovement": "STATIC",
          "mood": "PEACEFUL",
          "duration": 4
        }}
      ]
    }}
  ]
}}

Camera movement options: {_CAMERA_OPTIONS}
Mood options: {_MOOD_OPTIONS}

Be cinematic and specific. Each shot description must be vivid enough to generate a compelling image."""

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def extract_script_json(text: str) -> ParsedScript:
    """Pull the first JSON object out of an LLM reply, tolerating prose and code fences."""
    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise ValidationError("Script parser returned no JSON object")
    try:
        data = json.loads(match.group(0))
        return ParsedScript.model_validate(data)
    except (json.JSONDecodeError, PydanticValidationError) as e:
        raise ValidationError(f"Script parser returned malformed JSON: {e}") from e


class ScriptParser:
    def __init__(self, llm: Optional[ChatGroq] = None):
        self._llm = llm

    @property
    def llm(self) -> ChatGroq:
        if self._llm is None:
            self._llm = ChatGroq(
                model=settings.groq_model,
                temperature=settings.groq_temperature,
                max_tokens=settings.groq_max_tokens,
                api_key=settings.groq_api_key,
            )
        return self._llm

    async def parse(self, raw_text: str) -> ParsedScript:
        if not raw_text or not raw_text.strip():
            raise ValidationError("Script text is required")

        response = await self.llm.ainvoke([
            SystemMessage(content=SCRIPT_PARSER_SYSTEM_PROMPT),
            HumanMessage(content=f"Please analyze this script and break it down into scenes and shots:\n\n{raw_text}"),
        ])
        parsed = extract_script_json(response.content)

        if not parsed.scenes:
            raise ValidationError("Script parser found no scenes")

        logger.info(
            "Script parsed",
            scenes=len(parsed.scenes),
            shots=parsed.shot_count,
        )
        return parsed


script_parser = ScriptParser()
