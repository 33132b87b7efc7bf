"""Known LLM provider response shapes.

Each shape is a tagged variant that either recognises a decoded JSON body
and extracts its text, or declines. Shapes are tried in RESPONSE_SHAPES
order and the first match wins.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class OllamaShape:
    """``{"response": "..."}`` as returned by Ollama's /api/generate."""

    text: str

    @classmethod
    def parse(cls, data: Any) -> "OllamaShape | None":
        if isinstance(data, dict) and isinstance(data.get("response"), str):
            return cls(text=data["response"])
        return None


@dataclass(frozen=True)
class OpenAIChatShape:
    """``{"choices": [{"message": {"content": "..."}}]}`` (chat completions)."""

    text: str

    @classmethod
    def parse(cls, data: Any) -> "OpenAIChatShape | None":
        if not isinstance(data, dict):
            return None
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            return None
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if isinstance(content, str):
            return cls(text=content)
        return None


@dataclass(frozen=True)
class OpenAIResponsesShape:
    """``{"output": [{"content": [{"text": "..."}]}]}`` (Responses API).

    Text parts of every output item are concatenated in order; items
    without content (e.g. reasoning summaries) are skipped.
    """

    text: str

    @classmethod
    def parse(cls, data: Any) -> "OpenAIResponsesShape | None":
        if not isinstance(data, dict):
            return None
        output = data.get("output")
        if not isinstance(output, list):
            return None
        parts = []
        for item in output:
            content = item.get("content") if isinstance(item, dict) else None
            if not isinstance(content, list):
                continue
            for part in content:
                if isinstance(part, dict) and isinstance(part.get("text"), str):
                    parts.append(part["text"])
        if not parts:
            return None
        return cls(text="".join(parts))


ProviderResponse = OllamaShape | OpenAIChatShape | OpenAIResponsesShape

RESPONSE_SHAPES = (
    OllamaShape,
    OpenAIChatShape,
    OpenAIResponsesShape,
)


def match_response_shape(data: Any) -> ProviderResponse | None:
    """Return the first shape that recognises ``data``, or None."""
    for shape in RESPONSE_SHAPES:
        matched = shape.parse(data)
        if matched is not None:
            return matched
    return None
