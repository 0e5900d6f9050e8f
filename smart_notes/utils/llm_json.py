"""Parsing of JSON objects embedded in free-form LLM output."""

import json
import re
from typing import TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from smart_notes.utils.exceptions import ProviderError

T = TypeVar("T", bound=BaseModel)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_json_object(text: str) -> dict:
    """
    Pull the outermost JSON object out of model output.

    Handles code fences and prose around the object.

    Raises:
        ProviderError: If no complete JSON object can be parsed
    """
    if "```json" in text:
        text = text.split("```json", 1)[1].split("```", 1)[0]
    elif "```" in text:
        parts = text.split("```")
        if len(parts) >= 3:
            text = parts[1]

    match = _JSON_OBJECT.search(text)
    if not match:
        raise ProviderError("No JSON object found in AI response")

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ProviderError(f"Malformed JSON in AI response: {e}") from e

    if not isinstance(data, dict):
        raise ProviderError("AI response JSON is not an object")
    return data


def parse_llm_json(text: str, schema: type[T]) -> T:
    """
    Extract and validate a JSON object against a strict schema.

    Raises:
        ProviderError: If extraction or validation fails
    """
    data = extract_json_object(text)
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        raise ProviderError(f"AI response failed validation: {e}") from e
