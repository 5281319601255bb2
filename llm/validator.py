"""Parsing and schema validation of raw model responses.

Models asked for JSON sometimes wrap it in markdown fences or add a
sentence before it. Both are tolerated; anything else is a
``json_parse`` failure, and a payload that parses but does not match
the target pydantic model is a ``schema`` failure.
"""

import json
import re
from typing import Any, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

_FENCED = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)
_FIRST_OBJECT = re.compile(r"\{[\s\S]*\}")


class LLMOutputValidationError(Exception):
    """A model response that could not be turned into the target schema.

    Attributes:
        stage: "json_parse" or "schema".
        errors: Human-readable problems, one per field for schema failures.
        raw_response: The response text exactly as the adapter returned it.
    """

    def __init__(self, stage: str, errors: List[str], raw_response: str) -> None:
        self.stage = stage
        self.errors = errors
        self.raw_response = raw_response
        super().__init__(f"LLM output rejected at stage '{stage}': " + "; ".join(errors))


def _strip_markdown_fences(text: str) -> str:
    stripped = text.strip()
    match = _FENCED.match(stripped)
    return match.group(1).strip() if match else stripped


def _load_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        match = _FIRST_OBJECT.search(text)
        if match is None:
            raise
        return json.loads(match.group(0))


def _format_errors(exc: ValidationError) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
        for error in exc.errors()
    ]


def validate_llm_output(raw_response: str, model: Type[ModelT]) -> ModelT:
    """Return ``raw_response`` parsed into ``model``.

    Raises:
        LLMOutputValidationError: If the text holds no JSON object or the
            object does not satisfy ``model``.
    """
    cleaned = _strip_markdown_fences(raw_response or "")

    try:
        data = _load_json(cleaned)
    except (json.JSONDecodeError, TypeError) as exc:
        raise LLMOutputValidationError("json_parse", [str(exc)], raw_response) from exc

    if not isinstance(data, dict):
        raise LLMOutputValidationError(
            "schema",
            [f"top-level JSON must be an object, got {type(data).__name__}"],
            raw_response,
        )

    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise LLMOutputValidationError("schema", _format_errors(exc), raw_response) from exc
