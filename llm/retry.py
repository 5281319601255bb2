"""Bounded re-asking when a model response fails validation.

Only ``json_parse`` and ``schema`` failures are retried, and each retry
tells the model what was wrong with its previous answer. Adapter errors
(network, auth, rate limits) propagate on the first occurrence.
"""

import logging
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel

from llm.adapter import BaseLLMAdapter
from llm.validator import LLMOutputValidationError, validate_llm_output

logger = logging.getLogger(__name__)

_RETRYABLE_STAGES = frozenset({"json_parse", "schema"})
_MAX_REPORTED_ERRORS = 5

ModelT = TypeVar("ModelT", bound=BaseModel)


class LLMRetryExhaustedError(Exception):
    """Every attempt produced output that failed validation.

    Attributes:
        attempts: Number of adapter calls made.
        last_error: Validation error from the final attempt.
        history: Validation errors from all attempts, oldest first.
    """

    def __init__(
        self,
        attempts: int,
        last_error: LLMOutputValidationError,
        history: List[LLMOutputValidationError],
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        self.history = history
        super().__init__(f"No valid LLM output after {attempts} attempt(s): {last_error}")


def build_correction_prompt(prompt: str, error: LLMOutputValidationError) -> str:
    """Append the previous attempt's problems to the original prompt."""
    problems = "\n".join(f"- {item}" for item in error.errors[:_MAX_REPORTED_ERRORS])
    return (
        f"{prompt}\n\n"
        "Your previous response could not be used:\n"
        f"{problems}\n"
        "Respond again with a single valid JSON object and nothing else."
    )


def generate_with_retry(
    adapter: BaseLLMAdapter,
    prompt: str,
    model: Type[ModelT],
    system: Optional[str] = None,
    max_retries: int = 2,
) -> ModelT:
    """Call the adapter until its output validates against ``model``.

    At most ``1 + max_retries`` adapter calls are made.

    Raises:
        LLMOutputValidationError: For a failure stage that is not retried.
        LLMRetryExhaustedError: When every attempt failed validation.
    """
    total_attempts = 1 + max(0, max_retries)
    history: List[LLMOutputValidationError] = []
    current_prompt = prompt

    for attempt in range(1, total_attempts + 1):
        raw = adapter.generate(current_prompt, system=system)
        try:
            result = validate_llm_output(raw, model)
        except LLMOutputValidationError as exc:
            if exc.stage not in _RETRYABLE_STAGES:
                raise
            history.append(exc)
            logger.warning(
                "LLM attempt %d/%d rejected stage=%s errors=%s",
                attempt,
                total_attempts,
                exc.stage,
                "; ".join(exc.errors),
            )
            current_prompt = build_correction_prompt(prompt, exc)
            continue

        if attempt > 1:
            logger.info("LLM output accepted on attempt %d/%d", attempt, total_attempts)
        return result

    raise LLMRetryExhaustedError(attempts=total_attempts, last_error=history[-1], history=history)
