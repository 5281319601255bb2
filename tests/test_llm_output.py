import json

import pytest

from llm.adapter import BaseLLMAdapter, MockLLMAdapter
from llm.prompt_builder import (
    ARTICLE_EXCERPT_LIMIT,
    EMAIL_TEXT_LIMIT,
    FORMAT_INSTRUCTIONS,
    build_draft_prompt,
    build_email_extraction_prompt,
)
from llm.retry import LLMRetryExhaustedError, generate_with_retry
from llm.schema import EmailExtraction, GeneratedContent
from llm.validator import LLMOutputValidationError, validate_llm_output


class ScriptedAdapter(BaseLLMAdapter):
    def __init__(self, responses: list[str]) -> None:
        self._responses = list(responses)
        self.calls = 0

    def generate(self, prompt: str, system: str | None = None) -> str:
        self.calls += 1
        return self._responses.pop(0)


def _extraction_payload() -> dict:
    return {
        "title": "Agents in production",
        "source": "The Batch",
        "author": "Andrew",
        "summary": "What changed this week.",
        "keyInsights": ["One", "Two"],
        "fullText": "Body text",
        "publicationDate": "2026-03-02",
        "isArticle": True,
        "nonArticleReason": "",
    }


def test_extraction_accepts_camel_case_aliases() -> None:
    parsed = validate_llm_output(json.dumps(_extraction_payload()), EmailExtraction)
    assert parsed.key_insights == ["One", "Two"]
    assert parsed.full_text == "Body text"
    assert parsed.is_article is True


def test_extraction_accepts_snake_case_names() -> None:
    parsed = EmailExtraction.model_validate({"title": "T", "key_insights": ["x"], "is_article": False})
    assert parsed.key_insights == ["x"]
    assert parsed.is_article is False


def test_markdown_fences_are_stripped() -> None:
    raw = "```json\n" + json.dumps(_extraction_payload()) + "\n```"
    assert validate_llm_output(raw, EmailExtraction).title == "Agents in production"


def test_invalid_json_fails_at_parse_stage() -> None:
    with pytest.raises(LLMOutputValidationError) as exc_info:
        validate_llm_output("not json", EmailExtraction)
    assert exc_info.value.stage == "json_parse"
    assert exc_info.value.raw_response == "not json"


def test_top_level_array_fails_at_schema_stage() -> None:
    with pytest.raises(LLMOutputValidationError) as exc_info:
        validate_llm_output("[1, 2]", GeneratedContent)
    assert exc_info.value.stage == "schema"


def test_generated_content_requires_title_and_content() -> None:
    with pytest.raises(LLMOutputValidationError) as exc_info:
        validate_llm_output(json.dumps({"title": "  ", "content": ""}), GeneratedContent)
    assert exc_info.value.stage == "schema"
    assert any(error.startswith("title") for error in exc_info.value.errors)


def test_retry_recovers_after_bad_output() -> None:
    adapter = ScriptedAdapter(["oops", json.dumps({"title": "T", "content": "C"})])
    result = generate_with_retry(adapter, "prompt", GeneratedContent, max_retries=2)
    assert result.content == "C"
    assert adapter.calls == 2


def test_retry_exhausted_after_all_attempts() -> None:
    adapter = ScriptedAdapter(["bad"] * 3)
    with pytest.raises(LLMRetryExhaustedError) as exc_info:
        generate_with_retry(adapter, "prompt", GeneratedContent, max_retries=2)
    assert exc_info.value.attempts == 3
    assert len(exc_info.value.history) == 3
    assert adapter.calls == 3


def test_mock_adapter_satisfies_both_schemas() -> None:
    raw = MockLLMAdapter().generate("anything")
    assert validate_llm_output(raw, EmailExtraction).title
    assert validate_llm_output(raw, GeneratedContent).content


def test_email_prompt_truncates_body() -> None:
    prompt = build_email_extraction_prompt(
        subject="Weekly",
        from_name=None,
        from_address="news@batch.ai",
        raw_text="a" * (EMAIL_TEXT_LIMIT + 500),
    )
    assert "Weekly" in prompt
    assert "news@batch.ai" in prompt
    assert "a" * EMAIL_TEXT_LIMIT in prompt
    assert "a" * (EMAIL_TEXT_LIMIT + 1) not in prompt


@pytest.mark.parametrize("fmt", sorted(FORMAT_INSTRUCTIONS))
def test_draft_prompt_for_every_format(fmt: str) -> None:
    prompt = build_draft_prompt(
        format=fmt,
        title="Agents in production",
        source=None,
        summary="Summary",
        key_insights=["One", "Two"],
        full_text="b" * (ARTICLE_EXCERPT_LIMIT + 10),
        custom_angle="contrarian take",
    )
    assert "Agents in production" in prompt
    assert "One; Two" in prompt
    assert "contrarian take" in prompt
    assert "b" * (ARTICLE_EXCERPT_LIMIT + 1) not in prompt


def test_draft_prompt_rejects_unknown_format() -> None:
    with pytest.raises(ValueError):
        build_draft_prompt(
            format="podcast",
            title="T",
            source=None,
            summary=None,
            key_insights=[],
            full_text=None,
        )


def test_leading_prose_before_json_is_tolerated() -> None:
    raw = "Sure, here it is:\n" + json.dumps({"title": "T", "content": "C"})
    assert validate_llm_output(raw, GeneratedContent).title == "T"


def test_retry_prompt_reports_previous_problem() -> None:
    prompts: list[str] = []

    class RecordingAdapter(BaseLLMAdapter):
        def generate(self, prompt: str, system: str | None = None) -> str:
            prompts.append(prompt)
            if len(prompts) == 1:
                return json.dumps({"title": "T"})
            return json.dumps({"title": "T", "content": "C"})

    generate_with_retry(RecordingAdapter(), "base prompt", GeneratedContent, max_retries=1)

    assert prompts[0] == "base prompt"
    assert prompts[1].startswith("base prompt")
    assert "content" in prompts[1].split("base prompt", 1)[1]
