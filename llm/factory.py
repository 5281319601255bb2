"""Adapter selection from application settings."""

from llm.adapter import BaseLLMAdapter, MockLLMAdapter, OpenAILLMAdapter


def build_llm_adapter(
    adapter: str,
    model: str,
    max_tokens: int,
    api_key: str | None = None,
    base_url: str | None = None,
) -> BaseLLMAdapter:
    """Return the adapter named by ``adapter`` ("openai" or "mock").

    Raises:
        ValueError: For an unknown adapter name.
    """
    name = adapter.strip().lower()
    if name == "mock":
        return MockLLMAdapter()
    if name == "openai":
        return OpenAILLMAdapter(
            model=model,
            max_tokens=max_tokens,
            api_key=api_key,
            base_url=base_url,
        )
    raise ValueError(f"Unknown LLM adapter '{adapter}'. Allowed: mock, openai.")
