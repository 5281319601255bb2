"""LLM extraction and content generation for the curation service."""
