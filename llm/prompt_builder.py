"""Prompt builders for email extraction and draft generation."""

from typing import Optional, Sequence

EMAIL_TEXT_LIMIT = 8000
BULK_TEXT_LIMIT = 12000
ARTICLE_EXCERPT_LIMIT = 3000

EXTRACTION_SYSTEM = "You extract article content from emails and return structured JSON."
BULK_EXTRACTION_SYSTEM = (
    "You extract multiple articles from newsletter emails and return structured JSON."
)
GENERATION_SYSTEM = (
    "You are an expert content strategist and ghostwriter for B2B thought leaders."
)

_EXTRACTION_TEMPLATE = """\
You are a content extraction assistant. The following is raw text from a \
forwarded email/newsletter. Extract the main article or content and return \
structured JSON.

EMAIL SUBJECT: {subject}
FROM: {from_name} <{from_address}>

RAW TEXT:
{raw_text}

Return a JSON object with:
- title: string (article/post title)
- source: string (publication or sender name)
- author: string (author name or empty string)
- summary: string (2-3 sentence summary)
- keyInsights: array of 3-5 strings (key takeaways)
- fullText: string (main content, cleaned)
- publicationDate: string (ISO date or empty string)
- isArticle: boolean (true if this is substantive content worth keeping, \
false if it is a sales email, booking request, etc.)
- nonArticleReason: string (if isArticle is false, briefly explain why)
"""

_BULK_EXTRACTION_TEMPLATE = """\
You are a content extraction assistant. The following is raw text from a \
newsletter email. Extract ALL distinct articles/posts mentioned in it. For \
each article return:
- title: string
- url: string (the article URL if present, otherwise empty string)
- source: string (publication name)
- author: string (or empty string)
- summary: string (2-3 sentences)
- keyInsights: array of 3-5 strings
- fullText: string (the full body text for that article)
- publicationDate: string (ISO date or empty string)

Return a JSON object with a single key "articles" containing an array of \
these objects.

RAW TEXT:
{raw_text}
"""

FORMAT_INSTRUCTIONS = {
    "video_script": (
        "Write a compelling YouTube video script (800-1200 words) for a founder CEO "
        "audience. Structure: hook (30s), problem setup, main insights with examples, "
        "actionable takeaways, strong CTA. Use conversational, direct language. Include "
        "[PAUSE] markers and B-ROLL suggestions in brackets."
    ),
    "linkedin_post": (
        "Write a high-performing LinkedIn post (200-350 words). Start with a bold, "
        "scroll-stopping first line. Share a contrarian or surprising insight from the "
        "article. Use short paragraphs (1-2 sentences). End with a thought-provoking "
        "question to drive comments. Max 3 relevant hashtags."
    ),
    "instagram_caption": (
        "Write an Instagram caption (150-250 words). Open with a punchy hook. Share one "
        "powerful insight in plain language. Use line breaks for readability. End with a "
        "call to action. Include 5-8 relevant hashtags on a new line."
    ),
    "blog_post": (
        "Create a detailed blog post outline (600-900 words of outline content). Include: "
        "SEO-optimised H1 title, meta description (155 chars), introduction hook, 4-6 H2 "
        "sections each with 3-4 bullet points of content to cover, conclusion with CTA. "
        "Also suggest 3 internal linking opportunities and 2 external authority sources."
    ),
}

_GENERATION_TEMPLATE = """\
You are a content strategist writing for a UK-based business coach to founder \
CEOs. The voice is direct, sceptical, experienced, and grounded in real-world \
business experience. It challenges conventional wisdom and speaks plainly.

ARTICLE DETAILS:
Title: {title}
Source: {source}
Summary: {summary}
Key Insights: {insights}
Full Text (excerpt): {excerpt}
{angle_section}
TASK: {instructions}

Return a JSON object with:
- title: string (headline/title for this piece)
- angle: string (one sentence describing the core angle/hook)
- content: string (the full generated content)
"""


def build_email_extraction_prompt(
    *,
    subject: Optional[str],
    from_name: Optional[str],
    from_address: Optional[str],
    raw_text: Optional[str],
) -> str:
    return _EXTRACTION_TEMPLATE.format(
        subject=subject or "",
        from_name=from_name or "",
        from_address=from_address or "",
        raw_text=(raw_text or "")[:EMAIL_TEXT_LIMIT],
    )


def build_bulk_extraction_prompt(raw_text: str) -> str:
    return _BULK_EXTRACTION_TEMPLATE.format(raw_text=raw_text[:BULK_TEXT_LIMIT])


def build_draft_prompt(
    *,
    format: str,
    title: str,
    source: Optional[str],
    summary: Optional[str],
    key_insights: Sequence[str],
    full_text: Optional[str],
    custom_angle: Optional[str] = None,
) -> str:
    """Build the generation prompt for one content format.

    Raises:
        ValueError: If ``format`` has no generation instructions.
    """
    instructions = FORMAT_INSTRUCTIONS.get(format)
    if instructions is None:
        raise ValueError(f"No generation instructions for format '{format}'.")

    angle_section = f"\nSPECIFIC ANGLE TO TAKE: {custom_angle}\n" if custom_angle else ""
    return _GENERATION_TEMPLATE.format(
        title=title,
        source=source or "Unknown",
        summary=summary or "",
        insights="; ".join(key_insights),
        excerpt=(full_text or "")[:ARTICLE_EXCERPT_LIMIT],
        angle_section=angle_section,
        instructions=instructions,
    )
