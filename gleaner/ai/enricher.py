"""Structured LLM analysis of an article: summary, key points, tags, topic.

Providers
---------
``ollama`` (default)
    Local chat model via ``langchain_ollama``, constrained to JSON output.
    Configure via ``OLLAMA_BASE_URL`` and ``OLLAMA_CHAT_MODEL``.

``openai``
    ``langchain_openai`` chat model in JSON mode.  Requires
    ``OPENAI_API_KEY``; configure via ``OPENAI_CHAT_MODEL``.

The crawler never lets an enrichment failure fail an article; callers are
expected to fall back to :func:`default_analysis`.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gleaner.config import settings

TOPICS = ("Tech", "Business", "Culture", "Education", "Health", "Entertainment", "Other")

# Labels the model sometimes answers with instead of the canonical topic.
_TOPIC_ALIASES = {
    "technology": "Tech",
    "science": "Tech",
    "finance": "Business",
    "economy": "Business",
    "arts": "Culture",
    "society": "Culture",
    "wellness": "Health",
    "medicine": "Health",
    "sports": "Entertainment",
    "科技": "Tech",
    "商业": "Business",
    "文化": "Culture",
    "教育": "Education",
    "健康": "Health",
    "娱乐": "Entertainment",
    "其他": "Other",
}

_SYSTEM_PROMPT = (
    "You are a content analysis assistant who extracts the core information "
    "of an article. Always answer with a single JSON object."
)


class EnrichmentError(RuntimeError):
    """The LLM answered, but not with a usable analysis."""


class ContentAnalysis(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary: str
    key_points: list[str] = Field(default_factory=list, alias="keyPoints")
    tags: list[str] = Field(default_factory=list)
    topic: str = "Other"

    @field_validator("topic", mode="before")
    @classmethod
    def _normalise_topic(cls, value: Any) -> str:
        label = str(value or "").strip()
        for topic in TOPICS:
            if label.lower() == topic.lower():
                return topic
        return _TOPIC_ALIASES.get(label.lower(), "Other")


# ---------------------------------------------------------------------------
# LLM helper
# ---------------------------------------------------------------------------

def _get_llm() -> Any:
    """Return a JSON-constrained LangChain chat model based on ``settings``."""
    if settings.llm_provider == "openai":
        from langchain_openai import ChatOpenAI

        return ChatOpenAI(
            model=settings.openai_chat_model,
            temperature=0,
            timeout=settings.request_timeout * 2,
            model_kwargs={"response_format": {"type": "json_object"}},
        )

    from langchain_ollama import ChatOllama

    return ChatOllama(
        model=settings.ollama_chat_model,
        base_url=settings.ollama_base_url,
        temperature=0,
        format="json",
        client_kwargs={"timeout": settings.request_timeout * 2},
    )


def _build_prompt(title: str, content: str) -> str:
    excerpt = content[: settings.enrich_max_chars]
    return (
        "Analyse the article below and return a JSON object with these keys:\n"
        "- summary: a 100-200 word summary\n"
        "- key_points: 3-5 core points (array of strings)\n"
        "- tags: 3-5 keyword tags (array of strings)\n"
        f"- topic: exactly one of {', '.join(TOPICS)}\n\n"
        f"Title: {title}\n\n"
        f"Content:\n{excerpt}"
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def analyze_content(title: str, content: str) -> ContentAnalysis:
    """Ask the configured LLM for a structured analysis of an article.

    Only the first ``settings.enrich_max_chars`` characters of *content* are
    sent.

    Raises:
        EnrichmentError: If the model's answer is not a valid analysis.
        Exception: Transport errors from the LLM client propagate unchanged.
    """
    from langchain_core.messages import HumanMessage, SystemMessage

    llm = _get_llm()
    response = llm.invoke(
        [SystemMessage(content=_SYSTEM_PROMPT), HumanMessage(content=_build_prompt(title, content))]
    )
    raw = response.content if hasattr(response, "content") else str(response)

    try:
        payload = json.loads(raw if isinstance(raw, str) else json.dumps(raw))
        return ContentAnalysis.model_validate(payload)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise EnrichmentError(f"Unusable analysis from LLM: {exc}") from exc


def default_analysis(content: str) -> ContentAnalysis:
    """Trivial stand-in used whenever the LLM analysis fails."""
    return ContentAnalysis(summary=content[:200] + "...", key_points=[], tags=[], topic="Other")
