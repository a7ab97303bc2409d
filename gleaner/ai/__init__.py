"""LLM enrichment of persisted articles."""

from gleaner.ai.enricher import (
    TOPICS,
    ContentAnalysis,
    EnrichmentError,
    analyze_content,
    default_analysis,
)

__all__ = [
    "TOPICS",
    "ContentAnalysis",
    "EnrichmentError",
    "analyze_content",
    "default_analysis",
]
