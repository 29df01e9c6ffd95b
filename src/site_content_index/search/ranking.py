"""Query validation, weighted scoring and ranking over a search index.

The engine is stateless: every call takes the index snapshot it should scan.
Scoring is a weighted sum of case-insensitive substring matches:

    title contains query            +title
    title equals query              +title_exact (on top of +title)
    description contains query      +description
    each tag containing query       +tag
    category contains query         +category
    each occurrence in stripped body +content_occurrence

Entries scoring 0 are dropped. Ordering is score descending, then most
recently modified first, then id and source for determinism. Results are
truncated only after the full ranking is computed.
"""

from __future__ import annotations

import logging

from site_content_index.config import ScoringWeights
from site_content_index.domain.search import (
    FieldMatches,
    QueryValidationError,
    RankedResult,
    SearchIndex,
    SearchIndexEntry,
)
from site_content_index.search.snippet import (
    DEFAULT_EXCERPT_RADIUS,
    count_occurrences,
    extract_excerpt,
    find_first_match,
    highlight_text,
)


logger = logging.getLogger(__name__)

MAX_QUERY_LENGTH = 200
DEFAULT_MAX_RESULTS = 10
MAX_RESULTS_CAP = 50
DEFAULT_WEIGHTS = ScoringWeights()


def validate_query(query: str, max_length: int = MAX_QUERY_LENGTH) -> None:
    """Reject overlong queries before any index scan."""
    if len(query) > max_length:
        raise QueryValidationError(f"Query exceeds {max_length} characters (got {len(query)})")


def _contains(text: str, term: str) -> bool:
    return find_first_match(text, term) != -1


def score_entry(entry: SearchIndexEntry, term: str, weights: ScoringWeights = DEFAULT_WEIGHTS) -> int:
    """Weighted relevance of one entry for an already-trimmed, non-empty term."""
    score = 0

    if _contains(entry.title, term):
        score += weights.title
        if entry.title.casefold() == term.casefold():
            score += weights.title_exact

    if _contains(entry.description, term):
        score += weights.description

    score += weights.tag * sum(1 for tag in entry.tags if _contains(tag, term))

    if _contains(entry.category, term):
        score += weights.category

    score += weights.content_occurrence * count_occurrences(entry.content, term)
    return score


def match_fields(entry: SearchIndexEntry, term: str, excerpt_radius: int = DEFAULT_EXCERPT_RADIUS) -> FieldMatches:
    """Highlighted title/description and a bounded body excerpt for matched fields."""
    return FieldMatches(
        title=highlight_text(entry.title, term) if _contains(entry.title, term) else None,
        description=highlight_text(entry.description, term) if _contains(entry.description, term) else None,
        content=extract_excerpt(entry.content, term, radius=excerpt_radius),
    )


def _ranking_key(result: RankedResult) -> tuple[int, float, str, str]:
    entry = result.entry
    return -result.score, -entry.last_modified.timestamp(), entry.id, entry.source_type.value


def search(
    index: SearchIndex,
    query: str,
    max_results: int = DEFAULT_MAX_RESULTS,
    *,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    max_query_length: int = MAX_QUERY_LENGTH,
    max_results_cap: int = MAX_RESULTS_CAP,
    excerpt_radius: int = DEFAULT_EXCERPT_RADIUS,
) -> list[RankedResult]:
    """Rank index entries against a free-text query.

    Args:
        index: Snapshot to scan.
        query: Raw user query. Blank queries return ``[]``.
        max_results: Requested result count, clamped to ``max_results_cap``.
            Zero or negative yields ``[]``.
        weights: Scoring weights.
        max_query_length: Longer queries raise before scanning.
        max_results_cap: Hard upper bound on returned results.
        excerpt_radius: Characters kept on each side of the first body match.

    Returns:
        At most ``min(max(max_results, 0), max_results_cap)`` results, best first.

    Raises:
        QueryValidationError: Query too long.
    """
    validate_query(query, max_query_length)
    term = query.strip()
    if not term or max_results < 1:
        return []

    limit = min(max_results, max_results_cap)
    ranked: list[RankedResult] = []
    for entry in index.entries:
        score = score_entry(entry, term, weights)
        if score <= 0:
            continue
        ranked.append(
            RankedResult(
                entry=entry,
                score=score,
                matches=match_fields(entry, term, excerpt_radius),
            )
        )

    ranked.sort(key=_ranking_key)
    logger.debug("Query %r matched %d of %d entries", term, len(ranked), len(index))
    return ranked[:limit]


def search_by_category(
    index: SearchIndex,
    query: str,
    category: str,
    max_results: int = 5,
    *,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> list[RankedResult]:
    """Search within one category, drawing from a 100-result ranking window."""
    window = search(index, query, 100, weights=weights, max_results_cap=100)
    return [result for result in window if result.entry.category == category][: max(max_results, 0)]


def search_suggestions(index: SearchIndex, query: str, max_suggestions: int = 5) -> list[str]:
    """Distinct titles and tags containing the query, in index order."""
    validate_query(query)
    term = query.strip()
    if not term or max_suggestions < 1:
        return []

    suggestions: dict[str, None] = {}
    for entry in index.entries:
        if _contains(entry.title, term):
            suggestions.setdefault(entry.title)
        for tag in entry.tags:
            if _contains(tag, term):
                suggestions.setdefault(tag)
        if len(suggestions) >= max_suggestions:
            break
    return list(suggestions)[:max_suggestions]
