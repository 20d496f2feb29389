# licensemap/core/classification.py

"""
Taxonomy classification of application names.

Cascade, first success wins:
1. Exact:   a taxonomy member with the same normalized name     -> 1.0
2. Fuzzy:   best word-set similarity over every member          -> 0.8
3. Keyword: curated keywords contained in the name              -> <= 0.7
4. Vendor:  vendor token mapped to a path                       -> >= 0.6
5. Otherwise "Unclassified" with confidence 0.
"""

from typing import Any, Callable, Iterable, NamedTuple, Optional
import logging
import threading

from licensemap.catalog import DEFAULT_TAXONOMY
from licensemap.config import Settings, get_settings
from licensemap.core.normalizers import normalize_name, tokenize
from licensemap.core.taxonomy_index import TaxonomyIndex
from licensemap.models import (
    Classification,
    ClassifiedRecord,
    Suggestion,
    UNCLASSIFIED,
    UNCLASSIFIED_RESULT,
)

logger = logging.getLogger(__name__)


class StaleGenerationError(RuntimeError):
    """A batch was classified against a taxonomy that has since been replaced."""

    def __init__(self, expected: int, current: int):
        super().__init__(
            f"Taxonomy generation changed from {expected} to {current} during classification"
        )
        self.expected = expected
        self.current = current


class Query(NamedTuple):
    raw: str
    normalized: str
    tokens: frozenset

    @classmethod
    def of(cls, raw: str) -> "Query":
        normalized = normalize_name(raw)
        return cls(raw, normalized, frozenset(tokenize(normalized)))


Strategy = Callable[[TaxonomyIndex, Query, Settings], Optional[Classification]]


# ============================================
# Scoring
# ============================================

def similarity(a: str, a_tokens: frozenset, b: str, b_tokens: frozenset, boost: float) -> float:
    """
    Word-set Jaccard similarity of two normalized names.

    When one name contains the other the score is raised to at least `boost`.
    """
    union = a_tokens | b_tokens
    jaccard = len(a_tokens & b_tokens) / len(union) if union else 0.0
    if a in b or b in a:
        return max(jaccard, boost)
    return jaccard


def best_fuzzy_path(index: TaxonomyIndex, query: Query, settings: Settings) -> tuple[Optional[str], float]:
    """Highest scoring leaf over every member; ties keep the first in tree order."""
    best_path = None
    best_score = 0.0
    for leaf in index.leaves:
        for member in leaf.members:
            score = similarity(
                query.normalized, query.tokens,
                member.normalized, member.tokens,
                settings.substring_boost,
            )
            if score > best_score:
                best_score = score
                best_path = leaf.path
    return best_path, best_score


def keyword_ratio(keyword: str, normalized: str, settings: Settings) -> float:
    """
    Uncapped keyword score: len(keyword) / len(name) when the name contains the
    keyword, or when a keyword longer than keyword_min_containing_length
    contains the name. 0 otherwise.
    """
    if keyword in normalized or (
        len(keyword) > settings.keyword_min_containing_length and normalized in keyword
    ):
        return len(keyword) / len(normalized)
    return 0.0


def best_keyword_path(index: TaxonomyIndex, query: Query, settings: Settings) -> tuple[Optional[str], float]:
    """
    Highest keyword score over the keyword table.

    Paths are ranked by the uncapped ratio, so the longest containing keyword
    wins; the returned score is capped at keyword_score_cap.
    """
    best_path = None
    best_ratio = 0.0
    for path, keywords in index.keyword_map.items():
        for keyword in keywords:
            ratio = keyword_ratio(keyword, query.normalized, settings)
            if ratio > best_ratio:
                best_ratio = ratio
                best_path = path
    return best_path, min(best_ratio, settings.keyword_score_cap)


def path_keyword_score(index: TaxonomyIndex, query: Query, path: str, settings: Settings) -> float:
    """Keyword confidence of one path, scored like the keyword tier."""
    ratio = max(
        (keyword_ratio(keyword, query.normalized, settings) for keyword in index.keywords_for(path)),
        default=0.0,
    )
    return min(settings.keyword_confidence_cap, settings.keyword_score_cap, ratio)


# ============================================
# Strategies
# ============================================

def match_exact(index: TaxonomyIndex, query: Query, settings: Settings) -> Optional[Classification]:
    path = index.exact_paths.get(query.normalized)
    if path is None:
        return None
    return Classification(group_path=path, confidence=settings.exact_confidence, method="exact")


def match_fuzzy(index: TaxonomyIndex, query: Query, settings: Settings) -> Optional[Classification]:
    path, score = best_fuzzy_path(index, query, settings)
    if path is None or score <= settings.fuzzy_threshold:
        return None
    return Classification(group_path=path, confidence=settings.fuzzy_confidence, method="fuzzy")


def match_keyword(index: TaxonomyIndex, query: Query, settings: Settings) -> Optional[Classification]:
    path, score = best_keyword_path(index, query, settings)
    if path is None or score <= settings.keyword_threshold:
        return None
    return Classification(
        group_path=path,
        confidence=min(settings.keyword_confidence_cap, score),
        method="keyword",
    )


def match_vendor(index: TaxonomyIndex, query: Query, settings: Settings) -> Optional[Classification]:
    vendor = index.vendor_of(query.raw)
    if not vendor:
        return None
    path = index.vendor_map.get(vendor)
    if path is None:
        return None
    confidence = max(settings.vendor_confidence, path_keyword_score(index, query, path, settings))
    return Classification(group_path=path, confidence=confidence, method="vendor")


STRATEGIES: tuple[Strategy, ...] = (match_exact, match_fuzzy, match_keyword, match_vendor)


def run_cascade(
    index: TaxonomyIndex,
    name: Any,
    settings: Settings,
    strategies: Iterable[Strategy] = STRATEGIES,
) -> Classification:
    """Run the strategies in order and return the first match. Never raises."""
    if name is None or not str(name).strip():
        return UNCLASSIFIED_RESULT

    query = Query.of(str(name))
    if not query.normalized:
        return UNCLASSIFIED_RESULT

    for strategy in strategies:
        result = strategy(index, query, settings)
        if result is not None:
            return result

    return UNCLASSIFIED_RESULT


def _cache_key(name: Any) -> str:
    if name is None:
        return ""
    return name if isinstance(name, str) else str(name)


# ============================================
# Classifier
# ============================================

class Classifier:
    """
    Classifies application names against the current taxonomy generation.

    Results are memoized per (generation, raw name). update_definitions swaps
    in a freshly built index with the next generation, so cached results of
    the previous taxonomy are never served again.
    """

    def __init__(
        self,
        taxonomy: Any = None,
        settings: Optional[Settings] = None,
        vendor_overrides: Optional[dict[str, str]] = None,
        keyword_map: Optional[dict[str, list[str]]] = None,
    ):
        self.settings = settings or get_settings()
        self._vendor_overrides = vendor_overrides
        self._keyword_map = keyword_map
        self._lock = threading.Lock()
        self._index = self._build_index(DEFAULT_TAXONOMY if taxonomy is None else taxonomy, 0)
        self._cache: dict[tuple[int, str], Classification] = {}

    def _build_index(self, taxonomy: Any, generation: int) -> TaxonomyIndex:
        return TaxonomyIndex.build(
            taxonomy,
            generation=generation,
            vendor_overrides=self._vendor_overrides,
            keyword_map=self._keyword_map,
        )

    @property
    def index(self) -> TaxonomyIndex:
        return self._index

    @property
    def generation(self) -> int:
        return self._index.generation

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def update_definitions(self, taxonomy: Any) -> int:
        """
        Replace the taxonomy and invalidate every derived lookup.

        The new index is fully built before anything is swapped; a malformed
        taxonomy raises TaxonomyError and leaves the current index in place.
        Returns the new generation.
        """
        with self._lock:
            index = self._build_index(taxonomy, self._index.generation + 1)
            self._index, self._cache = index, {}

        logger.info(f"Taxonomy definitions replaced, now at generation {index.generation}")
        return index.generation

    # ============================================
    # Classification
    # ============================================

    def classify(self, name: Any) -> Classification:
        """Classify one application name. Unmatched or empty names are Unclassified."""
        index = self._index
        key = _cache_key(name)

        cached = self._cache.get((index.generation, key))
        if cached is not None:
            return cached

        result = run_cascade(index, key, self.settings)
        self._cache[(index.generation, key)] = result
        return result

    def classify_batch(
        self,
        names: Iterable[Any],
        generation: Optional[int] = None,
    ) -> tuple[list[Classification], dict[str, Classification]]:
        """
        Classify a batch against one snapshot of the index.

        Returns the results and the batch's own cache shard. Raises
        StaleGenerationError if `generation` is not current when the batch
        starts, or if the taxonomy was replaced while it ran.
        """
        index = self._index
        expected = index.generation if generation is None else generation
        if index.generation != expected:
            raise StaleGenerationError(expected, index.generation)

        shard: dict[str, Classification] = {}
        results: list[Classification] = []
        for name in names:
            key = _cache_key(name)
            result = shard.get(key) or self._cache.get((expected, key))
            if result is None:
                result = run_cascade(index, key, self.settings)
            shard[key] = result
            results.append(result)

        current = self._index.generation
        if current != expected:
            raise StaleGenerationError(expected, current)

        return results, shard

    def merge_cache(self, shard: dict[str, Classification], generation: int) -> int:
        """
        Merge a worker's cache shard. Shards of other generations are dropped.

        Returns the number of entries merged.
        """
        if generation != self._index.generation:
            logger.warning(
                f"Discarding cache shard of generation {generation}, "
                f"current is {self._index.generation}"
            )
            return 0
        self._cache.update({(generation, key): result for key, result in shard.items()})
        return len(shard)

    def classify_records(self, records: Iterable[dict]) -> list[ClassifiedRecord]:
        """Classify inventory rows by their application field."""
        field = self.settings.application_field
        return [
            ClassifiedRecord.from_classification(row, self.classify(row.get(field)))
            for row in records
        ]

    # ============================================
    # Auditing
    # ============================================

    def confidence_of(self, name: Any, group_path: str) -> float:
        """
        Re-derive the confidence that `name` belongs to `group_path`.

        Ignores the cache, so an externally assigned path can be audited. The
        tiers are tried in cascade order; the first one that lands on
        `group_path` gives the score, so a path the classifier assigned audits
        at the confidence it was assigned with. Any other path scores by its
        keywords alone.
        """
        if group_path == UNCLASSIFIED or name is None or not str(name).strip():
            return 0.0

        index = self._index
        query = Query.of(str(name))
        if not query.normalized:
            return 0.0

        for strategy in STRATEGIES:
            result = strategy(index, query, self.settings)
            if result is not None and result.group_path == group_path:
                return result.confidence

        return path_keyword_score(index, query, group_path, self.settings)

    def suggest(
        self,
        name: Any,
        limit: Optional[int] = None,
        min_confidence: Optional[float] = None,
    ) -> list[Suggestion]:
        """Rank the keyword-table groups for an application, best first."""
        if limit is None:
            limit = self.settings.suggestion_limit
        if min_confidence is None:
            min_confidence = self.settings.keyword_threshold

        suggestions = []
        for path in self._index.keyword_map:
            confidence = self.confidence_of(name, path)
            if confidence > min_confidence:
                suggestions.append(Suggestion(group_path=path, confidence=confidence))

        suggestions.sort(key=lambda s: s.confidence, reverse=True)
        return suggestions[:limit]
