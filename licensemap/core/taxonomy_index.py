# licensemap/core/taxonomy_index.py

"""
Lookup structures derived from a taxonomy.

A TaxonomyIndex is built once and never mutated. Replacing the taxonomy means
building a new index with the next generation number, so anything keyed by
generation (the classifier cache) goes stale on its own.
"""

from typing import Any, Mapping, NamedTuple, Optional, Sequence
import logging
import re

from licensemap.catalog import KEYWORD_MAP, VENDOR_OVERRIDES, VENDOR_PREFIXES
from licensemap.core.normalizers import normalize_name, tokenize
from licensemap.models import GroupPath, Taxonomy, join_path, split_path

logger = logging.getLogger(__name__)

_BY_VENDOR = re.compile(r' by ([\w\s]+)')


class Member(NamedTuple):
    raw: str
    normalized: str
    tokens: frozenset


class Leaf(NamedTuple):
    segments: GroupPath
    path: str
    members: tuple[Member, ...]


def extract_vendor(name: str | None, prefixes: Sequence[str] = VENDOR_PREFIXES) -> Optional[str]:
    """
    Guess the vendor of an application name.

    1. A known vendor prefix the normalized name starts with
    2. The text after " by " ("Reader by Adobe")
    3. The first word, if it has at least three characters
    """
    normalized = normalize_name(name)
    if not normalized:
        return None

    for prefix in prefixes:
        if normalized.startswith(prefix):
            return prefix.strip()

    by_vendor = _BY_VENDOR.search(normalized)
    if by_vendor:
        return by_vendor.group(1).strip()

    first_word = normalized.split(' ')[0]
    if len(first_word) >= 3:
        return first_word

    return None


class TaxonomyIndex:
    """Read-only lookups over one generation of the taxonomy."""

    def __init__(
        self,
        taxonomy: Taxonomy,
        generation: int,
        leaves: tuple[Leaf, ...],
        paths: dict[str, GroupPath],
        exact_paths: dict[str, str],
        vendor_map: dict[str, str],
        keyword_map: dict[str, tuple[str, ...]],
        vendor_prefixes: Sequence[str],
    ):
        self.taxonomy = taxonomy
        self.generation = generation
        self.leaves = leaves
        self.paths = paths
        self.exact_paths = exact_paths
        self.vendor_map = vendor_map
        self.keyword_map = keyword_map
        self.vendor_prefixes = tuple(vendor_prefixes)

    @classmethod
    def build(
        cls,
        definition: Any,
        generation: int = 0,
        vendor_overrides: Optional[Mapping[str, str]] = None,
        keyword_map: Optional[Mapping[str, Sequence[str]]] = None,
        vendor_prefixes: Sequence[str] = VENDOR_PREFIXES,
    ) -> "TaxonomyIndex":
        """
        Build an index from a taxonomy definition.

        Raises TaxonomyError if the definition is malformed. Curated vendor and
        keyword entries pointing at paths the taxonomy does not contain are
        dropped, so every path the index hands out exists in the taxonomy.
        """
        taxonomy = Taxonomy.parse(definition)
        if vendor_overrides is None:
            vendor_overrides = VENDOR_OVERRIDES
        if keyword_map is None:
            keyword_map = KEYWORD_MAP

        paths: dict[str, GroupPath] = {}
        leaves: list[Leaf] = []
        exact: dict[str, str] = {}
        vendors: dict[str, str] = {}

        for segments, node in taxonomy.walk():
            path = join_path(segments)
            paths[path] = segments
            if not node.members:
                continue

            members = []
            for raw in node.members:
                normalized = normalize_name(raw)
                if not normalized:
                    continue
                members.append(Member(raw, normalized, frozenset(tokenize(normalized))))
                exact.setdefault(normalized, path)
                vendor = extract_vendor(raw, vendor_prefixes)
                if vendor:
                    vendors[vendor] = path
            leaves.append(Leaf(segments, path, tuple(members)))

        dropped = 0
        for vendor, target in vendor_overrides.items():
            target = join_path(split_path(target))
            if target in paths:
                vendors[vendor] = target
            else:
                dropped += 1

        keywords: dict[str, tuple[str, ...]] = {}
        for target, words in keyword_map.items():
            target = join_path(split_path(target))
            if target in paths:
                keywords[target] = tuple(words)
            else:
                dropped += 1

        if dropped:
            logger.debug(f"Dropped {dropped} curated entries pointing outside the taxonomy")

        logger.info(
            f"Built taxonomy index generation {generation}: "
            f"{len(paths)} paths, {len(leaves)} leaves, {len(vendors)} vendors"
        )

        return cls(
            taxonomy=taxonomy,
            generation=generation,
            leaves=tuple(leaves),
            paths=paths,
            exact_paths=exact,
            vendor_map=vendors,
            keyword_map=keywords,
            vendor_prefixes=vendor_prefixes,
        )

    def has_path(self, path: str) -> bool:
        return path in self.paths

    def segments(self, path: str) -> GroupPath:
        return self.paths.get(path, split_path(path))

    def keywords_for(self, path: str) -> tuple[str, ...]:
        return self.keyword_map.get(path, ())

    def vendor_of(self, name: str | None) -> Optional[str]:
        return extract_vendor(name, self.vendor_prefixes)
