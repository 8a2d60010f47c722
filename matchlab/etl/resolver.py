"""
Entity resolution across providers.

Providers name the same club differently ("FC Bayern München", "Bayern
Munich", "Bayern"). TeamResolver turns any of those into a stable join key
and picks the best candidate among another provider's names. Person names
(injury lists vs. top scorers) go through match_person.

Matching priority for TeamResolver.match, first hit wins:
1. Exact key equality (organizational tokens such as "FC" ignored)
2. Alias table hit (both names map to the same canonical key)
3. Longest-overlap containment (shorter >= 3 chars and > 50% of the longer)
4. Significant-word intersection (shared non-generic word of >= 4 chars;
   rejected when either name keeps another non-generic word of >= 4 chars,
   or when both names keep some word the other lacks)
"""

import logging
from functools import lru_cache
from typing import Iterable, Mapping, Optional, TypeVar

from matchlab.etl.name_normalization import (
    GENERIC_TOKENS,
    normalize_person_name,
    normalize_team_name,
    significant_tokens,
    strip_org_tokens,
)
from matchlab.etl.team_aliases import build_alias_index
from matchlab.telemetry.metrics import record_entity_unresolved

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_CONTAINMENT_LENGTH = 3
MIN_CONTAINMENT_RATIO = 0.5
MIN_SIGNIFICANT_LENGTH = 4

EXACT_PERSON_SCORE = 100
INITIAL_PERSON_SCORE = 1


class TeamResolver:
    """Canonicalizes team names and matches them across providers."""

    def __init__(self, aliases: Optional[Mapping[str, list[str]]] = None):
        self._index = build_alias_index(aliases)

    def resolve(self, raw: str) -> str:
        """
        Canonical join key for a raw team name.

        Known aliases map to their canonical key; anything else falls back to
        the normalized name without organizational tokens.
        """
        plain = normalize_team_name(raw)
        if plain in self._index:
            return self._index[plain]
        stripped = strip_org_tokens(raw)
        return self._index.get(stripped, stripped)

    def match(
        self,
        name: str,
        candidates: Iterable[str],
        source: str = "unknown",
    ) -> Optional[str]:
        """
        Pick the candidate naming the same team as `name`.

        Args:
            name: Raw name (or key) to look for.
            candidates: Provider-native names to search.
            source: Low-cardinality label for the unresolved counter.

        Returns:
            The matching candidate as given, or None.
        """
        candidates = list(candidates)
        if not name or not candidates:
            return None

        query_key = strip_org_tokens(name)
        for cand in candidates:
            if strip_org_tokens(cand) == query_key:
                return cand

        query_canon = self.resolve(name)
        for cand in candidates:
            if self.resolve(cand) == query_canon:
                return cand

        best = _best_containment(normalize_team_name(name), candidates)
        if best is not None:
            return best

        best = _best_word_overlap(name, candidates)
        if best is not None:
            return best

        logger.debug("[RESOLVER] No match for %r among %d candidates", name, len(candidates))
        record_entity_unresolved("team", source)
        return None

    def find(
        self,
        mapping: Mapping[str, T],
        name: str,
        source: str = "unknown",
    ) -> Optional[T]:
        key = self.match(name, mapping.keys(), source=source)
        if key is None:
            return None
        return mapping[key]


def _best_containment(query: str, candidates: list[str]) -> Optional[str]:
    best, best_overlap = None, 0
    for cand in candidates:
        key = normalize_team_name(cand)
        shorter, longer = sorted((query, key), key=len)
        if len(shorter) < MIN_CONTAINMENT_LENGTH or shorter not in longer:
            continue
        if len(shorter) / len(longer) <= MIN_CONTAINMENT_RATIO:
            continue
        if len(shorter) > best_overlap:
            best, best_overlap = cand, len(shorter)
    return best


def _distinguishing(words: set[str]) -> set[str]:
    return {w for w in words if len(w) >= MIN_SIGNIFICANT_LENGTH and w not in GENERIC_TOKENS}


def _best_word_overlap(query: str, candidates: list[str]) -> Optional[str]:
    query_words = set(significant_tokens(query))
    best, best_shared = None, 0
    for cand in candidates:
        cand_words = set(significant_tokens(cand))
        shared = _distinguishing(query_words & cand_words)
        if not shared:
            continue
        # Manchester United / Manchester City
        if (query_words - cand_words) and (cand_words - query_words):
            continue
        # Paris FC / Paris Saint-Germain
        if _distinguishing(query_words ^ cand_words):
            continue
        overlap = sum(len(w) for w in shared)
        if overlap > best_shared:
            best, best_shared = cand, overlap
    return best


@lru_cache
def get_resolver() -> TeamResolver:
    """Shared resolver over the built-in alias table."""
    return TeamResolver()


def find_team(
    mapping: Mapping[str, T],
    name: str,
    resolver: Optional[TeamResolver] = None,
) -> Optional[T]:
    """Look a team up in a dict keyed by provider-native names."""
    return (resolver or get_resolver()).find(mapping, name)


def person_match_score(a: str, b: str) -> int:
    """
    Score how well two person names refer to the same player.

    100 for an exact normalized match, the shorter name's length when one
    contains the other, 1 for a last-name + first-initial match, else 0.
    """
    na, nb = normalize_person_name(a), normalize_person_name(b)
    if not na or not nb:
        return 0
    if na == nb:
        return EXACT_PERSON_SCORE
    if na in nb or nb in na:
        return min(len(na), len(nb))

    parts_a, parts_b = na.split(), nb.split()
    if len(parts_a) >= 2 and len(parts_b) >= 2:
        if parts_a[-1] == parts_b[-1] and parts_a[0][0] == parts_b[0][0]:
            return INITIAL_PERSON_SCORE
    return 0


def match_person(name: str, candidates: Iterable[str]) -> Optional[str]:
    """Best-scoring candidate for a person name (first wins on ties)."""
    best, best_score = None, 0
    for cand in candidates:
        score = person_match_score(name, cand)
        if score > best_score:
            best, best_score = cand, score
    if best is None:
        logger.debug("[RESOLVER] No player match for %r", name)
        record_entity_unresolved("player", "squad")
    return best
