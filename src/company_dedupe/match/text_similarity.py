"""
String and token-set similarity primitives for CompanyDedupe.

Edit distance, set-based similarity and name ranking helpers shared by the
similarity scorer and the name search command.
"""

import logging
import math
from collections import Counter
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from jellyfish import jaro_winkler_similarity as _jaro_winkler
from Levenshtein import distance as _levenshtein_distance
from thefuzz import fuzz, process

from company_dedupe.normalize.text_normalizer import TextNormalizer

logger = logging.getLogger(__name__)


def levenshtein_distance(s1: Optional[str], s2: Optional[str]) -> int:
    """
    Edit distance with unit-cost insertion, deletion and substitution.

    A missing string counts as empty.
    """
    return _levenshtein_distance(s1 or "", s2 or "")


def levenshtein_similarity(s1: Optional[str], s2: Optional[str]) -> float:
    """
    Normalized edit-distance similarity: 1 - distance / max(len).

    Returns:
        1.0 for equal strings (including two empty strings), 0.0 when
        either string is missing
    """
    if s1 is None or s2 is None:
        return 0.0
    if s1 == s2:
        return 1.0

    max_length = max(len(s1), len(s2))
    return 1.0 - levenshtein_distance(s1, s2) / max_length


def _as_token_set(value: Union[str, Iterable[str], None]) -> FrozenSet[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        return frozenset(value.lower().split())
    return frozenset(value)


def jaccard_similarity(set1: Union[str, Iterable[str], None],
                       set2: Union[str, Iterable[str], None]) -> float:
    """
    Jaccard similarity |A ∩ B| / |A ∪ B|.

    Plain strings are split on whitespace first. Two empty sets are
    treated as equal (1.0); exactly one empty set gives 0.0.
    """
    set1, set2 = _as_token_set(set1), _as_token_set(set2)
    if not set1 and not set2:
        return 1.0
    if not set1 or not set2:
        return 0.0

    return len(set1 & set2) / len(set1 | set2)


def token_overlap(set1: Union[str, Iterable[str], None],
                  set2: Union[str, Iterable[str], None]) -> float:
    """
    Share of the smaller set that also appears in the other: |A ∩ B| / min(|A|, |B|).

    Same input and empty-set handling as jaccard_similarity.
    """
    set1, set2 = _as_token_set(set1), _as_token_set(set2)
    if not set1 and not set2:
        return 1.0
    if not set1 or not set2:
        return 0.0

    return len(set1 & set2) / min(len(set1), len(set2))


def cosine_similarity(s1: Optional[str], s2: Optional[str]) -> float:
    """Cosine similarity of whitespace term-frequency vectors."""
    if not s1 or not s2:
        return 0.0

    vector1 = Counter(s1.lower().split())
    vector2 = Counter(s2.lower().split())

    dot_product = sum(vector1[term] * vector2[term] for term in vector1.keys() & vector2.keys())
    norm1 = math.sqrt(sum(freq * freq for freq in vector1.values()))
    norm2 = math.sqrt(sum(freq * freq for freq in vector2.values()))

    if norm1 == 0.0 or norm2 == 0.0:
        return 0.0

    return dot_product / (norm1 * norm2)


def jaro_winkler_similarity(s1: Optional[str], s2: Optional[str]) -> float:
    """Jaro-Winkler similarity in [0, 1]."""
    if s1 is None or s2 is None:
        return 0.0
    if s1 == s2:
        return 1.0
    return _jaro_winkler(s1, s2)


# Scorers for thefuzz.process return values on a 0-100 scale
NAME_SEARCH_SCORERS: Dict[str, Callable[[str, str], float]] = {
    "levenshtein": lambda s1, s2: levenshtein_similarity(s1, s2) * 100,
    "jaro_winkler": lambda s1, s2: jaro_winkler_similarity(s1, s2) * 100,
    "token_set": fuzz.token_set_ratio,
    "cosine": lambda s1, s2: cosine_similarity(s1, s2) * 100,
}


def find_similar_names(query: Optional[str],
                       names: List[str],
                       normalizer: TextNormalizer,
                       algorithm: Optional[str] = None,
                       threshold: Optional[float] = None,
                       limit: Optional[int] = None) -> List[Tuple[str, float]]:
    """
    Rank existing company names by similarity to a query.

    Args:
        query: Raw query name
        names: Raw candidate names
        normalizer: Normalizer applied to the query and every name
        algorithm: "levenshtein", "jaro_winkler", "token_set" or "cosine"
            (config default when omitted)
        threshold: Minimum similarity in [0, 1] (config default when omitted)
        limit: Maximum number of results (config default when omitted)

    Returns:
        List of (name, similarity) pairs, best match first
    """
    config = normalizer.config
    algorithm = algorithm or config.name_search_algorithm
    threshold = config.name_search_threshold if threshold is None else threshold
    limit = limit or config.autocomplete_max_results

    if algorithm not in NAME_SEARCH_SCORERS:
        raise ValueError(f"Unsupported name search algorithm: {algorithm}")

    if not query or len(query.strip()) < config.autocomplete_min_length or not names:
        return []

    matches = process.extractBests(
        query,
        names,
        processor=normalizer.normalize,
        scorer=NAME_SEARCH_SCORERS[algorithm],
        score_cutoff=threshold * 100,
        limit=limit,
    )

    results = [(name, score / 100.0) for name, score in matches]
    logger.debug(f"Name search for '{query}' ({algorithm}) returned {len(results)} matches")
    return results
