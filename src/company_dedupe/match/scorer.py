"""
Token-based similarity scorer for CompanyDedupe.

Scores a query company name against a candidate name using discriminative
tokens only, so that shared industry words ("tekstil", "holding") do not
make different companies look alike:

    "Akme Tekstil" vs "Akkayalar Tekstil"
    tokens  {akme, tekstil} vs {akkayalar, tekstil}
    unique  {akme} vs {akkayalar}  -> jaccard 0.0 -> different companies
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional, Tuple

from company_dedupe.match.text_similarity import (
    jaccard_similarity,
    levenshtein_similarity,
    token_overlap,
)
from company_dedupe.normalize.config import NormalizationConfig
from company_dedupe.normalize.text_normalizer import TextNormalizer
from company_dedupe.normalize.tokenizer import filter_common_words, shared_tokens, tokenize

logger = logging.getLogger(__name__)

# Character similarity is only worth computing once half the unique tokens agree
CHARACTER_SIMILARITY_GATE = 0.5

# (min token overlap, min character similarity) pairs that flag a typo duplicate
TYPO_DUPLICATE_RULES: Tuple[Tuple[float, float], ...] = (
    (0.8, 0.90),
    (0.6, 0.95),
)


@dataclass(frozen=True)
class SimilarityResult:
    """Similarity metrics between a query name and one candidate name."""

    jaccard_score: float
    token_overlap: float
    character_similarity: float
    unique_tokens_query: FrozenSet[str]
    unique_tokens_candidate: FrozenSet[str]
    common_tokens: FrozenSet[str]
    confidence: float
    is_duplicate: bool

    def explanation(self) -> str:
        """Human-readable summary for debug logs."""
        return (
            f"Jaccard: {self.jaccard_score:.2f}, Token Overlap: {self.token_overlap:.2f}, "
            f"Char Similarity: {self.character_similarity:.2f}, "
            f"Unique1: {sorted(self.unique_tokens_query)}, "
            f"Unique2: {sorted(self.unique_tokens_candidate)}, "
            f"Common: {sorted(self.common_tokens)}, Duplicate: {self.is_duplicate}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jaccard_score": self.jaccard_score,
            "token_overlap": self.token_overlap,
            "character_similarity": self.character_similarity,
            "unique_tokens_query": sorted(self.unique_tokens_query),
            "unique_tokens_candidate": sorted(self.unique_tokens_candidate),
            "common_tokens": sorted(self.common_tokens),
            "confidence": self.confidence,
            "is_duplicate": self.is_duplicate,
        }


class SimilarityScorer:
    """
    Scores company names with Jaccard, token overlap and character similarity.

    Confidence is a weighted sum of the three metrics; the duplicate flag
    follows fixed rules (exact discriminative token match, or high overlap
    combined with near-identical characters).
    """

    def __init__(self, config: NormalizationConfig,
                 normalizer: Optional[TextNormalizer] = None):
        """
        Initialize similarity scorer with configuration.

        Args:
            config: Immutable normalization configuration
            normalizer: Text normalizer (built from config when omitted)
        """
        self.config = config
        self.normalizer = normalizer or TextNormalizer(config)
        self.weights = config.weights

        logger.info("Initialized SimilarityScorer")

    def score(self, query_name: Optional[str], candidate_name: Optional[str]) -> SimilarityResult:
        """
        Calculate token-based similarity between two company names.

        Args:
            query_name: Raw name being registered
            candidate_name: Raw name of an existing company

        Returns:
            SimilarityResult with metrics, confidence and duplicate flag
        """
        tokens1 = tokenize(self.normalizer.normalize(query_name))
        tokens2 = tokenize(self.normalizer.normalize(candidate_name))

        unique_tokens1 = filter_common_words(tokens1, self.config.common_words)
        unique_tokens2 = filter_common_words(tokens2, self.config.common_words)

        jaccard_score = jaccard_similarity(unique_tokens1, unique_tokens2)
        overlap = token_overlap(unique_tokens1, unique_tokens2)

        character_similarity = 0.0
        if overlap >= CHARACTER_SIMILARITY_GATE:
            character_similarity = self.character_similarity(unique_tokens1, unique_tokens2)

        result = SimilarityResult(
            jaccard_score=jaccard_score,
            token_overlap=overlap,
            character_similarity=character_similarity,
            unique_tokens_query=unique_tokens1,
            unique_tokens_candidate=unique_tokens2,
            common_tokens=shared_tokens(tokens1, tokens2),
            confidence=self.calculate_confidence(jaccard_score, overlap, character_similarity),
            is_duplicate=self.is_duplicate(jaccard_score, overlap, character_similarity),
        )

        logger.debug(f"Similarity '{query_name}' vs '{candidate_name}': {result.explanation()}")
        return result

    @staticmethod
    def character_similarity(tokens1: FrozenSet[str], tokens2: FrozenSet[str]) -> float:
        """
        Edit-distance similarity of the unique tokens joined back into text.

        Tokens are sorted before joining so the score does not depend on
        set iteration order.
        """
        if not tokens1 or not tokens2:
            return 0.0

        return levenshtein_similarity(" ".join(sorted(tokens1)), " ".join(sorted(tokens2)))

    def calculate_confidence(self, jaccard_score: float, overlap: float,
                             character_similarity: float) -> float:
        """Weighted confidence, clamped to [0, 1]."""
        confidence = (
            self.weights.jaccard * jaccard_score +
            self.weights.token_overlap * overlap +
            self.weights.character_similarity * character_similarity
        )
        return min(1.0, max(0.0, confidence))

    @staticmethod
    def is_duplicate(jaccard_score: float, overlap: float, character_similarity: float) -> bool:
        """
        Decide whether one candidate is a duplicate of the query.

        1. All discriminative tokens match (jaccard 1.0)
        2. Overlap >= 0.8 and character similarity >= 0.90 (likely typo)
        3. Overlap >= 0.6 and character similarity >= 0.95 (minor typo)
        """
        if jaccard_score >= 1.0:
            return True

        for min_overlap, min_character_similarity in TYPO_DUPLICATE_RULES:
            if overlap >= min_overlap and character_similarity >= min_character_similarity:
                return True

        return False
