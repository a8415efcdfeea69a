"""
Duplicate decision engine for CompanyDedupe.

Combines exact identifier checks (tax ID, registration number) with fuzzy
company name scoring into a single verdict with a confidence score and a
recommendation for the operator registering the company.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence

from company_dedupe.match.scorer import SimilarityResult, SimilarityScorer
from company_dedupe.normalize.config import NormalizationConfig

logger = logging.getLogger(__name__)

HARD_BLOCK_RECOMMENDATION = (
    "Cannot create company: identifier already exists. "
    "If this is your company, please use the forgot password option"
)
VERY_SIMILAR_RECOMMENDATION = "Very similar company found, likely a duplicate. Review before creating"
SIMILAR_RECOMMENDATION = "Similar company found, please verify this is not a duplicate or a typo"
POSSIBLY_SIMILAR_RECOMMENDATION = "Possibly similar company found, proceed with caution"
NO_MATCH_RECOMMENDATION = "No similar company found, safe to proceed"


class MatchType(str, Enum):
    """How a duplicate was detected."""

    EXACT_TAX_ID = "EXACT_TAX_ID"
    EXACT_REGISTRATION = "EXACT_REGISTRATION"
    FUZZY_NAME = "FUZZY_NAME"
    NONE = "NONE"


@dataclass(frozen=True)
class CompanyCandidate:
    """Existing company record supplied by the caller."""

    id: str
    name: Optional[str]
    tax_id: Optional[str] = None
    registration_number: Optional[str] = None
    legal_name: Optional[str] = None

    @classmethod
    def from_mapping(cls, record: Mapping[str, Any]) -> "CompanyCandidate":
        """Build a candidate from a dict-like record; blank values become None."""
        return cls(
            id=_clean_value(record.get("id")) or "",
            name=_clean_value(record.get("name")),
            tax_id=_clean_value(record.get("tax_id")),
            registration_number=_clean_value(record.get("registration_number")),
            legal_name=_clean_value(record.get("legal_name")),
        )


def _clean_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class CandidateScore:
    """Similarity of the query to one candidate (best of name and legal name)."""

    candidate: CompanyCandidate
    result: SimilarityResult
    matched_on: str = "name"


@dataclass(frozen=True)
class DuplicateCheckResult:
    """Final verdict of a duplicate check."""

    is_duplicate: bool
    match_type: MatchType
    confidence: float
    message: str
    recommendation: str
    matched_candidate_id: Optional[str] = None
    matched_candidate_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_duplicate": self.is_duplicate,
            "match_type": self.match_type.value,
            "matched_candidate_id": self.matched_candidate_id,
            "matched_candidate_name": self.matched_candidate_name,
            "confidence": self.confidence,
            "message": self.message,
            "recommendation": self.recommendation,
        }


class DuplicateDecisionEngine:
    """
    Decides whether a company being registered duplicates an existing one.

    Checks run in priority order and stop at the first hit:
    exact tax ID, exact registration number, then fuzzy name similarity.
    """

    def __init__(self, config: NormalizationConfig,
                 scorer: Optional[SimilarityScorer] = None):
        """
        Initialize decision engine with configuration.

        Args:
            config: Immutable normalization configuration
            scorer: Similarity scorer (built from config when omitted)
        """
        self.config = config
        self.scorer = scorer or SimilarityScorer(config)
        self.bands = config.confidence_bands

        logger.info("Initialized DuplicateDecisionEngine")

    def check(self, query_name: Optional[str],
              candidates: Sequence[CompanyCandidate],
              tax_id: Optional[str] = None,
              registration_number: Optional[str] = None) -> DuplicateCheckResult:
        """
        Check a company being registered against existing candidates.

        Identifiers are stripped of surrounding whitespace on both sides and
        then compared exactly (case-sensitive), so " 0123 " matches "0123"
        but "reg-42" does not match "REG-42".

        Args:
            query_name: Raw company name being registered
            candidates: Pre-selected existing companies to compare against
            tax_id: Tax identification number of the new company
            registration_number: Registration number of the new company

        Returns:
            DuplicateCheckResult with match type, confidence and recommendation

        Raises:
            ValueError: If candidates is None
        """
        if candidates is None:
            raise ValueError("candidates must be a sequence, got None")

        # 1. Exact tax ID (highest priority)
        matched = self._find_exact_match(tax_id, candidates, "tax_id")
        if matched:
            logger.info(f"Exact tax ID match with candidate {matched.id}")
            return self._exact_result(MatchType.EXACT_TAX_ID, matched,
                                      "Company with same Tax ID already exists")

        # 2. Exact registration number
        matched = self._find_exact_match(registration_number, candidates, "registration_number")
        if matched:
            logger.info(f"Exact registration number match with candidate {matched.id}")
            return self._exact_result(MatchType.EXACT_REGISTRATION, matched,
                                      "Company with same Registration Number already exists")

        # 3. Name too short to compare meaningfully
        name_length = len(query_name.strip()) if query_name else 0
        if name_length < self.config.fuzzy_search_min_length:
            logger.info(f"Company name '{query_name}' shorter than "
                        f"{self.config.fuzzy_search_min_length} characters, skipping fuzzy check")
            return DuplicateCheckResult(
                is_duplicate=False,
                match_type=MatchType.NONE,
                confidence=0.0,
                message="Company name is too short for fuzzy matching",
                recommendation=NO_MATCH_RECOMMENDATION,
            )

        # 4. Fuzzy name similarity
        best = self._best_candidate(self.score_candidates(query_name, candidates))

        if best is None:
            logger.info(f"No candidates to compare with '{query_name}'")
            return DuplicateCheckResult(
                is_duplicate=False,
                match_type=MatchType.NONE,
                confidence=0.0,
                message="No duplicate company found",
                recommendation=NO_MATCH_RECOMMENDATION,
            )

        confidence = best.result.confidence
        if best.result.is_duplicate:
            logger.info(f"Fuzzy name match '{query_name}' ~ '{best.candidate.name}' "
                        f"(confidence {confidence:.2f}, on {best.matched_on})")
            return DuplicateCheckResult(
                is_duplicate=True,
                match_type=MatchType.FUZZY_NAME,
                confidence=confidence,
                message=f"Similar company name found ({confidence * 100:.0f}% match)",
                recommendation=self.recommendation_for(confidence),
                matched_candidate_id=best.candidate.id,
                matched_candidate_name=best.candidate.name,
            )

        logger.info(f"No duplicate found for '{query_name}' (best confidence {confidence:.2f})")
        if confidence >= self.bands.possibly_similar:
            recommendation = self.recommendation_for(confidence)
        else:
            recommendation = NO_MATCH_RECOMMENDATION

        return DuplicateCheckResult(
            is_duplicate=False,
            match_type=MatchType.NONE,
            confidence=confidence,
            message="No duplicate company found",
            recommendation=recommendation,
        )

    def score_candidates(self, query_name: Optional[str],
                         candidates: Sequence[CompanyCandidate]) -> List[CandidateScore]:
        """
        Score the query name against every well-formed candidate.

        Candidates without a name are skipped with a warning. When a
        candidate has a legal name, the better of the two scores is kept.

        Args:
            query_name: Raw company name being registered
            candidates: Existing companies

        Returns:
            One CandidateScore per scored candidate, in input order
        """
        if candidates is None:
            raise ValueError("candidates must be a sequence, got None")

        scores: List[CandidateScore] = []
        for candidate in candidates:
            if candidate is None or not candidate.name or not candidate.name.strip():
                candidate_id = candidate.id if candidate is not None else None
                logger.warning(f"Skipping candidate {candidate_id}: missing company name")
                continue

            score = CandidateScore(candidate, self.scorer.score(query_name, candidate.name), "name")

            if candidate.legal_name:
                legal = self.scorer.score(query_name, candidate.legal_name)
                if legal.confidence > score.result.confidence:
                    score = CandidateScore(candidate, legal, "legal_name")

            scores.append(score)

        return scores

    @staticmethod
    def _best_candidate(scores: Sequence[CandidateScore]) -> Optional[CandidateScore]:
        best = None
        for score in scores:
            if best is None or score.result.confidence > best.result.confidence:
                best = score
        return best

    @staticmethod
    def _find_exact_match(identifier: Optional[str],
                          candidates: Sequence[CompanyCandidate],
                          attribute: str) -> Optional[CompanyCandidate]:
        if not identifier or not identifier.strip():
            return None

        identifier = identifier.strip()
        for candidate in candidates:
            if candidate is None:
                continue
            value = getattr(candidate, attribute)
            if value and value.strip() == identifier:
                return candidate
        return None

    @staticmethod
    def _exact_result(match_type: MatchType, candidate: CompanyCandidate,
                      message: str) -> DuplicateCheckResult:
        return DuplicateCheckResult(
            is_duplicate=True,
            match_type=match_type,
            confidence=1.0,
            message=message,
            recommendation=HARD_BLOCK_RECOMMENDATION,
            matched_candidate_id=candidate.id,
            matched_candidate_name=candidate.name,
        )

    def recommendation_for(self, confidence: float) -> str:
        """
        Recommendation text for a fuzzy match confidence.

        Args:
            confidence: Confidence in [0, 1]

        Returns:
            Operator-facing recommendation
        """
        if confidence >= self.bands.very_similar:
            return VERY_SIMILAR_RECOMMENDATION
        elif confidence >= self.bands.similar:
            return SIMILAR_RECOMMENDATION
        else:
            return POSSIBLY_SIMILAR_RECOMMENDATION

    def band_for(self, confidence: float) -> str:
        """Short band label (VERY_SIMILAR, SIMILAR, POSSIBLY_SIMILAR, LOW)."""
        if confidence >= self.bands.very_similar:
            return "VERY_SIMILAR"
        elif confidence >= self.bands.similar:
            return "SIMILAR"
        elif confidence >= self.bands.possibly_similar:
            return "POSSIBLY_SIMILAR"
        else:
            return "LOW"
