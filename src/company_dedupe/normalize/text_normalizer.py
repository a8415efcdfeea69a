"""
Company name normalization for CompanyDedupe.

Canonicalizes raw company names by removing legal suffixes, folding any
script to ASCII, dropping diacritics and punctuation, and normalizing case
and whitespace so that names can be compared token by token.
"""

import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

from unidecode import unidecode

from company_dedupe.normalize.config import NormalizationConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizationResult:
    """Canonical form of a name, flagged when a fallback path produced it."""

    text: str
    degraded: bool = False
    reason: Optional[str] = None

    def __str__(self) -> str:
        return self.text


class Transliterator(Protocol):
    """Folds text in any script to a lowercase Latin/ASCII representation."""

    def transliterate(self, text: str) -> str:
        ...


class UnidecodeTransliterator:
    """ASCII folding backed by unidecode ("Москва" -> "moskva")."""

    def transliterate(self, text: str) -> str:
        return unidecode(text).lower()


class TextNormalizer:
    """
    Normalizes company names for duplicate detection.

    Pipeline order: suffix removal, transliteration, diacritic removal,
    lowercasing, punctuation removal, whitespace normalization. The output
    is a fixed point of the pipeline, so normalizing twice is a no-op.
    """

    def __init__(self, config: NormalizationConfig,
                 transliterator: Optional[Transliterator] = None):
        """
        Initialize text normalizer with configuration.

        Args:
            config: Immutable normalization configuration
            transliterator: Script folding backend (unidecode by default)
        """
        self.config = config
        self.transliterator = transliterator or UnidecodeTransliterator()

        # Longest suffix first so "Ltd. Şti." wins over "Şti."
        suffixes = sorted(config.company_suffixes, key=len, reverse=True)
        self.suffix_patterns: List[Tuple[str, re.Pattern]] = [
            (suffix, re.compile(r"(?:,\s*|\s+)" + re.escape(suffix) + r"\s*$", re.IGNORECASE))
            for suffix in suffixes
        ]
        self.punctuation_pattern = re.compile(r"[.,;:!?\-_()\[\]{}\"'`]")
        self.whitespace_pattern = re.compile(r"\s+")

        logger.info(f"Initialized TextNormalizer with {len(self.suffix_patterns)} company suffixes")

    def normalize(self, text: Optional[str]) -> str:
        """
        Normalize a company name for comparison.

        Examples:
            "İstanbul Tekstil A.Ş." -> "istanbul tekstil"
            "Société Française SA" -> "societe francaise"
            "ACME Corp., Inc." -> "acme"

        Args:
            text: Raw company name

        Returns:
            Normalized name ("" for blank input)
        """
        return self.normalize_with_status(text).text

    def normalize_with_status(self, text: Optional[str]) -> NormalizationResult:
        """
        Normalize a company name and report whether a fallback was used.

        Args:
            text: Raw company name

        Returns:
            NormalizationResult with the canonical text and degraded flag
        """
        if not isinstance(text, str) or not text.strip():
            return NormalizationResult("")

        if not self.config.enabled:
            return NormalizationResult(text)

        result = self._normalize_once(text)

        # Re-apply until stable; every extra pass can only strip suffixes
        for _ in range(len(text) + 1):
            if result.degraded:
                break
            again = self._normalize_once(result.text)
            if again.degraded or again.text == result.text:
                break
            result = again

        return result

    def _normalize_once(self, text: str) -> NormalizationResult:
        normalized = text
        if self.config.remove_company_suffixes:
            normalized = self.remove_company_suffixes(normalized)

        degraded = False
        reason = None

        try:
            try:
                normalized = self.transliterator.transliterate(normalized)
            except Exception as e:
                logger.warning(f"Transliteration failed for '{text}': {e}")
                normalized = normalized.lower()
                degraded = True
                reason = f"transliteration failed: {e}"

            if self.config.remove_diacritics:
                normalized = self._remove_diacritics(normalized)

            if self.config.lowercase:
                normalized = normalized.lower()

            normalized = self.punctuation_pattern.sub(" ", normalized)

            if self.config.trim_whitespace:
                normalized = self.whitespace_pattern.sub(" ", normalized).strip()

        except Exception as e:
            logger.warning(f"Error normalizing text '{text}', using fallback: {e}")
            return NormalizationResult(text.strip().lower(), degraded=True,
                                       reason=f"normalization failed: {e}")

        return NormalizationResult(normalized, degraded=degraded, reason=reason)

    def remove_company_suffixes(self, text: Optional[str]) -> str:
        """
        Remove trailing legal suffixes ("A.Ş.", "GmbH", "Inc.", ...).

        The suffix must be separated from the name by a space, a comma, or
        both, so "Atlas" keeps its "as".

        Args:
            text: Company name

        Returns:
            Name without trailing legal suffixes
        """
        if not isinstance(text, str) or not text.strip():
            return text or ""

        result = text.strip()
        for suffix, pattern in self.suffix_patterns:
            stripped = pattern.sub("", result)
            if stripped != result:
                logger.debug(f"Removed company suffix '{suffix}' from '{result}'")
                result = stripped.strip()

        return result

    @staticmethod
    def _remove_diacritics(text: str) -> str:
        decomposed = unicodedata.normalize("NFD", text)
        return "".join(c for c in decomposed if not unicodedata.category(c).startswith("M"))

    def are_normalized_equal(self, text1: Optional[str], text2: Optional[str]) -> bool:
        """Check whether two names are identical after normalization."""
        return self.normalize(text1) == self.normalize(text2)
