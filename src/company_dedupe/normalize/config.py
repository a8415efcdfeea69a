"""
Configuration utilities for CompanyDedupe.

Provides the immutable configuration snapshot shared by the normalizer,
scorer and decision engine, plus YAML loading, validation and merging.
"""

import copy
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

import yaml

from company_dedupe.normalize.lexicon import (
    COMMON_WORDS,
    COMPANY_SUFFIXES,
    flatten_common_words,
    flatten_suffixes,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/company_dedupe.yaml"
CONFIG_PATH_ENV = "COMPANY_DEDUPE_CONFIG"

NAME_SEARCH_ALGORITHMS = ("levenshtein", "jaro_winkler", "token_set", "cosine")


@dataclass(frozen=True)
class ConfidenceBands:
    """Confidence cut-offs used to pick the recommendation text."""

    very_similar: float = 0.9
    similar: float = 0.8
    possibly_similar: float = 0.5


@dataclass(frozen=True)
class ScoringWeights:
    """Weights of the three similarity metrics in the final confidence."""

    jaccard: float = 0.4
    token_overlap: float = 0.3
    character_similarity: float = 0.3


@dataclass(frozen=True)
class NormalizationConfig:
    """
    Immutable configuration snapshot for one duplicate check.

    Built once (usually from YAML) and passed explicitly to every component.
    """

    company_suffixes: Tuple[str, ...] = ()
    common_words: FrozenSet[str] = frozenset()
    enabled: bool = True
    remove_company_suffixes: bool = True
    remove_diacritics: bool = True
    lowercase: bool = True
    trim_whitespace: bool = True
    fuzzy_search_min_length: int = 3
    confidence_bands: ConfidenceBands = field(default_factory=ConfidenceBands)
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    autocomplete_min_length: int = 2
    autocomplete_max_results: int = 10
    name_search_algorithm: str = "levenshtein"
    name_search_threshold: float = 0.5

    @classmethod
    def default(cls) -> "NormalizationConfig":
        """Configuration built from the default lexicons and thresholds."""
        return cls.from_dict(get_default_normalization_config())

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "NormalizationConfig":
        """
        Build a configuration snapshot from a configuration dictionary.

        Args:
            config: Dictionary with ``normalization``, ``duplicate_detection``
                and ``scoring`` sections (missing keys fall back to defaults)

        Returns:
            Frozen configuration
        """
        norm = config.get("normalization", {}) or {}
        detection = config.get("duplicate_detection", {}) or {}
        scoring = config.get("scoring", {}) or {}
        bands = detection.get("confidence_bands", {}) or {}
        weights = scoring.get("weights", {}) or {}
        name_search = detection.get("name_search", {}) or {}

        return cls(
            company_suffixes=tuple(_as_suffix_list(norm.get("company_suffixes", []))),
            common_words=frozenset(_as_word_list(norm.get("common_words", []))),
            enabled=bool(norm.get("enabled", True)),
            remove_company_suffixes=bool(norm.get("remove_company_suffixes", True)),
            remove_diacritics=bool(norm.get("remove_diacritics", True)),
            lowercase=bool(norm.get("lowercase", True)),
            trim_whitespace=bool(norm.get("trim_whitespace", True)),
            fuzzy_search_min_length=int(detection.get("fuzzy_search_min_length", 3)),
            confidence_bands=ConfidenceBands(
                very_similar=float(bands.get("very_similar", 0.9)),
                similar=float(bands.get("similar", 0.8)),
                possibly_similar=float(bands.get("possibly_similar", 0.5)),
            ),
            weights=ScoringWeights(
                jaccard=float(weights.get("jaccard", 0.4)),
                token_overlap=float(weights.get("token_overlap", 0.3)),
                character_similarity=float(weights.get("character_similarity", 0.3)),
            ),
            autocomplete_min_length=int(detection.get("autocomplete_min_length", 2)),
            autocomplete_max_results=int(detection.get("autocomplete_max_results", 10)),
            name_search_algorithm=str(name_search.get("algorithm", "levenshtein")),
            name_search_threshold=float(name_search.get("threshold", 0.5)),
        )


def _as_suffix_list(value: Union[Dict[str, List[str]], List[str], None]) -> List[str]:
    if not value:
        return []
    if isinstance(value, dict):
        return flatten_suffixes(value)
    return flatten_suffixes({"all": list(value)})


def _as_word_list(value: Union[Dict[str, List[str]], List[str], None]) -> List[str]:
    if not value:
        return []
    if isinstance(value, dict):
        return flatten_common_words(value)
    return flatten_common_words({"all": list(value)})


def get_default_normalization_config() -> Dict[str, Any]:
    """
    Get default configuration.

    Returns:
        Default configuration dictionary
    """
    return {
        "normalization": {
            "enabled": True,
            "remove_company_suffixes": True,
            "remove_diacritics": True,
            "lowercase": True,
            "trim_whitespace": True,
            "company_suffixes": copy.deepcopy(COMPANY_SUFFIXES),
            "common_words": copy.deepcopy(COMMON_WORDS),
        },
        "duplicate_detection": {
            "fuzzy_search_min_length": 3,
            "autocomplete_min_length": 2,
            "autocomplete_max_results": 10,
            "confidence_bands": {
                "very_similar": 0.9,
                "similar": 0.8,
                "possibly_similar": 0.5,
            },
            "name_search": {
                "algorithm": "levenshtein",
                "threshold": 0.5,
            },
        },
        "scoring": {
            "weights": {
                "jaccard": 0.4,
                "token_overlap": 0.3,
                "character_similarity": 0.3,
            }
        },
    }


def resolve_config_path(config_path: Optional[str] = None) -> str:
    """Explicit path first, then the environment override, then the default."""
    return config_path or os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH


def load_config_dict(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML and merge it over the defaults.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary (defaults when the file is missing or invalid)
    """
    config_path = resolve_config_path(config_path)
    defaults = get_default_normalization_config()

    config_file = Path(config_path)
    if not config_file.exists():
        logger.warning(f"Configuration file {config_path} not found, using defaults")
        return defaults

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load configuration from {config_path}: {e}")
        return defaults

    if not isinstance(user_config, dict):
        logger.error(f"Configuration file {config_path} must contain a mapping")
        return defaults

    merged = merge_configs(defaults, user_config)
    if not validate_normalization_config(merged):
        logger.error(f"Invalid configuration in {config_path}, using defaults")
        return defaults

    logger.info(f"Loaded configuration from {config_path}")
    return merged


def load_normalization_config(config_path: Optional[str] = None) -> NormalizationConfig:
    """
    Load the configuration snapshot used by every CompanyDedupe component.

    Args:
        config_path: Path to configuration file; ``COMPANY_DEDUPE_CONFIG``
            is used when omitted

    Returns:
        Frozen configuration
    """
    return NormalizationConfig.from_dict(load_config_dict(config_path))


def validate_normalization_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration.

    Args:
        config: Configuration dictionary

    Returns:
        True if configuration is valid, False otherwise
    """
    required_sections = ["normalization", "duplicate_detection", "scoring"]

    for section in required_sections:
        if not isinstance(config.get(section), dict):
            logger.error(f"Missing required configuration section: {section}")
            return False

    norm_config = config["normalization"]
    for key in ("company_suffixes", "common_words"):
        if not isinstance(norm_config.get(key, []), (list, dict)):
            logger.error(f"normalization.{key} must be a list or a mapping of lists")
            return False

    for key in ("enabled", "remove_company_suffixes", "remove_diacritics", "lowercase", "trim_whitespace"):
        if not isinstance(norm_config.get(key, True), bool):
            logger.error(f"normalization.{key} must be a boolean")
            return False

    detection = config["duplicate_detection"]
    for key in ("fuzzy_search_min_length", "autocomplete_min_length", "autocomplete_max_results"):
        value = detection.get(key, 0)
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            logger.error(f"duplicate_detection.{key} must be a non-negative integer")
            return False

    bands = detection.get("confidence_bands", {})
    very_similar = bands.get("very_similar", 0.9)
    similar = bands.get("similar", 0.8)
    possibly_similar = bands.get("possibly_similar", 0.5)
    for name, value in (("very_similar", very_similar), ("similar", similar),
                        ("possibly_similar", possibly_similar)):
        if not isinstance(value, (int, float)) or not 0 <= value <= 1:
            logger.error(f"duplicate_detection.confidence_bands.{name} must be a number between 0 and 1")
            return False
    if not possibly_similar <= similar <= very_similar:
        logger.error("duplicate_detection.confidence_bands must satisfy "
                     "possibly_similar <= similar <= very_similar")
        return False

    name_search = detection.get("name_search", {})
    if name_search.get("algorithm", "levenshtein") not in NAME_SEARCH_ALGORITHMS:
        logger.error(f"duplicate_detection.name_search.algorithm must be one of {NAME_SEARCH_ALGORITHMS}")
        return False
    threshold = name_search.get("threshold", 0.5)
    if not isinstance(threshold, (int, float)) or not 0 <= threshold <= 1:
        logger.error("duplicate_detection.name_search.threshold must be a number between 0 and 1")
        return False

    weights = config["scoring"].get("weights", {})
    values = [weights.get(k, 0.0) for k in ("jaccard", "token_overlap", "character_similarity")]
    if any(not isinstance(v, (int, float)) or v < 0 for v in values):
        logger.error("scoring.weights must be non-negative numbers")
        return False
    if abs(sum(values) - 1.0) > 1e-6:
        logger.error(f"scoring.weights must sum to 1.0, got {sum(values):.3f}")
        return False

    logger.info("Configuration validation passed")
    return True


def merge_configs(base_config: Dict[str, Any], override_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge two configuration dictionaries.

    Args:
        base_config: Base configuration
        override_config: Override configuration

    Returns:
        Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def save_normalization_config(config: Dict[str, Any], config_path: str) -> bool:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration dictionary
        config_path: Path to save configuration

    Returns:
        True if successful, False otherwise
    """
    try:
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, "w", encoding="utf-8") as f:
            yaml.safe_dump(config, f, default_flow_style=False, indent=2, allow_unicode=True)

        logger.info(f"Saved configuration to {config_path}")
        return True

    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to save configuration to {config_path}: {e}")
        return False
