"""
Unit tests for normalization modules.
"""

import pytest

from company_dedupe.normalize.config import (
    CONFIG_PATH_ENV,
    NormalizationConfig,
    get_default_normalization_config,
    load_config_dict,
    load_normalization_config,
    merge_configs,
    save_normalization_config,
    validate_normalization_config,
)
from company_dedupe.normalize.text_normalizer import NormalizationResult, TextNormalizer
from company_dedupe.normalize.tokenizer import filter_common_words, shared_tokens, tokenize


class FailingTransliterator:
    def transliterate(self, text):
        raise RuntimeError("transliterator unavailable")


class BrokenTransliterator:
    def transliterate(self, text):
        return None


class LowercaseTransliterator:
    def transliterate(self, text):
        return text.lower()


class TestTextNormalizer:
    """Test cases for company name normalization."""

    def setup_method(self):
        """Setup test fixtures."""
        self.config = NormalizationConfig.default()
        self.normalizer = TextNormalizer(self.config)

    def test_normalize_basic(self):
        """Test suffix removal, transliteration and punctuation cleanup."""
        assert self.normalizer.normalize("İstanbul Tekstil A.Ş.") == "istanbul tekstil"
        assert self.normalizer.normalize("München GmbH") == "munchen"
        assert self.normalizer.normalize("Société Française SA") == "societe francaise"
        assert self.normalizer.normalize("ACME Corp., Inc.") == "acme"
        assert self.normalizer.normalize("  Acme   (Blue)   Tekstil ") == "acme blue tekstil"

    def test_normalize_blank_input(self):
        """Test blank and missing input short-circuits to an empty string."""
        assert self.normalizer.normalize("") == ""
        assert self.normalizer.normalize("   ") == ""
        assert self.normalizer.normalize(None) == ""

    def test_transliterates_other_scripts(self):
        """Test Cyrillic is folded to Latin."""
        assert self.normalizer.normalize("Москва") == "moskva"

    def test_case_and_diacritic_insensitive(self):
        """Test Turkish casing and legal suffix do not affect the canonical form."""
        assert (self.normalizer.normalize("İstanbul Tekstil A.Ş.") ==
                self.normalizer.normalize("istanbul tekstil"))
        assert self.normalizer.are_normalized_equal("İstanbul Tekstil A.Ş.", "ISTANBUL TEKSTIL")
        assert not self.normalizer.are_normalized_equal("Akme Tekstil", "Acme Tekstil")

    def test_idempotent(self):
        """Test normalizing a normalized name changes nothing."""
        samples = [
            "İstanbul Tekstil A.Ş.",
            "ACME Corp., Inc.",
            "Foo (AG)",
            "Foo Ltd Co",
            "  Müller   &  Söhne GmbH ",
            "Москва Ltd",
            "Société Générale S.A.",
            "Straße-Bau_Werk: KG",
            "Atlas",
        ]
        for sample in samples:
            once = self.normalizer.normalize(sample)
            assert self.normalizer.normalize(once) == once, sample

    def test_remove_company_suffixes(self):
        """Test suffix removal tolerates a space, a comma, or both."""
        assert self.normalizer.remove_company_suffixes("Acme Tekstil A.Ş.") == "Acme Tekstil"
        assert self.normalizer.remove_company_suffixes("Acme, Inc.") == "Acme"
        assert self.normalizer.remove_company_suffixes("Acme,Inc.") == "Acme"
        assert self.normalizer.remove_company_suffixes("Acme Ltd. Şti.") == "Acme"
        assert self.normalizer.remove_company_suffixes("BMW ag") == "BMW"

    def test_suffix_inside_word_is_kept(self):
        """Test a suffix glued to the end of a word is not stripped."""
        assert self.normalizer.normalize("Atlas") == "atlas"
        assert self.normalizer.normalize("Mimosa") == "mimosa"

    def test_suffix_removal_disabled(self):
        """Test the suffix toggle."""
        config = NormalizationConfig.from_dict(merge_configs(
            get_default_normalization_config(),
            {"normalization": {"remove_company_suffixes": False}},
        ))
        normalizer = TextNormalizer(config)
        assert normalizer.normalize("Acme GmbH") == "acme gmbh"

    def test_normalization_disabled(self):
        """Test disabled normalization returns input unchanged."""
        config = NormalizationConfig(enabled=False)
        normalizer = TextNormalizer(config)
        assert normalizer.normalize("Acme GmbH") == "Acme GmbH"

    def test_transliteration_failure_degrades(self):
        """Test a failing transliterator falls back to lowercasing."""
        normalizer = TextNormalizer(self.config, transliterator=FailingTransliterator())
        result = normalizer.normalize_with_status("Acme Tekstil A.Ş.")

        assert isinstance(result, NormalizationResult)
        assert result.degraded
        assert result.text == "acme tekstil"
        assert "transliteration" in result.reason

    def test_unexpected_failure_uses_fallback(self):
        """Test any other failure returns the trimmed, lowercased input."""
        normalizer = TextNormalizer(self.config, transliterator=BrokenTransliterator())
        result = normalizer.normalize_with_status("  Acme Tekstil A.Ş. ")

        assert result.degraded
        assert result.text == "acme tekstil a.ş."

    def test_clean_result_not_degraded(self):
        """Test a clean normalization is reported as such."""
        result = self.normalizer.normalize_with_status("Acme Tekstil")
        assert not result.degraded
        assert result.reason is None
        assert str(result) == "acme tekstil"

    def test_diacritics_removed_after_transliteration(self):
        """Test marks left by the transliterator are dropped."""
        normalizer = TextNormalizer(self.config, transliterator=LowercaseTransliterator())
        assert normalizer.normalize("Café Crème") == "cafe creme"


class TestTokenizer:
    """Test cases for tokenization and common-word filtering."""

    def test_tokenize(self):
        """Test tokens are split, de-duplicated and short tokens dropped."""
        assert tokenize("acme a tekstil acme") == frozenset({"acme", "tekstil"})
        assert tokenize("") == frozenset()
        assert tokenize(None) == frozenset()

    def test_filter_common_words(self):
        """Test generic words are removed."""
        tokens = frozenset({"akme", "tekstil"})
        assert filter_common_words(tokens, {"tekstil"}) == frozenset({"akme"})
        assert filter_common_words(tokens, ["tekstil", "sanayi"]) == frozenset({"akme"})

    def test_filter_without_common_words_is_noop(self):
        """Test missing configuration keeps every token."""
        tokens = frozenset({"akme", "tekstil"})
        assert filter_common_words(tokens, set()) == tokens
        assert filter_common_words(tokens, None) == tokens

    def test_shared_tokens(self):
        """Test intersection helper."""
        assert shared_tokens({"akme", "tekstil"}, {"akkayalar", "tekstil"}) == frozenset({"tekstil"})


class TestNormalizationConfig:
    """Test cases for configuration loading and validation."""

    def test_default_config(self):
        """Test defaults include the built-in lexicons."""
        config = NormalizationConfig.default()
        assert "A.Ş." in config.company_suffixes
        assert "GmbH" in config.company_suffixes
        assert "tekstil" in config.common_words
        assert config.fuzzy_search_min_length == 3
        assert config.confidence_bands.very_similar == 0.9
        assert config.weights.jaccard == 0.4

    def test_suffixes_deduplicated(self):
        """Test suffixes shared by several languages appear once."""
        config = NormalizationConfig.default()
        assert config.company_suffixes.count("S.A.") == 1

    def test_missing_file_uses_defaults(self, tmp_path):
        """Test a missing configuration file falls back to defaults."""
        config = load_normalization_config(str(tmp_path / "missing.yaml"))
        assert config == NormalizationConfig.default()

    def test_load_yaml_overrides(self, tmp_path):
        """Test YAML values override defaults and lists replace lists."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "normalization:\n"
            "  common_words: [Foo, bar]\n"
            "duplicate_detection:\n"
            "  fuzzy_search_min_length: 5\n",
            encoding="utf-8",
        )

        config = load_normalization_config(str(config_path))

        assert config.common_words == frozenset({"foo", "bar"})
        assert config.fuzzy_search_min_length == 5
        assert "GmbH" in config.company_suffixes

    def test_invalid_yaml_uses_defaults(self, tmp_path):
        """Test weights that do not sum to one are rejected."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "scoring:\n"
            "  weights:\n"
            "    jaccard: 0.9\n"
            "duplicate_detection:\n"
            "  fuzzy_search_min_length: 7\n",
            encoding="utf-8",
        )

        config = load_normalization_config(str(config_path))
        assert config.fuzzy_search_min_length == 3
        assert config.weights.jaccard == 0.4

    def test_environment_override(self, tmp_path, monkeypatch):
        """Test the configuration path can come from the environment."""
        config_path = tmp_path / "env.yaml"
        config_path.write_text("duplicate_detection:\n  fuzzy_search_min_length: 4\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_PATH_ENV, str(config_path))

        assert load_normalization_config().fuzzy_search_min_length == 4

    def test_validate_bands(self):
        """Test confidence bands must be ordered."""
        config = merge_configs(
            get_default_normalization_config(),
            {"duplicate_detection": {"confidence_bands": {"similar": 0.95}}},
        )
        assert not validate_normalization_config(config)
        assert validate_normalization_config(get_default_normalization_config())

    def test_validate_missing_section(self):
        """Test a missing section is rejected."""
        config = get_default_normalization_config()
        del config["scoring"]
        assert not validate_normalization_config(config)

    def test_merge_configs(self):
        """Test nested merge keeps untouched keys."""
        base = {"a": {"b": 1, "c": 2}, "d": 3}
        merged = merge_configs(base, {"a": {"b": 10}})
        assert merged == {"a": {"b": 10, "c": 2}, "d": 3}

    def test_save_and_reload(self, tmp_path):
        """Test a saved configuration loads back."""
        config = merge_configs(
            get_default_normalization_config(),
            {"duplicate_detection": {"fuzzy_search_min_length": 6}},
        )
        config_path = tmp_path / "nested" / "saved.yaml"

        assert save_normalization_config(config, str(config_path))
        assert load_config_dict(str(config_path))["duplicate_detection"]["fuzzy_search_min_length"] == 6


if __name__ == "__main__":
    pytest.main([__file__])
