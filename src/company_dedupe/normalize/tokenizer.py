"""
Tokenization and common-word filtering for normalized company names.
"""

from typing import FrozenSet, Iterable, Optional

TokenSet = FrozenSet[str]

MIN_TOKEN_LENGTH = 2


def tokenize(normalized_text: Optional[str]) -> TokenSet:
    """
    Split normalized text into a set of word tokens.

    Tokens shorter than two characters are noise ("a", "&", initials) and
    are dropped.

    Args:
        normalized_text: Output of TextNormalizer.normalize

    Returns:
        Set of tokens
    """
    if not normalized_text or not normalized_text.strip():
        return frozenset()

    return frozenset(
        token for token in normalized_text.split()
        if len(token) >= MIN_TOKEN_LENGTH
    )


def filter_common_words(tokens: Iterable[str],
                        common_words: Optional[Iterable[str]]) -> TokenSet:
    """
    Remove generic industry words ("tekstil", "limited", ...) from tokens.

    Args:
        tokens: Token set
        common_words: Lowercase common words; empty or None keeps every token

    Returns:
        Discriminative tokens only
    """
    tokens = frozenset(tokens)
    if not common_words:
        return tokens

    common = common_words if isinstance(common_words, (set, frozenset)) else frozenset(common_words)
    return frozenset(token for token in tokens if token.lower() not in common)


def shared_tokens(tokens1: Iterable[str], tokens2: Iterable[str]) -> TokenSet:
    """Tokens present in both sets."""
    return frozenset(tokens1) & frozenset(tokens2)
