"""
Default lexicons for company name normalization.

Legal company suffixes and generic industry words, grouped by language.
These are the built-in defaults; deployments override them through the
YAML configuration.
"""

from typing import Dict, List

COMPANY_SUFFIXES: Dict[str, List[str]] = {
    "turkish": [
        "A.Ş.", "A.S.", "AŞ", "AS",
        "Ltd.", "LTD.",
        "Şti.", "Sti.", "ŞTİ.", "STİ.",
        "Ltd. Şti.", "Ltd Şti", "LTD. ŞTİ.", "LTD ŞTİ",
    ],
    "english": [
        "Inc.", "INC.", "Inc",
        "LLC", "L.L.C.", "L.L.C",
        "Ltd.", "LTD.", "Ltd",
        "Corp.", "CORP.", "Corp",
        "Corporation", "CORPORATION",
        "Co.", "CO.", "Co",
    ],
    "german": ["GmbH", "GMBH", "AG", "KG", "UG"],
    "french": [
        "SA", "S.A.",
        "SARL", "S.A.R.L.",
        "SAS", "S.A.S.",
        "SNC", "S.N.C.",
    ],
    "spanish": ["S.A.", "SA", "S.L.", "SL", "S.C.", "SC"],
    "italian": ["S.p.A.", "SpA", "SPA", "S.r.l.", "Srl", "SRL"],
}

COMMON_WORDS: Dict[str, List[str]] = {
    "turkish": [
        "tekstil", "kumaş", "fabric", "sanayi", "ticaret", "pazarlama",
        "ithalat", "ihracat", "yapi", "insaat", "makina", "otomotiv",
        "gida", "tarim", "enerji", "teknoloji", "yazilim", "danismanlik",
        "limited", "anonim", "sirket", "şirket", "kollektif",
    ],
    "english": [
        "textile", "fabric", "manufacturing", "industry", "trade", "trading",
        "import", "export", "limited", "corporation", "company", "enterprises",
        "international", "global", "group", "holdings", "partners",
        "solutions", "services", "systems", "technologies", "software",
    ],
    "german": [
        "textil", "gewebe", "industrie", "handel", "handels",
        "gesellschaft", "unternehmen", "holding", "gruppe",
    ],
    "french": [
        "textile", "tissu", "industrie", "commerce", "international",
        "societe", "société", "entreprise", "groupe", "holding",
    ],
    "spanish": [
        "textil", "tejido", "industria", "comercio", "internacional",
        "empresa", "compania", "compañia", "grupo", "holding",
    ],
    "italian": [
        "tessile", "tessuto", "industria", "commercio", "internazionale",
        "societa", "società", "azienda", "gruppo", "holding",
    ],
}


def flatten_suffixes(groups: Dict[str, List[str]]) -> List[str]:
    """Merge per-language suffix lists, keeping first-seen order."""
    merged: List[str] = []
    seen = set()
    for suffixes in groups.values():
        for suffix in suffixes:
            if suffix and suffix not in seen:
                seen.add(suffix)
                merged.append(suffix)
    return merged


def flatten_common_words(groups: Dict[str, List[str]]) -> List[str]:
    """Merge per-language common word lists, lowercased and de-duplicated."""
    merged: List[str] = []
    seen = set()
    for words in groups.values():
        for word in words:
            word = word.strip().lower()
            if word and word not in seen:
                seen.add(word)
                merged.append(word)
    return merged
