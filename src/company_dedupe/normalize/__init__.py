"""
Text normalization modules for CompanyDedupe.

Handles canonicalization of company names (legal suffixes, scripts,
diacritics, punctuation) and tokenization for duplicate matching.
"""
