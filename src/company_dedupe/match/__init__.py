"""
Matching engine for CompanyDedupe.

Implements token-based similarity scoring and the duplicate decision
engine that combines exact identifier checks with fuzzy name matching.
"""
