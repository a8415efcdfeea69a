"""
CompanyDedupe - Company Registration Duplicate Detection Engine

Normalizes user-typed company names and scores them against existing
company records to stop near-duplicate organizations from being created
under different spellings, legal suffixes, or scripts.
"""

__version__ = "1.0.0"
__author__ = "CompanyDedupe Team"
