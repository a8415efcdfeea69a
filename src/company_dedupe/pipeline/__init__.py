"""
Command-line entry points for CompanyDedupe.
"""
