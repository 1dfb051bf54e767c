"""
Fixers - deterministic patchers and suggestion-assisted repair.
"""
