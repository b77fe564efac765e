"""
gitcui: a terminal browser for the commits of a git repository.
"""

__version__ = "0.1.0"
