"""
hn_threads - concurrent Hacker News discussion crawler.
"""

__version__ = "0.1.0"
