"""
Rank Watcher - PPDB admissions rank monitor.

This package provides functionality to:
- Fetch a student's current rank and quota from the PPDB ranking API
- Compare it with the last rank recorded on disk
- Persist the new rank when it changes
- Notify via Telegram about rank changes and failed checks
"""

__version__ = "1.0.0"
__author__ = "Rank Watcher Team"
