"""
Page checking package for the JLPT page watcher.

This package contains:
- HTML normalization
- Content fingerprinting
- Page fetching
- Key-value state storage
- Change detection
- Push notifications
"""

__version__ = "1.0.0"
