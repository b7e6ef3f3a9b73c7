"""
Scheduler package for the JLPT page checker.

This package contains:
- Page check orchestration (one run)
- Cron scheduling for daemon mode
"""

__version__ = "1.0.0"
