"""
churnmap - join Designite smell data with churn/refactoring data per (commit, file).
"""

__version__ = "0.1.0"
