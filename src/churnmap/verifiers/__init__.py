"""
Verification checkpoints for churnmap.
"""

from .join_check import JoinChecker

__all__ = ['JoinChecker']
