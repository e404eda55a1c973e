"""
Join Builder

Matches Designite and churn records per (commit, file):
- Path normalization
- Key column resolution
- Two-tier join (exact path, then basename)
- Column reconciliation and row materialization
"""

from .normalizer import PathNormalizer, normalize_path, basename
from .resolver import KeyResolver, MissingColumnsError, ResolvedColumns, resolve_column
from .engine import JoinEngine, JoinedPair, JoinStats, MatchTier
from .reconciler import ColumnReconciler, MaterializedTable, ReconciledHeader

__all__ = [
    'PathNormalizer',
    'normalize_path',
    'basename',
    'KeyResolver',
    'MissingColumnsError',
    'ResolvedColumns',
    'resolve_column',
    'JoinEngine',
    'JoinedPair',
    'JoinStats',
    'MatchTier',
    'ColumnReconciler',
    'MaterializedTable',
    'ReconciledHeader',
]
