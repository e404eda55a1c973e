"""
Join Engine

Pairs Designite records with churn records in two passes:
1. Exact: same commit and same normalized path
2. Fallback: same commit and same basename, for pairings the exact pass
   did not already produce

A Designite record may pair with any number of churn records.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from ..utils.logging_utils import get_logger
from .normalizer import PathNormalizer, DesigniteKeys, ChurnKeys
from .resolver import ResolvedColumns

logger = get_logger(__name__)

Record = Dict[str, str]
JoinKey = Tuple[str, str]


class MatchTier(str, Enum):
    EXACT = "exact"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class JoinedPair:
    """One Designite record matched to one churn record."""
    designite: Record
    churn: Record
    commit_id: str
    file_path: str
    tier: MatchTier


@dataclass
class JoinStats:
    designite_rows: int = 0
    churn_rows: int = 0
    exact_pairs: int = 0
    fallback_pairs: int = 0
    fallback_skipped: int = 0
    skipped_rows: int = 0
    unmatched_rows: int = 0

    @property
    def eligible_rows(self) -> int:
        """Designite rows that took part in lookup."""
        return self.designite_rows - self.skipped_rows

    def to_dict(self) -> Dict[str, int]:
        return {
            'designite_rows': self.designite_rows,
            'churn_rows': self.churn_rows,
            'exact_pairs': self.exact_pairs,
            'fallback_pairs': self.fallback_pairs,
            'fallback_skipped': self.fallback_skipped,
            'skipped_rows': self.skipped_rows,
            'unmatched_rows': self.unmatched_rows,
        }


@dataclass
class ChurnIndex:
    """Churn record positions grouped by (commit, new path) and (commit, basename)."""
    by_commit_and_new_path: Dict[JoinKey, List[int]] = field(default_factory=lambda: defaultdict(list))
    by_commit_and_basename: Dict[JoinKey, List[int]] = field(default_factory=lambda: defaultdict(list))

    def exact(self, commit: str, path: str) -> List[int]:
        return self.by_commit_and_new_path.get((commit, path), [])

    def fallback(self, commit: str, base: str) -> List[int]:
        return self.by_commit_and_basename.get((commit, base), [])


class JoinEngine:
    """
    Two-tier (exact path, then basename) join of Designite and churn tables.

    Example:
        >>> engine = JoinEngine(columns)
        >>> pairs = engine.join(designite, churn)
        >>> engine.stats.exact_pairs
        12
    """

    def __init__(
        self,
        columns: ResolvedColumns,
        normalizer: Optional[PathNormalizer] = None
    ):
        """
        Initialize the Join Engine.

        Args:
            columns: Resolved key columns of both tables
            normalizer: Path normalizer (a default one is created if omitted)
        """
        self.columns = columns
        self.normalizer = normalizer or PathNormalizer()
        self.stats = JoinStats()

    def build_index(self, churn: List[Record], churn_keys: List[ChurnKeys]) -> ChurnIndex:
        """
        Index churn records by (commit, new path) and (commit, basename).

        Records with an empty commit are indexed like any other; empty keys
        are only excluded on the Designite side at lookup time.

        Args:
            churn: Churn table
            churn_keys: Derived keys aligned with ``churn``

        Returns:
            ChurnIndex holding record positions in table order
        """
        index = ChurnIndex()

        for position, (record, keys) in enumerate(zip(churn, churn_keys)):
            commit = record.get(self.columns.churn_commit) or ""
            index.by_commit_and_new_path[(commit, keys.new_norm)].append(position)
            index.by_commit_and_basename[(commit, keys.new_base)].append(position)

        logger.debug(
            f"Indexed {len(churn)} churn rows: "
            f"{len(index.by_commit_and_new_path)} path keys, "
            f"{len(index.by_commit_and_basename)} basename keys"
        )

        return index

    def join(self, designite: List[Record], churn: List[Record]) -> List[JoinedPair]:
        """
        Match every Designite record against the churn table.

        All exact pairs come first, then all fallback pairs. Within a pass,
        pairs follow Designite row order, then churn row order.

        Args:
            designite: Designite table
            churn: Churn table

        Returns:
            Joined pairs in output order
        """
        self.stats = JoinStats(designite_rows=len(designite), churn_rows=len(churn))

        if not churn:
            logger.warning("Churn table is empty - nothing to join")

        designite_keys = self.normalizer.designite_keys(designite, self.columns.designite_path)
        churn_keys = self.normalizer.churn_keys(
            churn, self.columns.churn_new_path, self.columns.churn_old_path
        )
        index = self.build_index(churn, churn_keys)

        seen: Set[Tuple[str, str, str]] = set()
        matched: Set[int] = set()
        skipped: Set[int] = set()

        exact_pairs = self._exact_pass(
            designite, designite_keys, churn, churn_keys, index, seen, matched, skipped
        )
        fallback_pairs = self._fallback_pass(
            designite, designite_keys, churn, churn_keys, index, seen, matched
        )

        self.stats.exact_pairs = len(exact_pairs)
        self.stats.fallback_pairs = len(fallback_pairs)
        self.stats.skipped_rows = len(skipped)
        self.stats.unmatched_rows = len(designite) - len(skipped) - len(matched)

        logger.info(
            f"Join complete: {len(exact_pairs)} exact, {len(fallback_pairs)} fallback, "
            f"{self.stats.fallback_skipped} fallback candidates already matched exactly"
        )
        if skipped:
            logger.info(f"  {len(skipped)} Designite rows without commit or path skipped")
        if self.stats.unmatched_rows:
            logger.info(f"  {self.stats.unmatched_rows} Designite rows had no churn match")

        return exact_pairs + fallback_pairs

    def _exact_pass(
        self,
        designite: List[Record],
        designite_keys: List[DesigniteKeys],
        churn: List[Record],
        churn_keys: List[ChurnKeys],
        index: ChurnIndex,
        seen: Set[Tuple[str, str, str]],
        matched: Set[int],
        skipped: Set[int]
    ) -> List[JoinedPair]:
        pairs = []

        for position, (record, keys) in enumerate(zip(designite, designite_keys)):
            commit = record.get(self.columns.designite_commit) or ""
            # Rows missing either key are also skipped by the fallback pass,
            # since an empty path always has an empty basename
            if not commit or not keys.file_norm:
                skipped.add(position)
                continue

            for churn_position in index.exact(commit, keys.file_norm):
                new_norm = churn_keys[churn_position].new_norm
                pairs.append(self._pair(
                    record, churn[churn_position], commit, keys, new_norm, MatchTier.EXACT
                ))
                seen.add((commit, keys.file_norm, new_norm))
                matched.add(position)

        return pairs

    def _fallback_pass(
        self,
        designite: List[Record],
        designite_keys: List[DesigniteKeys],
        churn: List[Record],
        churn_keys: List[ChurnKeys],
        index: ChurnIndex,
        seen: Set[Tuple[str, str, str]],
        matched: Set[int]
    ) -> List[JoinedPair]:
        pairs = []

        for position, (record, keys) in enumerate(zip(designite, designite_keys)):
            commit = record.get(self.columns.designite_commit) or ""
            if not commit or not keys.file_base:
                continue

            for churn_position in index.fallback(commit, keys.file_base):
                new_norm = churn_keys[churn_position].new_norm
                if (commit, keys.file_norm, new_norm) in seen:
                    self.stats.fallback_skipped += 1
                    continue

                pairs.append(self._pair(
                    record, churn[churn_position], commit, keys, new_norm, MatchTier.FALLBACK
                ))
                matched.add(position)

        return pairs

    @staticmethod
    def _pair(
        designite_record: Record,
        churn_record: Record,
        commit: str,
        keys: DesigniteKeys,
        new_norm: str,
        tier: MatchTier
    ) -> JoinedPair:
        return JoinedPair(
            designite=designite_record,
            churn=churn_record,
            commit_id=commit,
            file_path=new_norm or keys.file_norm,
            tier=tier,
        )
