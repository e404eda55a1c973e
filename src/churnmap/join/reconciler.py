"""
Column Reconciler & Row Materializer

Builds the merged header from both tables and renders joined pairs into
output rows, one per (commit_id, file_path).
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Iterable, List, Optional, Set, Tuple

from ..utils.logging_utils import get_logger
from ..utils.file_utils import infer_columns
from .engine import JoinedPair
from .resolver import ResolvedColumns

logger = get_logger(__name__)

OUTPUT_KEY_COLUMNS = ("commit_id", "file_path")


@dataclass
class ReconciledHeader:
    """Output header plus the source column behind each data column."""
    header: List[str]
    designite_columns: List[str]
    churn_columns: List[str]
    designite_rename: Dict[str, str] = field(default_factory=dict)
    churn_rename: Dict[str, str] = field(default_factory=dict)

    @property
    def clashes(self) -> List[str]:
        """Churn columns emitted under a suffixed name."""
        return [c for c in self.churn_columns if self.churn_rename[c] != c]


@dataclass
class MaterializedTable:
    header: List[str]
    rows: List[List[str]]
    overwritten: int = 0


def _unique_name(name: str, suffix: str, taken: Set[str]) -> str:
    while name in taken:
        name += suffix
    return name


class ColumnReconciler:
    """
    Computes the merged header and materializes deduplicated rows.

    Example:
        >>> reconciler = ColumnReconciler(columns, clash_suffix="_churn")
        >>> header = reconciler.build_header(designite, churn)
        >>> table = reconciler.materialize(pairs, header)
    """

    def __init__(
        self,
        columns: ResolvedColumns,
        config: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the Column Reconciler.

        Args:
            columns: Resolved key columns of both tables
            config: Optional overrides: 'clash_suffix', 'designite_suffix',
                'designite_drop', 'churn_drop'
        """
        self.columns = columns
        self.config = {
            'clash_suffix': '_churn',
            'designite_suffix': '_designite',
            'designite_drop': ['left_commit_id', 'child_commit'],
            'churn_drop': ['parent_commit', 'index'],
        }

        if config:
            self.config.update({k: v for k, v in config.items() if v is not None})

    def designite_drop(self) -> Set[str]:
        return {
            self.columns.designite_commit,
            *self.config['designite_drop'],
        }

    def churn_drop(self) -> Set[str]:
        drop = {
            self.columns.churn_commit,
            self.columns.churn_new_path,
            *self.config['churn_drop'],
        }
        if self.columns.churn_old_path:
            drop.add(self.columns.churn_old_path)
        return drop

    def build_header(
        self,
        designite: Iterable[Dict[str, str]],
        churn: Iterable[Dict[str, str]]
    ) -> ReconciledHeader:
        """
        Compute the output header.

        Layout: commit_id, file_path, kept Designite columns, kept churn
        columns. A churn column sharing a name with a kept Designite column
        gets the clash suffix. Names are unique in every case; the raw
        Designite path column, named like the unified file_path key, is
        kept as file_path_designite.

        Args:
            designite: Designite table
            churn: Churn table

        Returns:
            ReconciledHeader
        """
        designite_drop = self.designite_drop()
        churn_drop = self.churn_drop()

        des_cols = [c for c in infer_columns(designite) if c not in designite_drop]
        churn_cols = [c for c in infer_columns(churn) if c not in churn_drop]

        taken = set(OUTPUT_KEY_COLUMNS)

        designite_rename = {}
        for column in des_cols:
            name = _unique_name(column, self.config['designite_suffix'], taken)
            designite_rename[column] = name
            taken.add(name)

        clashes = set(des_cols) & set(churn_cols)
        churn_rename = {}
        for column in churn_cols:
            name = column + self.config['clash_suffix'] if column in clashes else column
            name = _unique_name(name, self.config['clash_suffix'], taken)
            churn_rename[column] = name
            taken.add(name)

        header = (
            list(OUTPUT_KEY_COLUMNS)
            + [designite_rename[c] for c in des_cols]
            + [churn_rename[c] for c in churn_cols]
        )

        result = ReconciledHeader(
            header=header,
            designite_columns=des_cols,
            churn_columns=churn_cols,
            designite_rename=designite_rename,
            churn_rename=churn_rename,
        )

        logger.info(
            f"Output header: {len(header)} columns "
            f"({len(des_cols)} Designite, {len(churn_cols)} churn)"
        )
        if result.clashes:
            logger.info(f"  Renamed clashing churn columns: {result.clashes}")

        return result

    def render_row(self, pair: JoinedPair, header: ReconciledHeader) -> List[str]:
        """Values of one joined pair, aligned to the header."""
        row = [pair.commit_id, pair.file_path]
        row.extend(pair.designite.get(c) or "" for c in header.designite_columns)
        row.extend(pair.churn.get(c) or "" for c in header.churn_columns)
        return row

    def materialize(
        self,
        pairs: Iterable[JoinedPair],
        header: ReconciledHeader
    ) -> MaterializedTable:
        """
        Render pairs into rows, one per (commit_id, file_path).

        A later pair with the same key replaces the row's values but keeps
        the position of the first one.

        Args:
            pairs: Joined pairs in output order
            header: Reconciled header

        Returns:
            MaterializedTable
        """
        unique_rows: Dict[Tuple[str, str], List[str]] = {}
        overwritten = 0

        for pair in pairs:
            key = (pair.commit_id, pair.file_path)
            if key in unique_rows:
                overwritten += 1
                logger.debug(f"Duplicate output key {key} - keeping latest values")
            unique_rows[key] = self.render_row(pair, header)

        logger.info(f"Materialized {len(unique_rows)} unique rows ({overwritten} overwritten)")

        return MaterializedTable(
            header=list(header.header),
            rows=list(unique_rows.values()),
            overwritten=overwritten,
        )
