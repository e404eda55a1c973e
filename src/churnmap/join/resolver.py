"""
Key Resolver

Locates the key columns (commit id, file path, new/old path) of each
dataset among a list of accepted header spellings.
"""

from dataclasses import dataclass
from typing import Dict, Any, List, Optional, Sequence

from ..utils.logging_utils import get_logger

logger = get_logger(__name__)

REQUIRED_HEADERS_MESSAGE = (
    "Need in Designite: child_commit_id,file_path; in Churn: child_commit,new_path"
)


class MissingColumnsError(ValueError):
    """Required key columns could not be found in one or both datasets."""

    def __init__(self, missing: Dict[str, List[str]]):
        self.missing = missing
        details = "; ".join(
            f"{dataset}: {', '.join(fields)}" for dataset, fields in missing.items()
        )
        super().__init__(
            f"Required headers missing ({details}). {REQUIRED_HEADERS_MESSAGE}"
        )


def resolve_column(records: List[Dict[str, str]], *candidates: str) -> Optional[str]:
    """
    First candidate header present in the table.

    The first record is checked first; if it has none of the candidates
    every record is scanned in order. An empty table resolves to None.

    Example:
        >>> resolve_column([{"commit_id": "c1"}], "child_commit_id", "commit_id")
        'commit_id'
    """
    if not records:
        return None

    first = records[0]
    for candidate in candidates:
        if candidate in first:
            return candidate

    for record in records:
        for candidate in candidates:
            if candidate in record:
                return candidate

    return None


@dataclass(frozen=True)
class ResolvedColumns:
    """Header names of the key columns in both datasets."""
    designite_commit: str
    designite_path: str
    churn_commit: str
    churn_new_path: str
    churn_old_path: Optional[str] = None


class KeyResolver:
    """
    Resolves the key columns of both datasets from configured spellings.

    Example:
        >>> resolver = KeyResolver(config=config.get_section('columns'))
        >>> columns = resolver.resolve(designite, churn)
        >>> columns.churn_new_path
        'new_path'
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the Key Resolver.

        Args:
            config: The 'columns' config section; per dataset a list of
                accepted spellings for each logical field
        """
        self.config = {
            'designite': {
                'commit': ['child_commit_id', 'commit_id'],
                'path': ['file_path'],
            },
            'churn': {
                'commit': ['child_commit', 'commit_id'],
                'new_path': ['new_path'],
                'old_path': ['old_path'],
            },
        }

        if config:
            for dataset, fields in config.items():
                self.config.setdefault(dataset, {}).update(fields)

    def _candidates(self, dataset: str, field: str) -> Sequence[str]:
        return self.config.get(dataset, {}).get(field, [])

    def resolve(
        self,
        designite: List[Dict[str, str]],
        churn: List[Dict[str, str]]
    ) -> ResolvedColumns:
        """
        Resolve all key columns.

        Args:
            designite: Designite table
            churn: Churn table

        Returns:
            ResolvedColumns

        Raises:
            MissingColumnsError: If a required column is absent from either table
        """
        d_commit = resolve_column(designite, *self._candidates('designite', 'commit'))
        d_path = resolve_column(designite, *self._candidates('designite', 'path'))
        c_commit = resolve_column(churn, *self._candidates('churn', 'commit'))
        c_new = resolve_column(churn, *self._candidates('churn', 'new_path'))
        c_old = resolve_column(churn, *self._candidates('churn', 'old_path'))

        missing: Dict[str, List[str]] = {}
        if d_commit is None:
            missing.setdefault('designite', []).append('commit')
        if d_path is None:
            missing.setdefault('designite', []).append('path')
        if c_commit is None:
            missing.setdefault('churn', []).append('commit')
        if c_new is None:
            missing.setdefault('churn', []).append('new_path')

        if missing:
            raise MissingColumnsError(missing)

        if c_old is None:
            logger.info("No old-path column in churn table")

        columns = ResolvedColumns(
            designite_commit=d_commit,
            designite_path=d_path,
            churn_commit=c_commit,
            churn_new_path=c_new,
            churn_old_path=c_old,
        )

        logger.info(
            f"Key columns - Designite: {d_commit}, {d_path}; "
            f"Churn: {c_commit}, {c_new}, {c_old}"
        )

        return columns
