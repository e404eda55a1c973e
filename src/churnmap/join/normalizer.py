"""
Path Normalizer

Canonicalizes file paths from both datasets so they can be compared as
join keys, and derives the per-record keys the join engine indexes on.

Example:
    "src\\main\\A.java"  → "src/main/A.java"
    "src//main///A.java" → "src/main/A.java"
    basename("src/main/A.java") → "A.java"
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from ..utils.logging_utils import get_logger

logger = get_logger(__name__)

SEPARATOR = "/"


def normalize_path(path: Optional[str]) -> str:
    """
    Convert backslashes to forward slashes and collapse repeated separators.

    ``None`` normalizes to "".

    Example:
        >>> normalize_path("src\\\\main//A.java")
        'src/main/A.java'
    """
    if path is None:
        return ""

    normalized = path.replace("\\", SEPARATOR)
    while SEPARATOR * 2 in normalized:
        normalized = normalized.replace(SEPARATOR * 2, SEPARATOR)

    return normalized


def basename(path: Optional[str]) -> str:
    """
    Part of a normalized path after the last separator.

    A path with no separator, or one ending in a separator, is returned
    unchanged.

    Example:
        >>> basename("src/main/A.java")
        'A.java'
        >>> basename("src/main/")
        'src/main/'
    """
    if path is None:
        return ""

    index = path.rfind(SEPARATOR)
    if 0 <= index < len(path) - 1:
        return path[index + 1:]

    return path


@dataclass(frozen=True)
class DesigniteKeys:
    """Derived join keys of one Designite record."""
    file_norm: str
    file_base: str


@dataclass(frozen=True)
class ChurnKeys:
    """Derived join keys of one churn record."""
    new_norm: str
    old_norm: str
    new_base: str


class PathNormalizer:
    """
    Computes derived path keys for whole tables.

    The keys are returned as a side table aligned with the input records by
    position; the loaded records themselves are never modified.

    Example:
        >>> normalizer = PathNormalizer()
        >>> keys = normalizer.designite_keys(records, path_column='file_path')
        >>> keys[0].file_base
        'A.java'
    """

    def designite_keys(
        self,
        records: List[Dict[str, str]],
        path_column: str
    ) -> List[DesigniteKeys]:
        """
        Normalized file path and basename for every Designite record.

        Args:
            records: Designite table
            path_column: Resolved file-path column

        Returns:
            One DesigniteKeys per record, same order
        """
        keys = []
        for record in records:
            file_norm = normalize_path(record.get(path_column))
            keys.append(DesigniteKeys(file_norm=file_norm, file_base=basename(file_norm)))

        logger.debug(f"Normalized {len(keys)} Designite paths")
        return keys

    def churn_keys(
        self,
        records: List[Dict[str, str]],
        new_path_column: str,
        old_path_column: Optional[str] = None
    ) -> List[ChurnKeys]:
        """
        Normalized new/old paths and new-path basename for every churn record.

        Args:
            records: Churn table
            new_path_column: Resolved new-path column
            old_path_column: Resolved old-path column, if the table has one

        Returns:
            One ChurnKeys per record, same order
        """
        keys = []
        for record in records:
            new_norm = normalize_path(record.get(new_path_column))
            old_norm = normalize_path(record.get(old_path_column)) if old_path_column else ""
            keys.append(ChurnKeys(new_norm=new_norm, old_norm=old_norm, new_base=basename(new_norm)))

        logger.debug(f"Normalized {len(keys)} churn paths")
        return keys
