"""
Join Check

Validates a finished mapping before it is reported:
- Header uniqueness and row/header width parity
- Match coverage of the Designite table
- Rows collapsed by (commit_id, file_path) deduplication
"""

from datetime import datetime
from typing import Dict, Any, Optional

from ..utils.logging_utils import get_logger
from ..join.engine import JoinStats
from ..join.reconciler import MaterializedTable

logger = get_logger(__name__)


class JoinChecker:
    """
    Post-join verification.

    Example:
        >>> checker = JoinChecker(config={'min_match_rate': 0.8})
        >>> report = checker.verify(table, stats)
        >>> report['status']
        'pass'
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the Join Checker.

        Args:
            config: Configuration dictionary
        """
        self.config = {
            'min_match_rate': 0.5,  # Warn if fewer eligible Designite rows matched
            'check_header': True,
            'check_coverage': True,
            'check_duplicates': True
        }

        if config:
            self.config.update({
                k: v for k, v in config.items() if k in self.config and v is not None
            })

    def verify(self, table: MaterializedTable, stats: JoinStats) -> Dict[str, Any]:
        """
        Verify a materialized join.

        Args:
            table: Output header and rows
            stats: Join engine statistics for the run

        Returns:
            Verification report
        """
        report = {
            'timestamp': datetime.now().isoformat(),
            'status': 'pass',
            'rows': len(table.rows),
            'columns': len(table.header),
            'join': stats.to_dict(),
            'errors': [],
            'warnings': [],
            'checks': {}
        }

        if self.config['check_header']:
            self._check_header(table, report)

        if self.config['check_coverage']:
            self._check_coverage(stats, report)

        if self.config['check_duplicates']:
            self._check_duplicates(table, report)

        if report['errors']:
            report['status'] = 'fail'
        elif report['warnings']:
            report['status'] = 'pass_with_warnings'

        logger.info(f"Join check: {report['status']}")
        logger.info(f"  Errors: {len(report['errors'])}, Warnings: {len(report['warnings'])}")
        for warning in report['warnings']:
            logger.warning(f"  {warning['message']}")
        for error in report['errors']:
            logger.error(f"  {error['message']}")

        return report

    def _check_header(self, table: MaterializedTable, report: Dict[str, Any]) -> None:
        """Header names are unique and every row matches the header width."""
        seen = set()
        duplicates = []
        for name in table.header:
            if name in seen and name not in duplicates:
                duplicates.append(name)
            seen.add(name)

        width = len(table.header)
        bad_rows = [i for i, row in enumerate(table.rows) if len(row) != width]

        report['checks']['header'] = {
            'duplicate_columns': duplicates,
            'width_mismatches': len(bad_rows),
            'status': 'pass'
        }

        if duplicates:
            report['errors'].append({
                'check': 'header',
                'type': 'duplicate_columns',
                'columns': duplicates,
                'message': f'Duplicate output columns: {duplicates}'
            })
            report['checks']['header']['status'] = 'fail'

        if bad_rows:
            report['errors'].append({
                'check': 'header',
                'type': 'width_mismatch',
                'rows': bad_rows[:10],
                'message': f'{len(bad_rows)} row(s) differ from header width {width}'
            })
            report['checks']['header']['status'] = 'fail'

    def _check_coverage(self, stats: JoinStats, report: Dict[str, Any]) -> None:
        """Share of lookup-eligible Designite rows that found a churn match."""
        eligible = stats.eligible_rows
        matched = eligible - stats.unmatched_rows
        match_rate = matched / eligible if eligible > 0 else 0.0

        report['checks']['coverage'] = {
            'eligible_rows': eligible,
            'matched_rows': matched,
            'match_rate': match_rate,
            'status': 'pass'
        }

        if match_rate < self.config['min_match_rate']:
            report['warnings'].append({
                'check': 'coverage',
                'type': 'low_match_rate',
                'match_rate': match_rate,
                'threshold': self.config['min_match_rate'],
                'message': (
                    f'Only {match_rate:.1%} of Designite rows matched churn rows '
                    f'(threshold {self.config["min_match_rate"]:.1%})'
                )
            })
            report['checks']['coverage']['status'] = 'warning'

    def _check_duplicates(self, table: MaterializedTable, report: Dict[str, Any]) -> None:
        """Rows replaced by a later pair with the same (commit_id, file_path)."""
        report['checks']['duplicates'] = {
            'overwritten_rows': table.overwritten,
            'status': 'pass'
        }

        if table.overwritten:
            report['warnings'].append({
                'check': 'duplicates',
                'type': 'overwritten_rows',
                'overwritten_rows': table.overwritten,
                'message': (
                    f'{table.overwritten} joined pair(s) collapsed onto an existing '
                    f'(commit_id, file_path) row'
                )
            })
            report['checks']['duplicates']['status'] = 'warning'
